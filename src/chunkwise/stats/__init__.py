"""Stats module - totals, streaks, daily activity and Markdown reports."""

from .calculator import (
	active_days,
	calculate_daily_stats,
	calculate_plan_stats,
	calculate_streak,
	calculate_total_stats,
	streak_breaks,
)
from .models import DailyStats, PlanStats, TimeRange, TotalStats
from .service import StatsService

__all__ = [
	"DailyStats",
	"PlanStats",
	"TimeRange",
	"TotalStats",
	"StatsService",
	"active_days",
	"calculate_daily_stats",
	"calculate_plan_stats",
	"calculate_streak",
	"calculate_total_stats",
	"streak_breaks",
]
