"""Stats Service - reads sessions and plans and hands them to the calculator."""

import logging
from datetime import datetime
from typing import Callable, Optional

from ..plans.models import utcnow
from ..plans.service import PlanService
from ..sessions.store import SessionRepository
from . import calculator
from .models import DailyStats, PlanStats, TimeRange, TotalStats

logger = logging.getLogger(__name__)


class StatsService:
	"""
	Usage:
		stats = StatsService(SessionStore(db_path), plan_service)
		totals = stats.total_stats(TimeRange.named("this-week"))
	"""

	def __init__(
		self,
		sessions: SessionRepository,
		plans: PlanService,
		clock: Optional[Callable[[], datetime]] = None,
	):
		self.sessions = sessions
		self.plans = plans
		self.clock = clock or (lambda: utcnow().astimezone())

	def _sessions(self, time_range: Optional[TimeRange] = None):
		sessions = self.sessions.get_all()
		if time_range is not None:
			sessions = [s for s in sessions if time_range.contains(s.start_time)]
		return sessions

	def streak_info(self) -> tuple[int, int]:
		"""(current, longest) streak over all sessions, regardless of range."""
		return calculator.calculate_streak(self.sessions.get_all(), self.clock())

	def total_stats(self, time_range: Optional[TimeRange] = None) -> TotalStats:
		"""Totals for the range; streaks always cover all history."""
		now = self.clock()
		stats = calculator.calculate_total_stats(self._sessions(time_range), self.plans.list_plans(), now)
		stats.current_streak, stats.longest_streak = self.streak_info()
		logger.debug(f"Total stats: {stats.total_sessions} sessions, {stats.total_hours:.1f}h")
		return stats

	def plan_stats(self, plan_id: str, time_range: Optional[TimeRange] = None) -> PlanStats:
		"""
		Raises:
			NotFoundError: if the plan does not exist
		"""
		plan = self.plans.get(plan_id)
		return calculator.calculate_plan_stats(plan, self.sessions.get_by_plan(plan_id), time_range)

	def all_plan_stats(self, time_range: Optional[TimeRange] = None) -> list[PlanStats]:
		"""Stats for every readable plan, in plan ID order."""
		sessions = self._sessions(time_range)
		return [calculator.calculate_plan_stats(plan, sessions) for plan in self.plans.list_plans()]

	def daily_stats(self, time_range: Optional[TimeRange] = None) -> list[DailyStats]:
		return calculator.calculate_daily_stats(self._sessions(time_range), tz=self.clock().tzinfo)
