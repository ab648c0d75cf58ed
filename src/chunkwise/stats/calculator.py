"""
Pure statistics functions over sessions and plans.

Days are calendar days of a session's start time in a given timezone
(`tzinfo=None` means local time). A streak is a run of consecutive days
with at least one session.
"""

from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Optional

from ..plans.models import Plan, Status
from ..sessions.models import Session
from .models import DailyStats, PlanStats, TimeRange, TotalStats


def _day(instant: datetime, tz: Optional[tzinfo]) -> date:
	return instant.astimezone(tz).date()


def _completed(sessions: Iterable[Session]) -> list[Session]:
	return [s for s in sessions if not s.is_active]


def _in_range(sessions: Iterable[Session], time_range: Optional[TimeRange]) -> list[Session]:
	if time_range is None:
		return list(sessions)
	return [s for s in sessions if time_range.contains(s.start_time)]


def active_days(sessions: Iterable[Session], tz: Optional[tzinfo] = None) -> list[date]:
	"""Sorted unique days with at least one session."""
	return sorted({_day(s.start_time, tz) for s in sessions})


def find_streaks(days: list[date]) -> list[int]:
	"""Lengths of the runs of consecutive days in a sorted day list."""
	if not days:
		return []

	streaks = []
	run = 1
	for prev, current in zip(days, days[1:]):
		if current - prev == timedelta(days=1):
			run += 1
		else:
			streaks.append(run)
			run = 1
	streaks.append(run)
	return streaks


def streak_breaks(sessions: Iterable[Session], tz: Optional[tzinfo] = None) -> list[date]:
	"""Days without activity that fall between the first and last active day."""
	days = active_days(sessions, tz)
	breaks = []
	for prev, current in zip(days, days[1:]):
		gap = (current - prev).days
		breaks.extend(prev + timedelta(days=d) for d in range(1, gap))
	return breaks


def calculate_streak(sessions: Iterable[Session], now: Optional[datetime] = None) -> tuple[int, int]:
	"""
	Current and longest streak, in days.

	The current streak is the last run if it ends today or yesterday
	(relative to `now`, in `now`'s timezone), else 0.

	Returns:
		(current_streak, longest_streak)
	"""
	now = now or datetime.now().astimezone()
	days = active_days(sessions, now.tzinfo)
	streaks = find_streaks(days)
	if not streaks:
		return 0, 0

	today = now.date()
	current = streaks[-1] if today - days[-1] <= timedelta(days=1) else 0
	return current, max(streaks)


def calculate_total_stats(
	sessions: Iterable[Session],
	plans: Iterable[Plan],
	now: Optional[datetime] = None,
) -> TotalStats:
	"""Totals over completed sessions; streaks count every session's day."""
	sessions = list(sessions)
	completed = _completed(sessions)
	stats = TotalStats()

	if completed:
		minutes = sum(s.duration_minutes for s in completed)
		stats.total_hours = minutes / 60
		stats.total_sessions = len(completed)
		stats.average_session = minutes / len(completed)
	if sessions:
		stats.last_session = max(s.start_time for s in sessions)

	for plan in plans:
		if plan.status in (Status.NOT_STARTED, Status.IN_PROGRESS):
			stats.active_plans += 1
		elif plan.status == Status.COMPLETED:
			stats.completed_plans += 1

	stats.current_streak, stats.longest_streak = calculate_streak(sessions, now)
	return stats


def calculate_plan_stats(
	plan: Plan,
	sessions: Iterable[Session],
	time_range: Optional[TimeRange] = None,
) -> PlanStats:
	"""Stats for one plan from the sessions recorded against it."""
	own = _in_range((s for s in sessions if s.plan_id == plan.id), time_range)
	completed = _completed(own)

	return PlanStats(
		plan_id=plan.id,
		plan_title=plan.title,
		status=plan.status,
		total_hours=sum(s.duration_minutes for s in completed) / 60,
		planned_hours=plan.total_hours,
		session_count=len(completed),
		completed_chunks=len([c for c in plan.chunks if c.status == Status.COMPLETED]),
		total_chunks=len(plan.chunks),
		progress=plan.progress(),
		last_session=max((s.start_time for s in own), default=None),
	)


def calculate_daily_stats(
	sessions: Iterable[Session],
	time_range: Optional[TimeRange] = None,
	tz: Optional[tzinfo] = None,
) -> list[DailyStats]:
	"""Completed sessions grouped by start day, oldest day first."""
	by_day: dict[date, DailyStats] = {}
	for s in _completed(_in_range(sessions, time_range)):
		day = _day(s.start_time, tz)
		daily = by_day.setdefault(day, DailyStats(day=day))
		daily.minutes += s.duration_minutes
		daily.session_count += 1
		if s.plan_id not in daily.plans:
			daily.plans.append(s.plan_id)

	return [by_day[day] for day in sorted(by_day)]
