"""
Stats Models - aggregate views over sessions and plans.

All values are computed on demand from the session store and plan
documents; nothing here is persisted.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field

from ..errors import ValidationError

RANGE_NAMES = ("all", "today", "this-week", "this-month")


class TimeRange(BaseModel):
	"""Inclusive interval used to filter sessions by start time."""
	start: datetime
	end: datetime

	def contains(self, instant: datetime) -> bool:
		return self.start <= instant <= self.end

	@classmethod
	def named(cls, name: str, now: Optional[datetime] = None) -> "TimeRange":
		"""
		Build one of the named ranges ending at `now`.

		Day boundaries follow `now`'s timezone (local time by default).
		Weeks start on Monday.

		Raises:
			ValidationError: for an unknown range name
		"""
		now = now or datetime.now().astimezone()
		midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

		if name == "all":
			return cls(start=datetime(1970, 1, 1, tzinfo=timezone.utc), end=now)
		if name == "today":
			return cls(start=midnight, end=now)
		if name == "this-week":
			return cls(start=midnight - timedelta(days=now.weekday()), end=now)
		if name == "this-month":
			return cls(start=midnight.replace(day=1), end=now)
		raise ValidationError(
			f"invalid time range: {name} (supported: {', '.join(RANGE_NAMES)})",
			field="range",
		)


class TotalStats(BaseModel):
	"""Totals across every plan."""
	total_hours: float = Field(default=0.0, description="Logged time of completed sessions")
	total_sessions: int = Field(default=0, description="Completed sessions")
	active_plans: int = Field(default=0, description="Plans not started or in progress")
	completed_plans: int = Field(default=0)
	current_streak: int = Field(default=0, description="Consecutive active days ending today or yesterday")
	longest_streak: int = Field(default=0)
	average_session: float = Field(default=0.0, description="Mean session length in minutes")
	last_session: Optional[datetime] = Field(default=None)

	def validate_stats(self) -> None:
		"""Raise ValidationError if the numbers contradict each other."""
		for name in ("total_hours", "total_sessions", "active_plans", "completed_plans",
				"current_streak", "longest_streak", "average_session"):
			if getattr(self, name) < 0:
				raise ValidationError(f"{name} cannot be negative", field=name)
		if self.current_streak > self.longest_streak:
			raise ValidationError(
				f"current streak ({self.current_streak}) cannot exceed "
				f"longest streak ({self.longest_streak})",
				field="current_streak",
			)
		if self.total_sessions == 0 and self.total_hours > 0:
			raise ValidationError("total hours should be 0 when no sessions exist", field="total_hours")


class PlanStats(BaseModel):
	"""Logged time and chunk progress for one plan."""
	plan_id: str
	plan_title: str
	status: str
	total_hours: float = Field(default=0.0, description="Logged time of completed sessions")
	planned_hours: float = Field(default=0.0)
	session_count: int = Field(default=0)
	completed_chunks: int = Field(default=0)
	total_chunks: int = Field(default=0)
	progress: float = Field(default=0.0, description="Completed chunk fraction, 0.0 to 1.0")
	last_session: Optional[datetime] = Field(default=None)

	def progress_percent(self) -> int:
		return int(self.progress * 100)

	def validate_stats(self) -> None:
		if not self.plan_id:
			raise ValidationError("plan ID cannot be empty", field="plan_id")
		if self.completed_chunks > self.total_chunks:
			raise ValidationError(
				f"completed chunks ({self.completed_chunks}) cannot exceed "
				f"total chunks ({self.total_chunks})",
				field="completed_chunks",
			)
		if not 0.0 <= self.progress <= 1.0:
			raise ValidationError(f"progress must be between 0 and 1, got {self.progress:.2f}", field="progress")


class DailyStats(BaseModel):
	"""Activity on one calendar day."""
	day: date
	minutes: int = Field(default=0)
	session_count: int = Field(default=0)
	plans: list[str] = Field(default_factory=list, description="Plan IDs in first-seen order")

	@property
	def hours(self) -> float:
		return self.minutes / 60
