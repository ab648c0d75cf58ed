"""
Session model.

A session is one interval of work against a plan (and optionally a chunk).
It is created active (no end time, zero duration) and completed exactly
once.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..errors import ValidationError
from ..plans.models import utcnow


def new_session_id() -> str:
	return str(uuid.uuid4())


def floor_minutes(start: datetime, end: datetime) -> int:
	"""Whole minutes between two instants, rounded down."""
	return int((end - start).total_seconds() // 60)


class Session(BaseModel):
	"""A tracked work session."""
	id: str = Field(default_factory=new_session_id)
	plan_id: str = Field(description="Plan the session belongs to")
	chunk_id: Optional[str] = Field(default=None, description="Optional chunk within the plan")
	start_time: datetime = Field(default_factory=utcnow)
	end_time: Optional[datetime] = Field(default=None, description="None while the session is active")
	duration_minutes: int = Field(default=0)
	notes: str = Field(default="")
	artifacts: list[str] = Field(default_factory=list, description="URLs or file paths")
	cards_created: int = Field(default=0)
	created_at: datetime = Field(default_factory=utcnow)

	@property
	def is_active(self) -> bool:
		return self.end_time is None

	def calculate_duration(self) -> int:
		"""Minutes between start and end; 0 while active."""
		if self.end_time is None:
			return 0
		return floor_minutes(self.start_time, self.end_time)

	def elapsed_minutes(self, now: Optional[datetime] = None) -> int:
		"""Running time for an active session, stored duration otherwise."""
		if self.end_time is None:
			return max(0, floor_minutes(self.start_time, now or utcnow()))
		return self.duration_minutes

	def elapsed_time(self, now: Optional[datetime] = None) -> str:
		"""Elapsed time as "1h 05m" or "45m"."""
		hours, mins = divmod(self.elapsed_minutes(now), 60)
		if hours > 0:
			return f"{hours}h {mins:02d}m"
		return f"{mins}m"

	def complete(self, end_time: datetime) -> None:
		"""
		End the session and compute its duration.

		Raises:
			ValidationError: if already complete, or end_time is not after start_time
		"""
		if not self.is_active:
			raise ValidationError(f"session {self.id} is already complete", field="end_time")
		if end_time <= self.start_time:
			raise ValidationError("end time must be after start time", field="end_time")

		self.end_time = end_time
		self.duration_minutes = self.calculate_duration()

	def add_notes(self, notes: str) -> None:
		"""Append notes on a new line, keeping what is already there."""
		if not notes:
			return
		if self.notes:
			self.notes += "\n" + notes
		else:
			self.notes = notes

	def add_artifact(self, artifact: str) -> None:
		if artifact:
			self.artifacts.append(artifact)

	def validate_session(self) -> None:
		"""
		Check the lifecycle invariants.

		Active: no end time and zero duration. Completed: end strictly after
		start and duration equal to the whole minutes in between.
		"""
		if not self.id:
			raise ValidationError("session ID cannot be empty", field="id")
		if not self.plan_id:
			raise ValidationError("plan ID cannot be empty", field="plan_id")

		if self.end_time is None:
			if self.duration_minutes != 0:
				raise ValidationError(
					f"active session should have zero duration, got {self.duration_minutes}",
					field="duration_minutes",
				)
		else:
			if self.end_time <= self.start_time:
				raise ValidationError("end time must be after start time", field="end_time")
			expected = self.calculate_duration()
			if self.duration_minutes != expected:
				raise ValidationError(
					f"duration mismatch: stored {self.duration_minutes} minutes, "
					f"calculated {expected} minutes",
					field="duration_minutes",
				)

		if self.cards_created < 0:
			raise ValidationError(
				f"cards created cannot be negative, got {self.cards_created}",
				field="cards_created",
			)
