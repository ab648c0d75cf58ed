"""
Plan Models - Pydantic schemas for time-boxed learning plans.

A plan is an ordered list of chunks. Each chunk is a time-boxed unit of
work with a target duration in minutes. Chunk order is meaningful: it
decides which chunk comes next.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from ..errors import ValidationError


class Status(str, Enum):
	"""Status of a plan or chunk."""
	NOT_STARTED = "not-started"
	IN_PROGRESS = "in-progress"
	COMPLETED = "completed"
	SKIPPED = "skipped"
	ARCHIVED = "archived"


PLAN_STATUSES = frozenset(s.value for s in Status)

# Archived applies to whole plans only
CHUNK_STATUSES = PLAN_STATUSES - {Status.ARCHIVED.value}


def utcnow() -> datetime:
	"""Current time as an aware UTC datetime."""
	return datetime.now(timezone.utc)


def slugify(topic: str) -> str:
	"""
	Convert a topic into a filesystem-safe plan ID.

	"Music Theory (Basics)" -> "music-theory-basics"
	"""
	slug = re.sub(r"[^a-z0-9]+", "-", topic.lower())
	return slug.strip("-")


class Chunk(BaseModel):
	"""A single time-boxed unit of work within a plan."""
	id: str = Field(description="Chunk identifier, unique within the plan")
	title: str = Field(description="Short description of the chunk")
	duration: int = Field(default=0, description="Target duration in minutes")
	status: str = Field(default=Status.NOT_STARTED.value)
	objectives: list[str] = Field(default_factory=list)
	resources: list[str] = Field(default_factory=list)
	deliverable: Optional[str] = Field(default=None)

	def validate_chunk(self) -> None:
		"""Raise ValidationError for the first invalid field."""
		if not self.id:
			raise ValidationError("chunk ID cannot be empty", field="id")
		if not self.title:
			raise ValidationError("chunk title cannot be empty", field="title")
		if self.duration <= 0:
			raise ValidationError(
				f"duration must be positive, got {self.duration}", field="duration"
			)
		if self.status not in CHUNK_STATUSES:
			raise ValidationError(f"invalid status: {self.status}", field="status")

	@property
	def is_done(self) -> bool:
		"""Completed and skipped chunks need no more work."""
		return self.status in (Status.COMPLETED.value, Status.SKIPPED.value)


class Plan(BaseModel):
	"""
	A learning plan.

	Plans live on disk as Markdown documents with a YAML header (see
	codec.py). Derived values (progress, remaining hours, next chunk) are
	computed from the chunk list and never stored.
	"""
	id: str = Field(description="Plan slug, unique across plans")
	title: str = Field(description="Human readable title")
	created_at: Optional[datetime] = Field(default_factory=utcnow)
	updated_at: Optional[datetime] = Field(default_factory=utcnow)
	total_hours: float = Field(default=0.0, description="User estimate of the total effort")
	status: str = Field(default=Status.NOT_STARTED.value)
	tags: list[str] = Field(default_factory=list)
	chunks: list[Chunk] = Field(default_factory=list)

	def validate_plan(self) -> None:
		"""
		Check every invariant of the plan and its chunks.

		Raises:
			ValidationError: for the first violation found
		"""
		if not self.id:
			raise ValidationError("plan ID cannot be empty", field="id")
		if not self.title:
			raise ValidationError("plan title cannot be empty", field="title")
		if self.total_hours <= 0:
			raise ValidationError(
				f"total hours must be positive, got {self.total_hours:.1f}",
				field="total_hours",
			)
		if self.status not in PLAN_STATUSES:
			raise ValidationError(f"invalid status: {self.status}", field="status")
		if self.created_at is None:
			raise ValidationError("created timestamp cannot be empty", field="created_at")
		if self.updated_at is None:
			raise ValidationError("updated timestamp cannot be empty", field="updated_at")
		if self.updated_at < self.created_at:
			raise ValidationError("updated cannot be before created", field="updated_at")

		seen: set[str] = set()
		for i, chunk in enumerate(self.chunks):
			try:
				chunk.validate_chunk()
			except ValidationError as e:
				raise ValidationError(
					f"chunk {i} ({chunk.id}): {e}",
					field=e.field,
					chunk_index=i,
				) from e
			if chunk.id in seen:
				raise ValidationError(
					f"duplicate chunk ID: {chunk.id}",
					field="id",
					chunk_index=i,
				)
			seen.add(chunk.id)

	def get_chunk(self, chunk_id: str) -> Optional[Chunk]:
		"""Find a chunk by ID."""
		for chunk in self.chunks:
			if chunk.id == chunk_id:
				return chunk
		return None

	def progress(self) -> float:
		"""Fraction of chunks completed, between 0.0 and 1.0."""
		if not self.chunks:
			return 0.0
		completed = len([c for c in self.chunks if c.status == Status.COMPLETED])
		return completed / len(self.chunks)

	def progress_percent(self) -> int:
		return int(self.progress() * 100)

	def total_minutes(self) -> int:
		return sum(c.duration for c in self.chunks)

	def completed_hours(self) -> float:
		"""Hours of target time in completed chunks."""
		minutes = sum(c.duration for c in self.chunks if c.status == Status.COMPLETED)
		return minutes / 60

	def remaining_hours(self) -> float:
		"""Hours of target time in chunks that are neither completed nor skipped."""
		minutes = sum(c.duration for c in self.chunks if not c.is_done)
		return minutes / 60

	def next_chunk(self) -> Optional[Chunk]:
		"""The chunk to work on next: first in progress, else first not started."""
		for chunk in self.chunks:
			if chunk.status == Status.IN_PROGRESS:
				return chunk
		for chunk in self.chunks:
			if chunk.status == Status.NOT_STARTED:
				return chunk
		return None
