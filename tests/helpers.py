"""Shared test fixtures and helpers for chunkwise tests."""

from datetime import datetime, timedelta, timezone

from chunkwise.plans.models import Chunk, Plan

T0 = datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)


def make_plan(plan_id: str = "rust-async", **overrides) -> Plan:
	"""A valid two-chunk plan."""
	fields = dict(
		id=plan_id,
		title="Rust Async Programming",
		created_at=T0,
		updated_at=T0,
		total_hours=2.0,
		status="not-started",
		tags=["rust", "async"],
		chunks=[
			Chunk(
				id="chunk-001",
				title="Futures and Tasks",
				duration=60,
				objectives=["Understand Future", "Write a poll loop"],
				resources=["The async book"],
				deliverable="Toy executor",
			),
			Chunk(id="chunk-002", title="Tokio Basics", duration=60),
		],
	)
	fields.update(overrides)
	return Plan(**fields)


class FakeClock:
	"""Manually advanced clock for session tests."""

	def __init__(self, start: datetime = T0):
		self.now = start

	def __call__(self) -> datetime:
		return self.now

	def advance(self, minutes: float = 0, seconds: float = 0) -> datetime:
		self.now = self.now + timedelta(minutes=minutes, seconds=seconds)
		return self.now
