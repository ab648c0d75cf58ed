"""Tests for the session tracker and progress inference."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from chunkwise.errors import ConflictError, NotFoundError, ValidationError
from chunkwise.plans.accessor import ChunkState
from chunkwise.plans.repository import PlanRepository
from chunkwise.plans.service import PlanService
from chunkwise.sessions.inference import ProgressInferencer
from chunkwise.sessions.store import SessionStore
from chunkwise.sessions.tracker import SessionTracker, best_effort

from .helpers import FakeClock, make_plan


@pytest.fixture
def store(tmp_path: Path) -> SessionStore:
	return SessionStore(tmp_path / "chunkwise.db")


@pytest.fixture
def plans(tmp_path: Path) -> PlanService:
	service = PlanService(PlanRepository(tmp_path / "plans"))
	service.create(make_plan())
	return service


@pytest.fixture
def clock() -> FakeClock:
	return FakeClock()


@pytest.fixture
def tracker(store, plans, clock) -> SessionTracker:
	return SessionTracker(store, plans=plans, clock=clock)


def chunk_status(plans: PlanService, chunk_id: str) -> str:
	return plans.get("rust-async").get_chunk(chunk_id).status


class TestStartStop:
	def test_start_creates_active_session(self, tracker, clock):
		session = tracker.start("rust-async", "chunk-001", notes="warming up")
		assert session.is_active
		assert session.start_time == clock.now
		assert session.notes == "warming up"
		assert tracker.get_active().id == session.id

	def test_start_empty_plan_id(self, tracker):
		with pytest.raises(ValidationError):
			tracker.start("")

	def test_start_while_active_conflicts(self, tracker):
		first = tracker.start("rust-async")
		with pytest.raises(ConflictError) as exc:
			tracker.start("rust-async", "chunk-002")
		assert exc.value.session_id == first.id
		assert exc.value.plan_id == "rust-async"

	def test_conflict_checked_before_plan_existence(self, tracker):
		tracker.start("rust-async")
		with pytest.raises(ConflictError):
			tracker.start("no-such-plan")

	def test_start_unknown_plan(self, tracker, store):
		with pytest.raises(NotFoundError):
			tracker.start("no-such-plan")
		assert store.get_active() is None

	def test_start_without_accessor_skips_plan_check(self, store, clock):
		tracker = SessionTracker(store, clock=clock)
		session = tracker.start("anything")
		assert session.plan_id == "anything"

	def test_start_marks_chunk_in_progress(self, tracker, plans):
		tracker.start("rust-async", "chunk-001")
		assert chunk_status(plans, "chunk-001") == "in-progress"
		assert chunk_status(plans, "chunk-002") == "not-started"

	def test_start_leaves_completed_chunk_alone(self, tracker, plans):
		plans.set_chunk_status("rust-async", "chunk-001", "completed")
		tracker.start("rust-async", "chunk-001")
		assert chunk_status(plans, "chunk-001") == "completed"

	def test_stop_without_active(self, tracker):
		with pytest.raises(NotFoundError, match="no active session"):
			tracker.stop()

	def test_stop_computes_duration(self, tracker, clock):
		tracker.start("rust-async")
		clock.advance(minutes=90)
		session = tracker.stop(notes="done", artifacts=["notes.md", ""])
		assert session.duration_minutes == 90
		assert session.notes == "done"
		assert session.artifacts == ["notes.md"]
		assert tracker.get_active() is None

	def test_stop_appends_notes(self, tracker, clock):
		tracker.start("rust-async", notes="plan")
		clock.advance(minutes=5)
		assert tracker.stop(notes="result").notes == "plan\nresult"

	def test_stop_at_start_instant_rejected(self, tracker):
		session = tracker.start("rust-async")
		with pytest.raises(ValidationError):
			tracker.stop()
		assert tracker.get_active().id == session.id

	def test_sub_minute_session(self, tracker, clock):
		tracker.start("rust-async")
		clock.advance(seconds=30)
		assert tracker.stop().duration_minutes == 0


class TestProgressFlow:
	def test_chunk_completes_after_enough_time(self, tracker, plans, clock):
		tracker.start("rust-async", "chunk-001")
		clock.advance(minutes=40)
		tracker.stop()
		assert chunk_status(plans, "chunk-001") == "in-progress"

		clock.advance(minutes=10)
		tracker.start("rust-async", "chunk-001")
		clock.advance(minutes=25)
		tracker.stop()
		assert chunk_status(plans, "chunk-001") == "completed"

		clock.advance(minutes=10)
		tracker.start("rust-async", "chunk-001")
		clock.advance(minutes=15)
		tracker.stop()
		assert chunk_status(plans, "chunk-001") == "completed"

		stats = tracker.chunk_stats("rust-async", "chunk-001")
		assert stats.session_count == 3
		assert stats.total_minutes == 80
		assert tracker.total_duration("rust-async") == 80

	def test_skipped_chunk_stays_skipped(self, tracker, plans, clock):
		plans.set_chunk_status("rust-async", "chunk-002", "skipped")
		tracker.start("rust-async", "chunk-002")
		clock.advance(minutes=120)
		tracker.stop()
		assert chunk_status(plans, "chunk-002") == "skipped"

	def test_plan_level_session_touches_no_chunk(self, tracker, plans, clock):
		tracker.start("rust-async")
		clock.advance(minutes=120)
		tracker.stop()
		assert chunk_status(plans, "chunk-001") == "not-started"
		assert chunk_status(plans, "chunk-002") == "not-started"


class TestBestEffort:
	def test_returns_result(self):
		assert best_effort("add", lambda a, b: a + b, 1, 2) == 3

	def test_swallows_and_logs(self):
		log = MagicMock()

		def boom():
			raise RuntimeError("disk full")

		assert best_effort("saving", boom, log=log) is None
		log.warning.assert_called_once()
		assert "disk full" in log.warning.call_args[0][0]

	def test_accessor_failure_does_not_fail_start_or_stop(self, store, clock):
		accessor = MagicMock()
		accessor.plan_exists.return_value = True
		accessor.get_chunk.return_value = ChunkState(duration=10, status="not-started")
		accessor.set_chunk_status.side_effect = RuntimeError("read-only filesystem")
		log = MagicMock()
		tracker = SessionTracker(store, plans=accessor, clock=clock, log=log)

		session = tracker.start("p", "c1")
		assert store.get(session.id).is_active

		clock.advance(minutes=15)
		stopped = tracker.stop()
		assert stopped.duration_minutes == 15
		assert not store.get(session.id).is_active
		assert log.warning.call_count == 2

	def test_missing_chunk_does_not_fail_start(self, tracker, store):
		session = tracker.start("rust-async", "no-such-chunk")
		assert store.get(session.id).chunk_id == "no-such-chunk"


class TestQueries:
	def test_status_without_active(self, tracker, clock):
		for _ in range(3):
			tracker.start("rust-async")
			clock.advance(minutes=10)
			tracker.stop()
		status = tracker.get_status(limit=5)
		assert status.active is None
		assert len(status.recent) == 3
		assert not status.has_more

	def test_status_scopes_recent_to_active_plan(self, store, clock):
		tracker = SessionTracker(store, clock=clock)
		tracker.start("other")
		clock.advance(minutes=5)
		tracker.stop()
		active = tracker.start("mine")

		status = tracker.get_status()
		assert status.active.id == active.id
		assert {s.plan_id for s in status.recent} == {"mine"}

	def test_list_requires_plan_id(self, tracker):
		with pytest.raises(ValidationError):
			tracker.list("")
		with pytest.raises(ValidationError):
			tracker.chunk_sessions("rust-async", "")

	def test_total_duration_ignores_active(self, tracker, clock):
		tracker.start("rust-async")
		clock.advance(minutes=30)
		tracker.stop()
		tracker.start("rust-async")
		clock.advance(minutes=30)
		assert tracker.total_duration("rust-async") == 30


class TestProgressInferencer:
	def test_infer_is_idempotent(self, store, plans, clock):
		tracker = SessionTracker(store, clock=clock)
		tracker.start("rust-async", "chunk-001")
		clock.advance(minutes=60)
		tracker.stop()

		inferencer = ProgressInferencer(store, plans)
		assert inferencer.logged_minutes("rust-async", "chunk-001") == 60
		assert inferencer.infer("rust-async", "chunk-001") is True
		assert inferencer.infer("rust-async", "chunk-001") is False
		assert chunk_status(plans, "chunk-001") == "completed"

	def test_infer_below_target(self, store, plans, clock):
		tracker = SessionTracker(store, clock=clock)
		tracker.start("rust-async", "chunk-002")
		clock.advance(minutes=59)
		tracker.stop()
		assert ProgressInferencer(store, plans).infer("rust-async", "chunk-002") is False
		assert chunk_status(plans, "chunk-002") == "not-started"
