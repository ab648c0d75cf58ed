"""
Session Tracker - starts and stops work sessions.

At most one session is active at a time. Lifecycle of a session:
	(absent) -> start() -> active -> stop() -> completed

Starting a session on a chunk moves that chunk to in-progress, and
stopping one may complete the chunk (see inference.py). Both are
best-effort: their failures are logged and never fail start() or stop().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from ..errors import ConflictError, NotFoundError, ValidationError
from ..plans.accessor import PlanAccessor
from ..plans.models import Status, utcnow
from .inference import ProgressInferencer
from .models import Session
from .store import SessionRepository

logger = logging.getLogger(__name__)


def best_effort(
	label: str,
	fn: Callable[..., Any],
	*args: Any,
	log: logging.Logger = logger,
) -> Any:
	"""
	Run a side effect whose failure must not reach the caller.

	Returns:
		The function's result, or None if it raised
	"""
	try:
		return fn(*args)
	except Exception as e:
		log.warning(f"{label} failed: {e}", exc_info=log.isEnabledFor(logging.DEBUG))
		return None


@dataclass
class TrackerStatus:
	"""Snapshot for status displays."""
	active: Optional[Session]
	recent: list[Session] = field(default_factory=list)
	has_more: bool = False


@dataclass
class ChunkStats:
	"""Sessions recorded against one chunk."""
	session_count: int = 0
	total_minutes: int = 0


class SessionTracker:
	"""
	Session lifecycle engine.

	Usage:
		tracker = SessionTracker(SessionStore(db_path), plans=plan_service)
		session = tracker.start("rust-async", "chunk-001")
		...
		session = tracker.stop(notes="Finished the exercises")
	"""

	def __init__(
		self,
		store: SessionRepository,
		plans: Optional[PlanAccessor] = None,
		clock: Optional[Callable[[], datetime]] = None,
		log: Optional[logging.Logger] = None,
	):
		"""
		Args:
			store: Session persistence
			plans: Optional plan capability; enables the plan-existence check
				and the chunk status transitions
			clock: Returns the current time; defaults to UTC now
			log: Receives best-effort failures
		"""
		self.store = store
		self.plans = plans
		self.clock = clock or utcnow
		self.log = log or logger
		self.inferencer = ProgressInferencer(store, plans) if plans is not None else None

	def start(
		self,
		plan_id: str,
		chunk_id: Optional[str] = None,
		notes: str = "",
	) -> Session:
		"""
		Start a new session.

		Raises:
			ValidationError: if plan_id is empty
			ConflictError: if a session is already active
			NotFoundError: if the plan is unknown
		"""
		if not plan_id:
			raise ValidationError("plan ID cannot be empty", field="plan_id")

		active = self.store.get_active()
		if active is not None:
			raise ConflictError(
				f"active session already exists: {active.id} (plan: {active.plan_id})",
				session_id=active.id,
				plan_id=active.plan_id,
			)

		if self.plans is not None and not self.plans.plan_exists(plan_id):
			raise NotFoundError(f"plan not found: {plan_id}")

		now = self.clock()
		session = Session(
			plan_id=plan_id,
			chunk_id=chunk_id or None,
			start_time=now,
			notes=notes or "",
			created_at=now,
		)
		session.validate_session()
		self.store.create(session)
		logger.info(f"Started session {session.id} for {plan_id}" + (f"/{chunk_id}" if chunk_id else ""))

		if self.plans is not None and session.chunk_id:
			best_effort(
				f"marking chunk {plan_id}/{session.chunk_id} in progress",
				self._mark_in_progress,
				plan_id,
				session.chunk_id,
				log=self.log,
			)

		return session

	def _mark_in_progress(self, plan_id: str, chunk_id: str) -> None:
		chunk = self.plans.get_chunk(plan_id, chunk_id)
		if chunk.status == Status.NOT_STARTED:
			self.plans.set_chunk_status(plan_id, chunk_id, Status.IN_PROGRESS.value)

	def stop(
		self,
		notes: str = "",
		artifacts: Optional[list[str]] = None,
	) -> Session:
		"""
		Complete the active session.

		Raises:
			NotFoundError: if no session is active
			ValidationError: if the clock has not moved past the start time
		"""
		session = self.store.get_active()
		if session is None:
			raise NotFoundError("no active session to stop")

		session.complete(self.clock())
		session.add_notes(notes)
		for artifact in artifacts or []:
			session.add_artifact(artifact)

		session.validate_session()
		self.store.update(session)
		logger.info(f"Stopped session {session.id} after {session.duration_minutes} minutes")

		if self.inferencer is not None and session.chunk_id:
			best_effort(
				f"inferring progress for {session.plan_id}/{session.chunk_id}",
				self.inferencer.infer,
				session.plan_id,
				session.chunk_id,
				log=self.log,
			)

		return session

	def get_active(self) -> Optional[Session]:
		return self.store.get_active()

	def list(self, plan_id: str, limit: int = 20) -> list[Session]:
		"""Most recent sessions of a plan."""
		if not plan_id:
			raise ValidationError("plan ID cannot be empty", field="plan_id")
		return self.store.list(plan_id, limit)

	def get_by_plan(self, plan_id: str) -> list[Session]:
		"""Every session of a plan, oldest first."""
		if not plan_id:
			raise ValidationError("plan ID cannot be empty", field="plan_id")
		return self.store.get_by_plan(plan_id)

	def get_status(self, limit: int = 5) -> TrackerStatus:
		"""
		Active session plus recent history.

		Recent sessions come from the active session's plan when one is
		running, otherwise from all plans.
		"""
		active = self.store.get_active()
		plan_id = active.plan_id if active else None
		recent = self.store.list(plan_id, limit)
		return TrackerStatus(active=active, recent=recent, has_more=len(recent) >= limit)

	def total_duration(self, plan_id: str) -> int:
		"""Minutes logged on a plan by completed sessions."""
		return sum(s.duration_minutes for s in self.get_by_plan(plan_id) if not s.is_active)

	def chunk_sessions(self, plan_id: str, chunk_id: str) -> list[Session]:
		if not chunk_id:
			raise ValidationError("chunk ID cannot be empty", field="chunk_id")
		return [s for s in self.get_by_plan(plan_id) if s.chunk_id == chunk_id]

	def chunk_stats(self, plan_id: str, chunk_id: str) -> ChunkStats:
		sessions = self.chunk_sessions(plan_id, chunk_id)
		return ChunkStats(
			session_count=len(sessions),
			total_minutes=sum(s.duration_minutes for s in sessions if not s.is_active),
		)
