"""Promote chunks to completed once enough session time has accumulated."""

import logging

from ..plans.accessor import PlanAccessor
from ..plans.models import Status
from .store import SessionRepository

logger = logging.getLogger(__name__)


class ProgressInferencer:
	"""
	Marks a chunk completed when the completed sessions recorded against it
	add up to at least its target duration.

	Completed and skipped chunks are never touched, so calling infer()
	again after a promotion is always a no-op.
	"""

	def __init__(self, sessions: SessionRepository, plans: PlanAccessor):
		self.sessions = sessions
		self.plans = plans

	def logged_minutes(self, plan_id: str, chunk_id: str) -> int:
		"""Total minutes of completed sessions for one chunk."""
		return sum(
			s.duration_minutes
			for s in self.sessions.get_by_plan(plan_id)
			if s.chunk_id == chunk_id and not s.is_active
		)

	def infer(self, plan_id: str, chunk_id: str) -> bool:
		"""
		Check one chunk and complete it if its time is used up.

		Returns:
			True if the chunk was promoted to completed
		"""
		chunk = self.plans.get_chunk(plan_id, chunk_id)
		if chunk.status in (Status.COMPLETED, Status.SKIPPED):
			return False

		total = self.logged_minutes(plan_id, chunk_id)
		if total < chunk.duration:
			logger.debug(f"Chunk {plan_id}/{chunk_id}: {total}/{chunk.duration} minutes logged")
			return False

		self.plans.set_chunk_status(plan_id, chunk_id, Status.COMPLETED.value)
		logger.info(f"Chunk {plan_id}/{chunk_id} completed after {total} minutes")
		return True
