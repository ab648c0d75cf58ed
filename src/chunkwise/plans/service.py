"""
Plan Service - plan lookups and edits on top of the document repository.

Also implements PlanAccessor so the session layer can check that plans
exist and move chunks between statuses.
"""

import logging
from typing import Optional

from ..errors import ChunkwiseError, NotFoundError, ValidationError
from .accessor import ChunkState
from .models import CHUNK_STATUSES, Chunk, Plan, utcnow
from .repository import PlanRepository

logger = logging.getLogger(__name__)


class PlanService:
	"""Business logic for plans stored as documents."""

	def __init__(self, repository: PlanRepository):
		self.repository = repository

	def get(self, plan_id: str) -> Plan:
		"""
		Load a plan by ID.

		Raises:
			NotFoundError: if the plan does not exist
			FormatError: if its document is malformed
		"""
		return self.repository.load(plan_id)

	def create(self, plan: Plan) -> Plan:
		"""Save a new plan; refuses to overwrite an existing one."""
		if self.repository.exists(plan.id):
			raise ValidationError(f"plan already exists: {plan.id}", field="id")
		self.repository.save(plan)
		logger.info(f"Created plan {plan.id}")
		return plan

	def update(self, plan: Plan) -> Plan:
		"""
		Save changes to an existing plan and bump its updated timestamp.

		Raises:
			ValidationError: if the plan is invalid
			NotFoundError: if the plan does not exist
		"""
		plan.validate_plan()
		if not self.repository.exists(plan.id):
			raise NotFoundError(f"plan not found: {plan.id}")

		plan.updated_at = max(utcnow(), plan.created_at)
		self.repository.save(plan)
		logger.info(f"Updated plan {plan.id}")
		return plan

	def list_plans(self) -> list[Plan]:
		"""Load every valid plan; broken or invalid documents are logged and skipped."""
		plans = []
		for plan_id in self.repository.list_ids():
			try:
				plan = self.repository.load(plan_id)
				plan.validate_plan()
			except ChunkwiseError as e:
				logger.warning(f"Skipping unreadable plan {plan_id}: {e}")
				continue
			plans.append(plan)
		return plans

	def find_chunk(self, plan: Plan, chunk_id: str) -> Chunk:
		chunk = plan.get_chunk(chunk_id)
		if chunk is None:
			raise NotFoundError(f"chunk {chunk_id} not found in plan {plan.id}")
		return chunk

	# -- PlanAccessor --

	def plan_exists(self, plan_id: str) -> bool:
		return self.repository.exists(plan_id)

	def get_chunk(self, plan_id: str, chunk_id: str) -> ChunkState:
		chunk = self.find_chunk(self.get(plan_id), chunk_id)
		return ChunkState(duration=chunk.duration, status=chunk.status)

	def set_chunk_status(self, plan_id: str, chunk_id: str, status: str) -> None:
		"""
		Change one chunk's status and save the plan.

		Raises:
			ValidationError: if the status is not a chunk status
			NotFoundError: if the plan or chunk does not exist
		"""
		if status not in CHUNK_STATUSES:
			raise ValidationError(f"invalid chunk status: {status}", field="status")

		plan = self.get(plan_id)
		chunk = self.find_chunk(plan, chunk_id)
		previous: Optional[str] = chunk.status
		chunk.status = status
		self.update(plan)
		logger.info(f"Chunk {plan_id}/{chunk_id}: {previous} -> {status}")
