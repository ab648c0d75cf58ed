"""Narrow plan capability consumed by the session layer."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ChunkState:
	"""What the session layer needs to know about a chunk."""
	duration: int
	status: str


class PlanAccessor(Protocol):
	"""
	Read/write access to chunk status, without exposing whole plans.

	Implemented by:
	- PlanService
	"""

	def plan_exists(self, plan_id: str) -> bool:
		"""Return True if the plan is known."""
		...

	def get_chunk(self, plan_id: str, chunk_id: str) -> ChunkState:
		"""Return the chunk's target duration and status."""
		...

	def set_chunk_status(self, plan_id: str, chunk_id: str, status: str) -> None:
		"""Persist a new status for the chunk."""
		...
