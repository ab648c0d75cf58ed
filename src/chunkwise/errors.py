"""Error types shared by the plan and session layers."""

from typing import Optional


class ChunkwiseError(Exception):
	"""Base class for all chunkwise errors."""
	pass


class FormatError(ChunkwiseError):
	"""Raised when a plan document is malformed."""
	pass


class ValidationError(ChunkwiseError):
	"""Raised when a plan or session violates an invariant."""

	def __init__(
		self,
		message: str,
		field: Optional[str] = None,
		chunk_index: Optional[int] = None,
	):
		super().__init__(message)
		self.field = field
		self.chunk_index = chunk_index


class ConflictError(ChunkwiseError):
	"""Raised when a session is started while another one is active."""

	def __init__(self, message: str, session_id: str, plan_id: str):
		super().__init__(message)
		self.session_id = session_id
		self.plan_id = plan_id


class NotFoundError(ChunkwiseError):
	"""Raised when a plan, chunk or session does not exist."""
	pass
