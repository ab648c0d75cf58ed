"""Filesystem storage for plan documents (one Markdown file per plan)."""

import logging
from pathlib import Path

from ..errors import FormatError, NotFoundError
from .codec import format_plan, parse
from .models import Plan

logger = logging.getLogger(__name__)


class PlanRepository:
	"""
	Reads and writes plan documents under a single directory.

	Usage:
		repo = PlanRepository(config.plans_dir)
		repo.save(plan)
		plan = repo.load("rust-async")
	"""

	SUFFIX = ".md"

	def __init__(self, plans_dir: Path | str):
		self.plans_dir = Path(plans_dir)
		self.plans_dir.mkdir(parents=True, exist_ok=True)

	def path(self, plan_id: str) -> Path:
		"""Path of the document for a plan ID."""
		return self.plans_dir / f"{plan_id}{self.SUFFIX}"

	def exists(self, plan_id: str) -> bool:
		return bool(plan_id) and self.path(plan_id).is_file()

	def save(self, plan: Plan) -> Path:
		"""
		Validate and write a plan.

		Raises:
			ValidationError: if the plan is invalid (nothing is written)
		"""
		plan.validate_plan()
		path = self.path(plan.id)
		path.write_text(format_plan(plan), encoding="utf-8")
		logger.debug(f"Saved plan {plan.id} to {path}")
		return path

	def load(self, plan_id: str) -> Plan:
		"""
		Read and parse a plan.

		Raises:
			NotFoundError: if no document exists for the ID
			FormatError: if the document is malformed or its header ID
				does not match the file name
		"""
		path = self.path(plan_id)
		if not path.is_file():
			raise NotFoundError(f"plan not found: {plan_id}")

		plan = parse(path.read_text(encoding="utf-8"))
		if plan.id != plan_id:
			raise FormatError(f"plan ID mismatch: {path.name} declares id '{plan.id}'")
		return plan

	def delete(self, plan_id: str) -> None:
		path = self.path(plan_id)
		if not path.is_file():
			raise NotFoundError(f"plan not found: {plan_id}")
		path.unlink()
		logger.info(f"Deleted plan {plan_id}")

	def list_ids(self) -> list[str]:
		"""IDs of all plan documents, sorted."""
		return sorted(p.stem for p in self.plans_dir.glob(f"*{self.SUFFIX}") if p.is_file())
