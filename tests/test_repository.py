"""Tests for plan document storage and the plan service."""

from pathlib import Path

import pytest

from chunkwise.errors import FormatError, NotFoundError, ValidationError
from chunkwise.plans.accessor import ChunkState, PlanAccessor
from chunkwise.plans.repository import PlanRepository
from chunkwise.plans.service import PlanService

from .helpers import T0, make_plan


@pytest.fixture
def repo(tmp_path: Path) -> PlanRepository:
	return PlanRepository(tmp_path / "plans")


@pytest.fixture
def service(repo: PlanRepository) -> PlanService:
	return PlanService(repo)


class TestPlanRepository:
	def test_creates_directory(self, tmp_path: Path):
		PlanRepository(tmp_path / "nested" / "plans")
		assert (tmp_path / "nested" / "plans").is_dir()

	def test_save_and_load(self, repo):
		plan = make_plan()
		path = repo.save(plan)
		assert path == repo.plans_dir / "rust-async.md"
		assert repo.exists("rust-async")
		assert repo.load("rust-async") == plan

	def test_save_invalid_writes_nothing(self, repo):
		with pytest.raises(ValidationError):
			repo.save(make_plan(total_hours=0))
		assert not repo.exists("rust-async")

	def test_load_missing(self, repo):
		with pytest.raises(NotFoundError):
			repo.load("nope")

	def test_load_malformed(self, repo):
		repo.path("broken").write_text("no frontmatter here")
		with pytest.raises(FormatError):
			repo.load("broken")

	def test_load_rejects_id_mismatch(self, repo):
		repo.save(make_plan())
		repo.path("copy").write_text(repo.path("rust-async").read_text())
		with pytest.raises(FormatError, match="plan ID mismatch"):
			repo.load("copy")

	def test_delete(self, repo):
		repo.save(make_plan())
		repo.delete("rust-async")
		assert not repo.exists("rust-async")
		with pytest.raises(NotFoundError):
			repo.delete("rust-async")

	def test_list_ids_sorted(self, repo):
		repo.save(make_plan("b-plan"))
		repo.save(make_plan("a-plan"))
		(repo.plans_dir / "notes.txt").write_text("ignored")
		assert repo.list_ids() == ["a-plan", "b-plan"]

	def test_empty_id_does_not_exist(self, repo):
		assert not repo.exists("")


class TestPlanService:
	def test_create_refuses_overwrite(self, service):
		service.create(make_plan())
		with pytest.raises(ValidationError, match="already exists"):
			service.create(make_plan())

	def test_update_bumps_timestamp(self, service):
		service.create(make_plan())
		plan = service.get("rust-async")
		plan.title = "Renamed"
		service.update(plan)

		reloaded = service.get("rust-async")
		assert reloaded.title == "Renamed"
		assert reloaded.updated_at > T0
		assert reloaded.created_at == T0

	def test_update_missing(self, service):
		with pytest.raises(NotFoundError):
			service.update(make_plan())

	def test_update_invalid(self, service):
		service.create(make_plan())
		with pytest.raises(ValidationError):
			service.update(make_plan(title=""))

	def test_list_plans_skips_broken(self, service, repo):
		service.create(make_plan("good"))
		repo.path("bad").write_text("---\nid: bad\n")
		plans = service.list_plans()
		assert [p.id for p in plans] == ["good"]

	def test_list_plans_skips_plan_without_timestamps(self, service, repo):
		service.create(make_plan("good"))
		repo.path("no-dates").write_text(
			"---\nid: no-dates\ntitle: No dates\ntotal_hours: 3\nstatus: not-started\n---\n"
		)
		assert [p.id for p in service.list_plans()] == ["good"]

	def test_list_plans_skips_mismatched_id(self, service, repo):
		service.create(make_plan("good"))
		repo.path("renamed").write_text(repo.path("good").read_text())
		assert [p.id for p in service.list_plans()] == ["good"]

	def test_find_chunk_missing(self, service):
		with pytest.raises(NotFoundError, match="chunk nope"):
			service.find_chunk(make_plan(), "nope")


class TestPlanAccessor:
	def test_service_satisfies_protocol(self, service):
		accessor: PlanAccessor = service
		assert accessor.plan_exists("rust-async") is False

	def test_get_chunk_state(self, service):
		service.create(make_plan())
		assert service.get_chunk("rust-async", "chunk-001") == ChunkState(duration=60, status="not-started")

	def test_set_chunk_status_persists(self, service):
		service.create(make_plan())
		service.set_chunk_status("rust-async", "chunk-002", "skipped")
		assert service.get("rust-async").get_chunk("chunk-002").status == "skipped"

	def test_set_chunk_status_rejects_archived(self, service):
		service.create(make_plan())
		with pytest.raises(ValidationError):
			service.set_chunk_status("rust-async", "chunk-001", "archived")

	def test_set_chunk_status_unknown_chunk(self, service):
		service.create(make_plan())
		with pytest.raises(NotFoundError):
			service.set_chunk_status("rust-async", "missing", "completed")

	def test_set_chunk_status_unknown_plan(self, service):
		with pytest.raises(NotFoundError):
			service.set_chunk_status("missing", "chunk-001", "completed")
