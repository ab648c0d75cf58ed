"""Tests for the async plan metadata index."""

from datetime import timedelta
from pathlib import Path

import pytest

from chunkwise.plans.index import PlanIndex

from .helpers import T0, make_plan


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
	return tmp_path / "index.db"


class TestPlanIndex:
	@pytest.mark.asyncio
	async def test_upsert_and_get(self, db_path):
		index = PlanIndex(db_path)
		try:
			plan = make_plan()
			plan.chunks[0].status = "completed"
			await index.upsert(plan, "/plans/rust-async.md")

			record = await index.get("rust-async")
			assert record is not None
			assert record.title == "Rust Async Programming"
			assert record.tags == ["rust", "async"]
			assert record.chunk_count == 2
			assert record.progress == 0.5
			assert record.created_at == "2025-01-15T10:30:00Z"
			assert record.file_path == "/plans/rust-async.md"
		finally:
			await index.close()

	@pytest.mark.asyncio
	async def test_get_missing(self, db_path):
		index = PlanIndex(db_path)
		try:
			assert await index.get("nope") is None
		finally:
			await index.close()

	@pytest.mark.asyncio
	async def test_upsert_replaces(self, db_path):
		index = PlanIndex(db_path)
		try:
			await index.upsert(make_plan(), "/p/rust-async.md")
			await index.upsert(make_plan(title="New title"), "/p/rust-async.md")
			records = await index.search()
			assert len(records) == 1
			assert records[0].title == "New title"
		finally:
			await index.close()

	@pytest.mark.asyncio
	async def test_search_filters(self, db_path):
		index = PlanIndex(db_path)
		try:
			await index.upsert(make_plan("a", status="in-progress", tags=["rust"]), "/p/a.md")
			await index.upsert(make_plan("b", status="in-progress", tags=["go"]), "/p/b.md")
			await index.upsert(make_plan("c", status="archived", tags=["rust"]), "/p/c.md")

			assert {r.id for r in await index.search(status="in-progress")} == {"a", "b"}
			assert {r.id for r in await index.search(tag="rust")} == {"a", "c"}
			assert [r.id for r in await index.search(status="in-progress", tag="rust")] == ["a"]
		finally:
			await index.close()

	@pytest.mark.asyncio
	async def test_search_most_recent_first(self, db_path):
		index = PlanIndex(db_path)
		try:
			await index.upsert(make_plan("old"), "/p/old.md")
			await index.upsert(make_plan("new", updated_at=T0 + timedelta(days=1)), "/p/new.md")
			assert [r.id for r in await index.search()] == ["new", "old"]
		finally:
			await index.close()

	@pytest.mark.asyncio
	async def test_delete(self, db_path):
		index = PlanIndex(db_path)
		try:
			await index.upsert(make_plan(), "/p/rust-async.md")
			await index.delete("rust-async")
			assert await index.get("rust-async") is None
		finally:
			await index.close()

	@pytest.mark.asyncio
	async def test_rebuild_replaces_everything(self, db_path):
		index = PlanIndex(db_path)
		try:
			await index.upsert(make_plan("stale"), "/p/stale.md")
			count = await index.rebuild([
				(make_plan("a"), "/p/a.md"),
				(make_plan("b"), "/p/b.md"),
			])
			assert count == 2
			assert sorted(r.id for r in await index.search()) == ["a", "b"]
		finally:
			await index.close()

	@pytest.mark.asyncio
	async def test_reopen_keeps_data(self, db_path):
		index = PlanIndex(db_path)
		await index.upsert(make_plan(), "/p/rust-async.md")
		await index.close()

		reopened = PlanIndex(db_path)
		try:
			assert (await reopened.get("rust-async")).id == "rust-async"
		finally:
			await reopened.close()
