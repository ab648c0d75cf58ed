"""Tests for plan and chunk models."""

from datetime import timedelta

import pytest

from chunkwise.errors import ValidationError
from chunkwise.plans.models import Chunk, Status, slugify

from .helpers import T0, make_plan


class TestChunkValidation:
	def test_valid_chunk(self):
		Chunk(id="c1", title="Intro", duration=30).validate_chunk()

	def test_empty_id(self):
		with pytest.raises(ValidationError) as exc:
			Chunk(id="", title="Intro", duration=30).validate_chunk()
		assert exc.value.field == "id"

	def test_zero_duration(self):
		with pytest.raises(ValidationError) as exc:
			Chunk(id="c1", title="Intro", duration=0).validate_chunk()
		assert exc.value.field == "duration"

	def test_archived_is_not_a_chunk_status(self):
		with pytest.raises(ValidationError, match="invalid status"):
			Chunk(id="c1", title="Intro", duration=30, status="archived").validate_chunk()

	def test_is_done(self):
		assert Chunk(id="c", title="t", status="completed").is_done
		assert Chunk(id="c", title="t", status="skipped").is_done
		assert not Chunk(id="c", title="t", status="in-progress").is_done


class TestPlanValidation:
	def test_valid_plan(self):
		make_plan().validate_plan()

	def test_plan_without_chunks_is_valid(self):
		make_plan(chunks=[]).validate_plan()

	def test_total_hours_must_be_positive(self):
		with pytest.raises(ValidationError) as exc:
			make_plan(total_hours=0).validate_plan()
		assert exc.value.field == "total_hours"

	def test_archived_plan_is_valid(self):
		make_plan(status="archived").validate_plan()

	def test_unknown_status(self):
		with pytest.raises(ValidationError, match="invalid status: paused"):
			make_plan(status="paused").validate_plan()

	def test_updated_before_created(self):
		with pytest.raises(ValidationError) as exc:
			make_plan(updated_at=T0 - timedelta(seconds=1)).validate_plan()
		assert exc.value.field == "updated_at"

	def test_missing_timestamp(self):
		with pytest.raises(ValidationError, match="created timestamp"):
			make_plan(created_at=None).validate_plan()

	def test_invalid_chunk_reports_index(self):
		plan = make_plan()
		plan.chunks[1].duration = 0
		with pytest.raises(ValidationError) as exc:
			plan.validate_plan()
		assert exc.value.chunk_index == 1
		assert exc.value.field == "duration"
		assert "chunk-002" in str(exc.value)

	def test_duplicate_chunk_ids(self):
		plan = make_plan()
		plan.chunks[1].id = "chunk-001"
		with pytest.raises(ValidationError, match="duplicate chunk ID") as exc:
			plan.validate_plan()
		assert exc.value.chunk_index == 1


class TestPlanDerivedValues:
	def test_progress_empty_plan(self):
		plan = make_plan(chunks=[])
		assert plan.progress() == 0.0
		assert plan.next_chunk() is None

	def test_progress_counts_completed_only(self):
		plan = make_plan()
		plan.chunks[0].status = "completed"
		plan.chunks[1].status = "skipped"
		assert plan.progress() == 0.5
		assert plan.progress_percent() == 50
		assert plan.completed_hours() == 1.0
		assert plan.remaining_hours() == 0.0

	def test_total_minutes(self):
		assert make_plan().total_minutes() == 120

	def test_next_chunk_prefers_in_progress(self):
		plan = make_plan()
		plan.chunks[1].status = Status.IN_PROGRESS.value
		assert plan.next_chunk().id == "chunk-002"

	def test_next_chunk_first_not_started(self):
		plan = make_plan()
		plan.chunks[0].status = "completed"
		assert plan.next_chunk().id == "chunk-002"

	def test_get_chunk(self):
		plan = make_plan()
		assert plan.get_chunk("chunk-002").title == "Tokio Basics"
		assert plan.get_chunk("missing") is None


def test_slugify():
	assert slugify("Music Theory (Basics)") == "music-theory-basics"
	assert slugify("  Rust!!  Async ") == "rust-async"
