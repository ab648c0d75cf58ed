"""Tests for the Session model."""

from datetime import timedelta

import pytest

from chunkwise.errors import ValidationError
from chunkwise.sessions.models import Session, floor_minutes

from .helpers import T0


def make_session(**overrides) -> Session:
	fields = dict(plan_id="rust-async", chunk_id="chunk-001", start_time=T0, created_at=T0)
	fields.update(overrides)
	return Session(**fields)


def test_new_session_is_active():
	session = make_session()
	assert session.is_active
	assert session.duration_minutes == 0
	assert session.calculate_duration() == 0
	assert len(session.id) == 36
	session.validate_session()


def test_ids_are_unique():
	assert make_session().id != make_session().id


def test_floor_minutes():
	assert floor_minutes(T0, T0 + timedelta(minutes=5, seconds=59)) == 5


class TestComplete:
	def test_ninety_minutes(self):
		session = make_session()
		session.complete(T0 + timedelta(minutes=90))
		assert not session.is_active
		assert session.duration_minutes == 90
		session.validate_session()

	def test_partial_minutes_round_down(self):
		session = make_session()
		session.complete(T0 + timedelta(seconds=59))
		assert session.duration_minutes == 0
		session.validate_session()

	def test_end_equal_to_start_rejected(self):
		session = make_session()
		with pytest.raises(ValidationError, match="after start"):
			session.complete(T0)
		assert session.is_active

	def test_end_before_start_rejected(self):
		with pytest.raises(ValidationError):
			make_session().complete(T0 - timedelta(minutes=1))

	def test_complete_twice_rejected(self):
		session = make_session()
		session.complete(T0 + timedelta(minutes=10))
		with pytest.raises(ValidationError, match="already complete"):
			session.complete(T0 + timedelta(minutes=20))
		assert session.duration_minutes == 10


class TestValidateSession:
	def test_empty_plan_id(self):
		with pytest.raises(ValidationError) as exc:
			make_session(plan_id="").validate_session()
		assert exc.value.field == "plan_id"

	def test_active_with_duration(self):
		with pytest.raises(ValidationError, match="zero duration"):
			make_session(duration_minutes=5).validate_session()

	def test_duration_mismatch(self):
		session = make_session(end_time=T0 + timedelta(minutes=30), duration_minutes=29)
		with pytest.raises(ValidationError, match="duration mismatch"):
			session.validate_session()

	def test_negative_cards(self):
		with pytest.raises(ValidationError):
			make_session(cards_created=-1).validate_session()


class TestNotesAndArtifacts:
	def test_add_notes_appends_on_new_line(self):
		session = make_session(notes="first")
		session.add_notes("second")
		session.add_notes("")
		assert session.notes == "first\nsecond"

	def test_add_notes_to_empty(self):
		session = make_session()
		session.add_notes("only")
		assert session.notes == "only"

	def test_add_artifact_skips_empty(self):
		session = make_session()
		session.add_artifact("https://example.com/pr/1")
		session.add_artifact("")
		assert session.artifacts == ["https://example.com/pr/1"]


class TestElapsed:
	def test_active_elapsed(self):
		session = make_session()
		assert session.elapsed_minutes(T0 + timedelta(minutes=65)) == 65
		assert session.elapsed_time(T0 + timedelta(minutes=65)) == "1h 05m"
		assert session.elapsed_time(T0 + timedelta(minutes=45)) == "45m"

	def test_clock_behind_start_is_zero(self):
		assert make_session().elapsed_minutes(T0 - timedelta(minutes=3)) == 0

	def test_completed_uses_stored_duration(self):
		session = make_session()
		session.complete(T0 + timedelta(minutes=30))
		assert session.elapsed_minutes(T0 + timedelta(hours=5)) == 30
