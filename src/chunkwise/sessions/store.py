"""
Session Store - SQLite persistence for sessions.

The schema carries a partial unique index over active rows, so the
database itself refuses a second active session even if two processes
race past the tracker's check.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Protocol

from ..errors import ConflictError, NotFoundError, ValidationError
from .models import Session

logger = logging.getLogger(__name__)


class SessionRepository(Protocol):
	"""
	Persistence interface used by SessionTracker.

	Implemented by:
	- SessionStore
	"""

	def create(self, session: Session) -> None: ...

	def get(self, session_id: str) -> Session: ...

	def get_active(self) -> Optional[Session]: ...

	def update(self, session: Session) -> None: ...

	def list(self, plan_id: Optional[str] = None, limit: int = 50) -> list[Session]: ...

	def get_by_plan(self, plan_id: str) -> list[Session]: ...

	def get_all(self) -> list[Session]: ...

	def delete(self, session_id: str) -> None: ...


def _to_text(dt: Optional[datetime]) -> Optional[str]:
	if dt is None:
		return None
	if dt.tzinfo is None:
		dt = dt.replace(tzinfo=timezone.utc)
	return dt.astimezone(timezone.utc).isoformat()


def _from_text(text: Optional[str]) -> Optional[datetime]:
	if not text:
		return None
	return datetime.fromisoformat(text)


class SessionStore:
	"""SQLite-backed storage for sessions."""

	COLUMNS = (
		"id, plan_id, chunk_id, start_time, end_time, duration_minutes, "
		"notes, artifacts, cards_created, created_at"
	)

	def __init__(self, db_path: Path | str = ""):
		if not db_path:
			from ..config import get_config
			db_path = str(get_config().db_path)
		self.db_path = Path(db_path)
		self.db_path.parent.mkdir(parents=True, exist_ok=True)
		self._ensure_table()

	def _ensure_table(self) -> None:
		"""Create the sessions table if it doesn't exist."""
		with self._connect() as conn:
			conn.execute("""
				CREATE TABLE IF NOT EXISTS sessions (
					id TEXT PRIMARY KEY,
					plan_id TEXT NOT NULL,
					chunk_id TEXT,
					start_time TEXT NOT NULL,
					end_time TEXT,
					duration_minutes INTEGER DEFAULT 0,
					notes TEXT DEFAULT '',
					artifacts TEXT DEFAULT '[]',
					cards_created INTEGER DEFAULT 0,
					created_at TEXT NOT NULL
				)
			""")
			conn.execute("""
				CREATE INDEX IF NOT EXISTS idx_sessions_plan ON sessions(plan_id)
			""")
			conn.execute("""
				CREATE INDEX IF NOT EXISTS idx_sessions_start ON sessions(start_time)
			""")
			conn.execute("""
				CREATE UNIQUE INDEX IF NOT EXISTS idx_sessions_single_active
				ON sessions((end_time IS NULL)) WHERE end_time IS NULL
			""")
		conn.close()

	def _connect(self) -> sqlite3.Connection:
		conn = sqlite3.connect(str(self.db_path))
		conn.row_factory = sqlite3.Row
		return conn

	def _query(self, sql: str, params: tuple | list = ()) -> list[Session]:
		conn = self._connect()
		try:
			rows = conn.execute(sql, params).fetchall()
		finally:
			conn.close()
		return [self._from_row(row) for row in rows]

	@staticmethod
	def _from_row(row: sqlite3.Row) -> Session:
		return Session(
			id=row["id"],
			plan_id=row["plan_id"],
			chunk_id=row["chunk_id"],
			start_time=_from_text(row["start_time"]),
			end_time=_from_text(row["end_time"]),
			duration_minutes=row["duration_minutes"] or 0,
			notes=row["notes"] or "",
			artifacts=json.loads(row["artifacts"] or "[]"),
			cards_created=row["cards_created"] or 0,
			created_at=_from_text(row["created_at"]),
		)

	@staticmethod
	def _values(session: Session) -> dict[str, Any]:
		return {
			"id": session.id,
			"plan_id": session.plan_id,
			"chunk_id": session.chunk_id or None,
			"start_time": _to_text(session.start_time),
			"end_time": _to_text(session.end_time),
			"duration_minutes": session.duration_minutes,
			"notes": session.notes,
			"artifacts": json.dumps(session.artifacts),
			"cards_created": session.cards_created,
			"created_at": _to_text(session.created_at),
		}

	def create(self, session: Session) -> None:
		"""
		Insert a new session.

		Raises:
			ConflictError: if the session is active and another active one exists
			ValidationError: if a session with the same ID exists
		"""
		conn = self._connect()
		try:
			with conn:
				conn.execute(
					f"""
					INSERT INTO sessions ({self.COLUMNS})
					VALUES (:id, :plan_id, :chunk_id, :start_time, :end_time, :duration_minutes,
						:notes, :artifacts, :cards_created, :created_at)
					""",
					self._values(session),
				)
		except sqlite3.IntegrityError as e:
			active = self.get_active() if session.is_active else None
			if active is not None and active.id != session.id:
				raise ConflictError(
					f"active session already exists: {active.id} (plan: {active.plan_id})",
					session_id=active.id,
					plan_id=active.plan_id,
				) from e
			raise ValidationError(f"session already exists: {session.id}", field="id") from e
		finally:
			conn.close()
		logger.debug(f"Created session {session.id} for plan {session.plan_id}")

	def get(self, session_id: str) -> Session:
		"""
		Raises:
			NotFoundError: if no session has this ID
		"""
		rows = self._query(f"SELECT {self.COLUMNS} FROM sessions WHERE id = ?", (session_id,))
		if not rows:
			raise NotFoundError(f"session not found: {session_id}")
		return rows[0]

	def get_active(self) -> Optional[Session]:
		"""The active session, or None. No active session is not an error."""
		rows = self._query(
			f"SELECT {self.COLUMNS} FROM sessions WHERE end_time IS NULL "
			"ORDER BY start_time DESC LIMIT 1"
		)
		return rows[0] if rows else None

	def update(self, session: Session) -> None:
		"""
		Overwrite a stored session.

		Raises:
			NotFoundError: if the session was never created
		"""
		conn = self._connect()
		try:
			with conn:
				cursor = conn.execute(
					"""
					UPDATE sessions
					SET plan_id = :plan_id, chunk_id = :chunk_id, start_time = :start_time,
						end_time = :end_time, duration_minutes = :duration_minutes, notes = :notes,
						artifacts = :artifacts, cards_created = :cards_created
					WHERE id = :id
					""",
					self._values(session),
				)
				changed = cursor.rowcount
		finally:
			conn.close()

		if changed == 0:
			raise NotFoundError(f"session not found: {session.id}")

	def list(self, plan_id: Optional[str] = None, limit: int = 50) -> list[Session]:
		"""Sessions newest first, optionally for a single plan."""
		if plan_id:
			return self._query(
				f"SELECT {self.COLUMNS} FROM sessions WHERE plan_id = ? "
				"ORDER BY start_time DESC LIMIT ?",
				(plan_id, limit),
			)
		return self._query(
			f"SELECT {self.COLUMNS} FROM sessions ORDER BY start_time DESC LIMIT ?",
			(limit,),
		)

	def get_by_plan(self, plan_id: str) -> list[Session]:
		"""All sessions of a plan, oldest first."""
		return self._query(
			f"SELECT {self.COLUMNS} FROM sessions WHERE plan_id = ? ORDER BY start_time",
			(plan_id,),
		)

	def get_all(self) -> list[Session]:
		"""Every session across all plans, oldest first."""
		return self._query(f"SELECT {self.COLUMNS} FROM sessions ORDER BY start_time")

	def delete(self, session_id: str) -> None:
		conn = self._connect()
		try:
			with conn:
				cursor = conn.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
				changed = cursor.rowcount
		finally:
			conn.close()

		if changed == 0:
			raise NotFoundError(f"session not found: {session_id}")
		logger.info(f"Deleted session {session_id}")
