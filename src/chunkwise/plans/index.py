"""
Plan Index - SQLite-backed metadata index of plan documents.

The documents are the source of truth. The index only caches header
fields and progress so plans can be listed and filtered without parsing
every file, and it can always be rebuilt from the documents.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

import aiosqlite

from .codec import format_timestamp
from .models import Plan

logger = logging.getLogger(__name__)


@dataclass
class PlanRecord:
	"""Indexed metadata for one plan."""
	id: str
	title: str
	created_at: str
	updated_at: str
	total_hours: float
	status: str
	file_path: str
	tags: list[str] = field(default_factory=list)
	chunk_count: int = 0
	progress: float = 0.0

	@classmethod
	def from_plan(cls, plan: Plan, file_path: str) -> "PlanRecord":
		return cls(
			id=plan.id,
			title=plan.title,
			created_at=format_timestamp(plan.created_at),
			updated_at=format_timestamp(plan.updated_at),
			total_hours=plan.total_hours,
			status=plan.status,
			file_path=file_path,
			tags=list(plan.tags),
			chunk_count=len(plan.chunks),
			progress=plan.progress(),
		)

	@classmethod
	def from_row(cls, row: aiosqlite.Row) -> "PlanRecord":
		return cls(
			id=row["id"],
			title=row["title"],
			created_at=row["created_at"],
			updated_at=row["updated_at"],
			total_hours=row["total_hours"],
			status=row["status"],
			file_path=row["file_path"],
			tags=json.loads(row["tags"] or "[]"),
			chunk_count=row["chunk_count"],
			progress=row["progress"],
		)


class PlanIndex:
	"""
	Async metadata index.

	Usage:
		index = PlanIndex(config.db_path)
		await index.init()
		await index.upsert(plan, str(repo.path(plan.id)))
		records = await index.search(status="in-progress")
		await index.close()
	"""

	def __init__(self, db_path: Path | str):
		self.db_path = Path(db_path)
		self.db_path.parent.mkdir(parents=True, exist_ok=True)
		self._db: Optional[aiosqlite.Connection] = None

	async def init(self):
		"""Open the connection and create the schema."""
		self._db = await aiosqlite.connect(str(self.db_path))
		self._db.row_factory = aiosqlite.Row

		await self._db.execute("""
			CREATE TABLE IF NOT EXISTS plan_index (
				id TEXT PRIMARY KEY,
				title TEXT NOT NULL,
				created_at TEXT NOT NULL,
				updated_at TEXT NOT NULL,
				total_hours REAL,
				status TEXT NOT NULL,
				tags TEXT DEFAULT '[]',
				chunk_count INTEGER DEFAULT 0,
				progress REAL DEFAULT 0.0,
				file_path TEXT NOT NULL UNIQUE
			)
		""")

		await self._db.execute("""
			CREATE INDEX IF NOT EXISTS idx_plan_index_status ON plan_index(status)
		""")

		await self._db.commit()
		logger.debug(f"Plan index initialized: {self.db_path}")

	async def close(self):
		"""Close the database connection."""
		if self._db:
			await self._db.close()
			self._db = None

	async def _conn(self) -> aiosqlite.Connection:
		if not self._db:
			await self.init()
		return self._db

	async def upsert(self, plan: Plan, file_path: str) -> PlanRecord:
		"""Insert or replace the record for a plan."""
		db = await self._conn()
		record = PlanRecord.from_plan(plan, file_path)
		await self._write(db, record)
		await db.commit()
		return record

	async def _write(self, db: aiosqlite.Connection, record: PlanRecord) -> None:
		await db.execute(
			"""
			INSERT OR REPLACE INTO plan_index
			(id, title, created_at, updated_at, total_hours, status, tags, chunk_count, progress, file_path)
			VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
			""",
			(
				record.id,
				record.title,
				record.created_at,
				record.updated_at,
				record.total_hours,
				record.status,
				json.dumps(record.tags),
				record.chunk_count,
				record.progress,
				record.file_path,
			)
		)

	async def get(self, plan_id: str) -> Optional[PlanRecord]:
		"""Return the record for a plan, or None."""
		db = await self._conn()
		async with db.execute(
			"SELECT * FROM plan_index WHERE id = ?",
			(plan_id,)
		) as cursor:
			row = await cursor.fetchone()

		return PlanRecord.from_row(row) if row else None

	async def search(
		self,
		status: Optional[str] = None,
		tag: Optional[str] = None,
	) -> list[PlanRecord]:
		"""
		List plans, most recently updated first.

		Args:
			status: Only plans with this status
			tag: Only plans carrying this tag
		"""
		db = await self._conn()

		conditions = []
		params = []
		if status:
			conditions.append("status = ?")
			params.append(status)

		where_clause = " AND ".join(conditions) if conditions else "1=1"

		async with db.execute(
			f"SELECT * FROM plan_index WHERE {where_clause} ORDER BY updated_at DESC, id",
			params
		) as cursor:
			rows = await cursor.fetchall()

		records = [PlanRecord.from_row(row) for row in rows]
		if tag:
			# Tags are a JSON array, filter after decoding
			records = [r for r in records if tag in r.tags]
		return records

	async def delete(self, plan_id: str) -> None:
		db = await self._conn()
		await db.execute("DELETE FROM plan_index WHERE id = ?", (plan_id,))
		await db.commit()

	async def rebuild(self, entries: Iterable[tuple[Plan, str]]) -> int:
		"""
		Replace the whole index with the given (plan, file_path) pairs.

		Returns:
			Number of plans indexed
		"""
		db = await self._conn()
		await db.execute("DELETE FROM plan_index")
		count = 0
		for plan, file_path in entries:
			await self._write(db, PlanRecord.from_plan(plan, file_path))
			count += 1
		await db.commit()
		logger.info(f"Rebuilt plan index with {count} plans")
		return count
