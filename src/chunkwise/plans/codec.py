"""
Plan document codec.

Converts between Plan objects and the on-disk Markdown format:

```
---
id: rust-async
title: Rust Async Programming
created: 2025-01-15T10:30:00Z
updated: 2025-01-15T10:30:00Z
total_hours: 40.0
status: not-started
tags:
  - rust
---

# Rust Async Programming

## Chunk 1: Futures and Tasks {#chunk-001}

**Duration**: 1 hour
**Status**: not-started
**Objectives**:
- Understand Future
**Resources**:
- The async book
**Deliverable**: Toy executor

---

## Chunk 2: ...
```

The header is YAML. The body is scanned line by line by ChunkScanner, a
small state machine over the four states in ScanState. Both directions are
pure functions; reading and writing files lives in repository.py.
"""

import math
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

import yaml

from ..errors import FormatError
from .models import Chunk, Plan, Status

FRONTMATTER_DELIMITER = "---"

CHUNK_HEADER_RE = re.compile(r"^##\s+Chunk\s+\d+:\s+(.+?)\s+\{#([^}]+)\}\s*$")
DURATION_RE = re.compile(r"^\*\*Duration\*\*:\s*(.+)$")
STATUS_RE = re.compile(r"^\*\*Status\*\*:\s*(.+)$")
DELIVERABLE_RE = re.compile(r"^\*\*Deliverable\*\*:\s*(.+)$")
OBJECTIVES_RE = re.compile(r"^\*\*Objectives\*\*:\s*$")
RESOURCES_RE = re.compile(r"^\*\*Resources\*\*:\s*$")
LIST_ITEM_RE = re.compile(r"^(?:-\*?|\*)(.*)$")

DURATION_VALUE_RE = re.compile(r"^(\d+(?:\.\d+)?)\s+([a-z]+)$")
HOUR_UNITS = frozenset({"hour", "hours", "hr", "hrs", "h"})
MINUTE_UNITS = frozenset({"minute", "minutes", "min", "mins", "m"})


# -- durations --

def _round_half_up(value: float) -> int:
	return int(math.floor(value + 0.5))


def parse_duration(text: str) -> int:
	"""
	Convert a duration such as "1.5 hours" or "90 minutes" to minutes.

	Only "<number> <unit>" is accepted. There is no day unit.

	Raises:
		FormatError: if the text is not a number followed by a known unit
	"""
	normalized = " ".join(text.strip().lower().split())
	match = DURATION_VALUE_RE.match(normalized)
	if not match:
		raise FormatError(f"invalid duration '{text}': expected '<number> <unit>'")

	value = float(match.group(1))
	unit = match.group(2)
	if unit in HOUR_UNITS:
		return _round_half_up(value * 60)
	if unit in MINUTE_UNITS:
		return _round_half_up(value)
	raise FormatError(f"invalid duration '{text}': unknown unit '{unit}'")


def format_duration(minutes: int) -> str:
	"""Render minutes the way plan documents spell them ("1 hour", "1.5 hours")."""
	if minutes % 60 == 0:
		hours = minutes // 60
		return f"{hours} hour" if hours == 1 else f"{hours} hours"
	return f"{minutes / 60:.1f} hours"


# -- body scanner --

class ScanState(str, Enum):
	"""Where the scanner is within the document body."""
	OUTSIDE_CHUNK = "outside-chunk"
	IN_CHUNK = "in-chunk"
	IN_OBJECTIVES = "in-objectives"
	IN_RESOURCES = "in-resources"


def _list_item(line: str) -> Optional[str]:
	"""Return the item text if the line is a list item, else None."""
	if line == FRONTMATTER_DELIMITER:
		return None
	match = LIST_ITEM_RE.match(line)
	if not match:
		return None
	return (match.group(1) or "").strip()


class ChunkScanner:
	"""
	Line-by-line scanner that collects chunks from a plan body.

	Usage:
		scanner = ChunkScanner()
		for line in body.split("\\n"):
			scanner.feed(line)
		chunks = scanner.finish()
	"""

	def __init__(self):
		self.state = ScanState.OUTSIDE_CHUNK
		self.chunks: list[Chunk] = []
		self._current: Optional[Chunk] = None

	def feed(self, raw_line: str) -> ScanState:
		"""Consume one line and return the resulting state."""
		line = raw_line.strip()

		header = CHUNK_HEADER_RE.match(line)
		if header:
			self._close_chunk()
			self._current = Chunk(
				id=header.group(2),
				title=header.group(1),
				status=Status.NOT_STARTED.value,
			)
			self.state = ScanState.IN_CHUNK
			return self.state

		if self.state == ScanState.OUTSIDE_CHUNK or not line:
			return self.state

		chunk = self._current

		if match := DURATION_RE.match(line):
			try:
				chunk.duration = parse_duration(match.group(1))
			except FormatError as e:
				raise FormatError(f"chunk {chunk.id}: {e}") from e
			self.state = ScanState.IN_CHUNK
		elif match := STATUS_RE.match(line):
			chunk.status = match.group(1).strip()
			self.state = ScanState.IN_CHUNK
		elif match := DELIVERABLE_RE.match(line):
			chunk.deliverable = match.group(1).strip()
			self.state = ScanState.IN_CHUNK
		elif OBJECTIVES_RE.match(line):
			self.state = ScanState.IN_OBJECTIVES
		elif RESOURCES_RE.match(line):
			self.state = ScanState.IN_RESOURCES
		elif (item := _list_item(line)) is not None:
			if item and self.state == ScanState.IN_OBJECTIVES:
				chunk.objectives.append(item)
			elif item and self.state == ScanState.IN_RESOURCES:
				chunk.resources.append(item)
		else:
			self.state = ScanState.IN_CHUNK

		return self.state

	def finish(self) -> list[Chunk]:
		"""Close the last chunk and return everything collected."""
		self._close_chunk()
		self.state = ScanState.OUTSIDE_CHUNK
		return self.chunks

	def _close_chunk(self) -> None:
		if self._current is not None:
			self.chunks.append(self._current)
			self._current = None


# -- parse --

def split_frontmatter(text: str) -> tuple[str, str]:
	"""
	Separate the YAML header from the Markdown body.

	Raises:
		FormatError: if either fence is missing
	"""
	lines = text.replace("\r\n", "\n").split("\n")

	if lines[0] != FRONTMATTER_DELIMITER:
		raise FormatError("missing frontmatter delimiter at start")

	for i in range(1, len(lines)):
		if lines[i] == FRONTMATTER_DELIMITER:
			return "\n".join(lines[1:i]), "\n".join(lines[i + 1:])

	raise FormatError("missing closing frontmatter delimiter")


def _parse_timestamp(value: Any, key: str) -> Optional[datetime]:
	if value is None:
		return None
	if isinstance(value, datetime):
		dt = value
	elif isinstance(value, str):
		try:
			dt = datetime.fromisoformat(value.strip())
		except ValueError as e:
			raise FormatError(f"invalid '{key}' timestamp: {value}") from e
	else:
		raise FormatError(f"invalid '{key}' timestamp: {value!r}")

	if dt.tzinfo is None:
		dt = dt.replace(tzinfo=timezone.utc)
	return dt


def _parse_header(header_text: str) -> dict:
	try:
		header = yaml.safe_load(header_text)
	except yaml.YAMLError as e:
		raise FormatError(f"failed to parse frontmatter: {e}") from e

	if header is None:
		header = {}
	if not isinstance(header, dict):
		raise FormatError("frontmatter must be a mapping")

	total_hours = header.get("total_hours", 0)
	if isinstance(total_hours, bool) or not isinstance(total_hours, (int, float)):
		raise FormatError(f"invalid total_hours: {total_hours!r}")

	tags = header.get("tags") or []
	if not isinstance(tags, list):
		raise FormatError("tags must be a list")

	return {
		"id": str(header.get("id") or ""),
		"title": str(header.get("title") or ""),
		"created_at": _parse_timestamp(header.get("created"), "created"),
		"updated_at": _parse_timestamp(header.get("updated"), "updated"),
		"total_hours": float(total_hours),
		"status": str(header.get("status") or ""),
		"tags": [str(t) for t in tags],
	}


def parse(text: str) -> Plan:
	"""
	Parse a plan document.

	The result is not validated; call Plan.validate_plan() for that.

	Raises:
		FormatError: on missing fences, bad YAML or an unparsable duration
	"""
	header_text, body = split_frontmatter(text)
	fields = _parse_header(header_text)

	scanner = ChunkScanner()
	for line in body.split("\n"):
		scanner.feed(line)

	return Plan(**fields, chunks=scanner.finish())


# -- format --

class _FrontmatterDumper(yaml.SafeDumper):
	"""SafeDumper that indents block sequences under their key."""

	def increase_indent(self, flow=False, indentless=False):
		return super().increase_indent(flow, False)


def format_timestamp(dt: datetime) -> str:
	"""RFC3339 text for a datetime; UTC is written with a Z suffix."""
	if dt.tzinfo is None:
		dt = dt.replace(tzinfo=timezone.utc)
	text = dt.isoformat()
	if text.endswith("+00:00"):
		text = text[:-6] + "Z"
	return text


def _represent_datetime(dumper: yaml.SafeDumper, value: datetime) -> yaml.ScalarNode:
	return dumper.represent_scalar("tag:yaml.org,2002:timestamp", format_timestamp(value))


_FrontmatterDumper.add_representer(datetime, _represent_datetime)


def _format_header(plan: Plan) -> str:
	header: dict[str, Any] = {
		"id": plan.id,
		"title": plan.title,
		"created": plan.created_at,
		"updated": plan.updated_at,
		"total_hours": plan.total_hours,
		"status": plan.status,
	}
	if plan.tags:
		header["tags"] = list(plan.tags)

	return yaml.dump(
		header,
		Dumper=_FrontmatterDumper,
		sort_keys=False,
		default_flow_style=False,
		allow_unicode=True,
	)


def _format_chunk(index: int, chunk: Chunk) -> list[str]:
	lines = [
		f"## Chunk {index}: {chunk.title} {{#{chunk.id}}}",
		"",
		f"**Duration**: {format_duration(chunk.duration)}",
		f"**Status**: {chunk.status}",
	]

	if chunk.objectives:
		lines.append("**Objectives**:")
		lines.extend(f"- {obj}" for obj in chunk.objectives)
		lines.append("")

	if chunk.resources:
		lines.append("**Resources**:")
		lines.extend(f"- {res}" for res in chunk.resources)
		lines.append("")

	if chunk.deliverable:
		lines.append(f"**Deliverable**: {chunk.deliverable}")
		lines.append("")

	if lines[-1] != "":
		lines.append("")
	return lines


def format_plan(plan: Plan) -> str:
	"""Serialize a plan to its Markdown document."""
	lines = [FRONTMATTER_DELIMITER]
	lines.extend(_format_header(plan).rstrip("\n").split("\n"))
	lines.extend([FRONTMATTER_DELIMITER, "", f"# {plan.title}", ""])

	for i, chunk in enumerate(plan.chunks, 1):
		if i > 1:
			lines.extend([FRONTMATTER_DELIMITER, ""])
		lines.extend(_format_chunk(i, chunk))

	return "\n".join(lines)
