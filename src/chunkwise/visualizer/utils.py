"""Shared utilities for visualizer views."""

from datetime import datetime, timezone
from typing import Optional

from ..plans.models import Status

STATUS_STYLES = {
	Status.NOT_STARTED.value: "dim",
	Status.IN_PROGRESS.value: "yellow",
	Status.COMPLETED.value: "green",
	Status.SKIPPED.value: "dim",
	Status.ARCHIVED.value: "blue",
}

STATUS_ICONS = {
	Status.NOT_STARTED.value: "[dim][ ][/dim]",
	Status.IN_PROGRESS.value: "[yellow][~][/yellow]",
	Status.COMPLETED.value: "[green]\\[x][/green]",
	Status.SKIPPED.value: "[dim][-][/dim]",
}


def status_style(status: str) -> str:
	"""Return a Rich style string for a plan or chunk status."""
	return STATUS_STYLES.get(status, "red")


def format_minutes(minutes: int) -> str:
	"""Format minutes for display. e.g. '45m', '1h 30m', '2h'."""
	hours, mins = divmod(minutes, 60)
	if hours and mins:
		return f"{hours}h {mins}m"
	if hours:
		return f"{hours}h"
	return f"{mins}m"


def format_timestamp(dt: Optional[datetime], now: Optional[datetime] = None) -> str:
	"""Format a datetime as relative time (e.g. '2m ago') or absolute."""
	if dt is None:
		return "-"
	if dt.tzinfo is None:
		dt = dt.replace(tzinfo=timezone.utc)
	now = now or datetime.now(timezone.utc)
	total_secs = int((now - dt).total_seconds())

	if total_secs < 0:
		return dt.astimezone().strftime("%Y-%m-%d %H:%M")
	if total_secs < 60:
		return f"{total_secs}s ago"
	if total_secs < 3600:
		return f"{total_secs // 60}m ago"
	if total_secs < 86400:
		return f"{total_secs // 3600}h ago"
	return f"{total_secs // 86400}d ago"


def progress_bar(fraction: float, width: int = 20) -> str:
	"""Text progress bar such as '[######--------------]'."""
	fraction = min(max(fraction, 0.0), 1.0)
	filled = int(round(fraction * width))
	return "[" + "#" * filled + "-" * (width - filled) + "]"
