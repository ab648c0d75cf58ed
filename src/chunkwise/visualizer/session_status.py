"""Rich views for the active session and session history."""

from datetime import datetime
from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..sessions.models import Session
from ..sessions.tracker import TrackerStatus
from .utils import format_minutes, format_timestamp


def _target(session: Session) -> str:
	if session.chunk_id:
		return f"{session.plan_id} ({session.chunk_id})"
	return session.plan_id


def render_session_table(
	sessions: Iterable[Session],
	title: str = "Sessions",
	now: Optional[datetime] = None,
	console: Optional[Console] = None,
) -> None:
	"""Render sessions newest first."""
	console = console or Console()
	sessions = list(sessions)

	if not sessions:
		console.print("[dim]No sessions recorded yet.[/dim]")
		return

	table = Table(title=title)
	table.add_column("Session", style="cyan", no_wrap=True)
	table.add_column("Plan")
	table.add_column("Started")
	table.add_column("Duration", justify="right")
	table.add_column("Notes")

	for s in sessions:
		if s.is_active:
			duration = f"[yellow]{s.elapsed_time(now)} (active)[/yellow]"
		else:
			duration = format_minutes(s.duration_minutes)
		first_note = s.notes.splitlines()[0] if s.notes else ""
		table.add_row(
			s.id[:8],
			_target(s),
			format_timestamp(s.start_time, now),
			duration,
			escape(first_note),
		)

	console.print(table)


def render_status(
	status: TrackerStatus,
	now: Optional[datetime] = None,
	console: Optional[Console] = None,
) -> None:
	"""Render the active session (if any) and recent sessions."""
	console = console or Console()

	active = status.active
	if active is not None:
		lines = [
			f"[bold]Plan:[/bold] {_target(active)}",
			f"[bold]Started:[/bold] {active.start_time.astimezone().strftime('%H:%M')}",
			f"[bold]Elapsed:[/bold] {active.elapsed_time(now)}",
		]
		if active.notes:
			lines.append(f"[bold]Notes:[/bold] {escape(active.notes)}")
		console.print(Panel("\n".join(lines), title="Active session", border_style="green"))
	else:
		console.print("[dim]No active session.[/dim]")

	console.print()
	recent = [s for s in status.recent if active is None or s.id != active.id]
	render_session_table(recent, title="Recent sessions", now=now, console=console)
	if status.has_more:
		console.print("[dim]Older sessions not shown.[/dim]")
