"""Rich views for statistics and chunk details."""

from datetime import datetime
from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..plans.models import Chunk, Plan
from ..sessions.models import Session
from ..stats.models import DailyStats, PlanStats, TotalStats
from .session_status import render_session_table
from .utils import STATUS_ICONS, format_minutes, progress_bar, status_style


def _date(value: Optional[datetime]) -> str:
	return value.astimezone().strftime("%Y-%m-%d") if value else "-"


def render_total_stats(stats: TotalStats, console: Optional[Console] = None) -> None:
	"""Render overall learning statistics."""
	console = console or Console()

	lines = [
		"[bold]Learning time[/bold]",
		f"  Total hours:      {stats.total_hours:.1f}",
		f"  Total sessions:   {stats.total_sessions}",
	]
	if stats.total_sessions:
		lines.append(f"  Average session:  {stats.average_session:.0f} minutes")
	lines += [
		"",
		"[bold]Streaks[/bold]",
		f"  Current streak:   {stats.current_streak} days",
		f"  Longest streak:   {stats.longest_streak} days",
		"",
		"[bold]Plans[/bold]",
		f"  Active:           {stats.active_plans}",
		f"  Completed:        {stats.completed_plans}",
	]
	if stats.last_session is not None:
		lines += ["", f"Last session: {_date(stats.last_session)}"]

	console.print(Panel("\n".join(lines), title="Learning Statistics", border_style="cyan"))


def render_plan_stats(stats: PlanStats, console: Optional[Console] = None) -> None:
	"""Render statistics for one plan."""
	console = console or Console()

	style = status_style(stats.status)
	lines = [
		f"[bold]Title:[/bold] {escape(stats.plan_title)}",
		f"[bold]Status:[/bold] [{style}]{stats.status}[/{style}]",
		"",
		f"[bold]Progress:[/bold] {escape(progress_bar(stats.progress))} {stats.progress_percent()}%",
		f"[bold]Chunks:[/bold] {stats.completed_chunks}/{stats.total_chunks} completed",
		f"[bold]Hours:[/bold] {stats.total_hours:.1f} logged of {stats.planned_hours:g} planned",
		f"[bold]Sessions:[/bold] {stats.session_count}",
		f"[bold]Last session:[/bold] {_date(stats.last_session)}",
	]
	console.print(Panel("\n".join(lines), title=f"Stats: {stats.plan_id}", border_style="cyan"))


def render_daily_stats(daily: Iterable[DailyStats], console: Optional[Console] = None) -> None:
	"""Render a per-day breakdown table."""
	console = console or Console()
	daily = list(daily)

	if not daily:
		console.print("[dim]No daily activity in this range.[/dim]")
		return

	table = Table(title="Daily breakdown")
	table.add_column("Day", no_wrap=True)
	table.add_column("Time", justify="right")
	table.add_column("Sessions", justify="right")
	table.add_column("Plans")

	for d in daily:
		table.add_row(d.day.isoformat(), format_minutes(d.minutes), str(d.session_count), ", ".join(d.plans))

	console.print(table)


def render_chunk_detail(
	plan: Plan,
	chunk: Chunk,
	sessions: Iterable[Session],
	now: Optional[datetime] = None,
	console: Optional[Console] = None,
) -> None:
	"""Render one chunk with its logged time and session history."""
	console = console or Console()
	sessions = list(sessions)
	logged = sum(s.duration_minutes for s in sessions if not s.is_active)
	fraction = logged / chunk.duration if chunk.duration else 0.0

	icon = STATUS_ICONS.get(chunk.status, "[red][?][/red]")
	lines = [
		f"{icon} [bold]{escape(chunk.title)}[/bold]",
		f"[bold]Plan:[/bold] {escape(plan.title)} ({plan.id})",
		f"[bold]Status:[/bold] {chunk.status}",
		f"[bold]Time:[/bold] {escape(progress_bar(fraction))} "
		f"{format_minutes(logged)} of {format_minutes(chunk.duration)}",
	]
	if chunk.objectives:
		lines += ["", "[bold]Objectives:[/bold]"] + [f"  - {escape(o)}" for o in chunk.objectives]
	if chunk.resources:
		lines += ["", "[bold]Resources:[/bold]"] + [f"  - {escape(r)}" for r in chunk.resources]
	if chunk.deliverable:
		lines += ["", f"[bold]Deliverable:[/bold] {escape(chunk.deliverable)}"]

	console.print(Panel("\n".join(lines), title=f"Chunk: {chunk.id}", border_style="cyan"))
	render_session_table(
		sorted(sessions, key=lambda s: s.start_time, reverse=True),
		title="Chunk sessions",
		now=now,
		console=console,
	)
