"""Rich views for plan progress visualization."""

from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from ..plans.index import PlanRecord
from ..plans.models import Plan
from .utils import STATUS_ICONS, format_minutes, progress_bar, status_style


def render_plan_progress(plan: Plan, console: Optional[Console] = None) -> None:
	"""Render a plan as a Rich Tree of chunks."""
	console = console or Console()

	completed = len([c for c in plan.chunks if c.status == "completed"])
	tree = Tree(
		f"[bold]{escape(plan.title)}[/bold]  "
		f"[dim]({completed}/{len(plan.chunks)} chunks, {plan.progress_percent()}%)[/dim]"
	)

	next_chunk = plan.next_chunk()
	for chunk in plan.chunks:
		icon = STATUS_ICONS.get(chunk.status, "[red][?][/red]")
		marker = "  [cyan]<- next[/cyan]" if next_chunk is not None and chunk.id == next_chunk.id else ""
		branch = tree.add(
			f"{icon} [bold]{escape(chunk.title)}[/bold] [dim]{{#{chunk.id}}} {format_minutes(chunk.duration)}[/dim]{marker}"
		)
		for obj in chunk.objectives:
			branch.add(f"[dim]-[/dim] {escape(obj)}")
		if chunk.deliverable:
			branch.add(f"[magenta]Deliverable:[/magenta] {escape(chunk.deliverable)}")

	console.print(tree)


def render_plan_summary(
	plan: Plan,
	logged_minutes: Optional[int] = None,
	console: Optional[Console] = None,
) -> None:
	"""Render a summary panel for a plan."""
	console = console or Console()

	style = status_style(plan.status)
	lines = []
	lines.append(f"[bold]Title:[/bold] {escape(plan.title)}")
	lines.append(f"[bold]Status:[/bold] [{style}]{plan.status}[/{style}]")
	if plan.tags:
		lines.append(f"[bold]Tags:[/bold] {', '.join(plan.tags)}")
	lines.append("")
	lines.append(
		f"[bold]Progress:[/bold] {escape(progress_bar(plan.progress()))} {plan.progress_percent()}%"
	)
	lines.append(
		f"[bold]Hours:[/bold] {plan.completed_hours():.1f} done, "
		f"{plan.remaining_hours():.1f} remaining of {plan.total_hours:g} estimated"
	)
	if logged_minutes is not None:
		lines.append(f"[bold]Logged:[/bold] {format_minutes(logged_minutes)}")

	next_chunk = plan.next_chunk()
	lines.append("")
	if next_chunk is not None:
		lines.append(f"[bold]Next:[/bold] {next_chunk.id} - {escape(next_chunk.title)}")
	else:
		lines.append("[bold]Next:[/bold] [dim]nothing left[/dim]")

	console.print(Panel("\n".join(lines), title=f"Plan: {plan.id}", border_style="cyan"))


def render_plan_list(records: Iterable[PlanRecord], console: Optional[Console] = None) -> None:
	"""Render indexed plans as a table."""
	console = console or Console()
	records = list(records)

	if not records:
		console.print("[dim]No plans found.[/dim]")
		return

	table = Table(title="Plans")
	table.add_column("ID", style="cyan", no_wrap=True)
	table.add_column("Title")
	table.add_column("Status")
	table.add_column("Chunks", justify="right")
	table.add_column("Progress", justify="right")
	table.add_column("Hours", justify="right")
	table.add_column("Tags")

	for r in records:
		style = status_style(r.status)
		table.add_row(
			r.id,
			escape(r.title),
			f"[{style}]{r.status}[/{style}]",
			str(r.chunk_count),
			f"{r.progress * 100:.0f}%",
			f"{r.total_hours:g}",
			", ".join(r.tags),
		)

	console.print(table)
