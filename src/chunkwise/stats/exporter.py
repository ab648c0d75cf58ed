"""Markdown report rendering for statistics."""

from datetime import datetime
from typing import Optional

from .models import DailyStats, PlanStats, TotalStats

REPORT_TYPES = ("summary", "full")


def format_date(value: Optional[datetime]) -> str:
	return value.astimezone().strftime("%Y-%m-%d") if value else "N/A"


def format_progress(progress: float) -> str:
	return f"{int(progress * 100)}%"


def markdown_bar(progress: float, width: int = 30) -> str:
	"""Block-character progress bar, e.g. '[███░░░]'."""
	progress = min(max(progress, 0.0), 1.0)
	filled = int(progress * width)
	return "[" + "█" * filled + "░" * (width - filled) + "]"


def export_total_stats(stats: TotalStats) -> str:
	"""
	Summary section of a report.

	Raises:
		ValidationError: if the stats are inconsistent
	"""
	stats.validate_stats()
	lines = ["# Learning Statistics", "", "## Summary", ""]

	if stats.total_sessions == 0:
		lines.append("No sessions recorded yet.")
		return "\n".join(lines) + "\n"

	lines += [
		f"**Total Hours:** {stats.total_hours:.1f} hours",
		f"**Total Sessions:** {stats.total_sessions}",
		f"**Average Session:** {stats.average_session:.1f} minutes",
		"",
		"## Plans",
		"",
		f"**Active Plans:** {stats.active_plans}",
		f"**Completed Plans:** {stats.completed_plans}",
		"",
		"## Streaks",
		"",
		f"**Current Streak:** {stats.current_streak} days",
		f"**Longest Streak:** {stats.longest_streak} days",
		"",
	]
	if stats.last_session is not None:
		lines.append(f"**Last Session:** {format_date(stats.last_session)}")
	return "\n".join(lines) + "\n"


def export_plan_stats(stats: PlanStats) -> str:
	"""
	Report for a single plan.

	Raises:
		ValidationError: if the stats are inconsistent
	"""
	stats.validate_stats()
	lines = [
		f"# Plan: {stats.plan_title}",
		"",
		f"**Plan ID:** {stats.plan_id}",
		f"**Status:** {stats.status}",
		"",
		"## Progress",
		"",
		f"**Completion:** {format_progress(stats.progress)}",
		f"**Chunks:** {stats.completed_chunks}/{stats.total_chunks} completed",
		markdown_bar(stats.progress),
		"",
		"## Time",
		"",
		f"**Actual Hours:** {stats.total_hours:.1f} hours",
		f"**Planned Hours:** {stats.planned_hours:.1f} hours",
		f"**Session Count:** {stats.session_count} sessions",
		"",
	]
	if stats.session_count == 0:
		lines.append("No sessions recorded yet.")
	elif stats.last_session is not None:
		lines.append(f"**Last Session:** {format_date(stats.last_session)}")
	return "\n".join(lines) + "\n"


def plan_table(plan_stats: list[PlanStats]) -> str:
	lines = [
		"| Plan | Hours | Sessions | Progress | Status |",
		"|------|-------|----------|----------|--------|",
	]
	for ps in plan_stats:
		title = ps.plan_title.replace("|", "\\|")
		lines.append(
			f"| {title} | {ps.total_hours:.1f} | {ps.session_count} | "
			f"{format_progress(ps.progress)} | {ps.status} |"
		)
	return "\n".join(lines) + "\n"


def export_full_report(
	total: TotalStats,
	plan_stats: list[PlanStats],
	daily: list[DailyStats],
	generated_at: datetime,
) -> str:
	"""Summary, per-plan table and daily breakdown in one document."""
	lines = [
		"# Learning Statistics Report",
		"",
		f"*Generated: {generated_at.astimezone().strftime('%Y-%m-%d %H:%M:%S')}*",
		"",
	]

	if total.total_sessions == 0 and not plan_stats and not daily:
		lines.append("No data available.")
		return "\n".join(lines) + "\n"

	lines += ["## Summary", ""]
	if total.total_sessions > 0:
		lines += [
			f"- **Total Hours:** {total.total_hours:.1f} hours",
			f"- **Total Sessions:** {total.total_sessions}",
			f"- **Average Session:** {total.average_session:.1f} minutes",
			f"- **Active Plans:** {total.active_plans}",
			f"- **Completed Plans:** {total.completed_plans}",
			f"- **Current Streak:** {total.current_streak} days",
			f"- **Longest Streak:** {total.longest_streak} days",
		]
		if total.last_session is not None:
			lines.append(f"- **Last Session:** {format_date(total.last_session)}")
	else:
		lines.append("No sessions recorded.")
	lines.append("")

	if plan_stats:
		lines += ["## Plans", "", plan_table(plan_stats)]

	if daily:
		lines += ["## Daily Breakdown", ""]
		for d in daily:
			lines.append(f"- **{d.day.isoformat()}:** {d.hours:.1f} hours ({d.session_count} sessions)")
		lines.append("")

	lines += ["---", "*Report generated by chunkwise*"]
	return "\n".join(lines) + "\n"
