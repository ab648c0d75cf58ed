"""Visualizer package - Rich terminal views for plans, sessions and stats."""

from .plan_progress import render_plan_list, render_plan_progress, render_plan_summary
from .session_status import render_session_table, render_status
from .stats_view import render_chunk_detail, render_daily_stats, render_plan_stats, render_total_stats

__all__ = [
	"render_chunk_detail",
	"render_daily_stats",
	"render_plan_list",
	"render_plan_progress",
	"render_plan_stats",
	"render_plan_summary",
	"render_session_table",
	"render_status",
	"render_total_stats",
]
