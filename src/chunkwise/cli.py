"""CLI for chunkwise: plans, session tracking, setup and health checks."""

import argparse
import asyncio
import sys
import tomllib
from importlib.metadata import version as pkg_version
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .config import DEFAULT_CONFIG_TOML, Config, load_config
from .errors import ChunkwiseError, NotFoundError
from .logging_config import setup_logging
from .plans.codec import parse
from .plans.index import PlanIndex, PlanRecord
from .plans.models import Status
from .plans.repository import PlanRepository
from .plans.service import PlanService
from .sessions.store import SessionStore
from .sessions.tracker import SessionTracker
from .stats import StatsService, TimeRange
from .stats.exporter import REPORT_TYPES, export_full_report, export_plan_stats, export_total_stats
from .stats.models import RANGE_NAMES
from .visualizer import (
	render_chunk_detail,
	render_daily_stats,
	render_plan_list,
	render_plan_progress,
	render_plan_stats,
	render_plan_summary,
	render_session_table,
	render_status,
	render_total_stats,
)
from .visualizer.utils import format_minutes

console = Console()

CORE_DEPS = ["pydantic", "PyYAML", "platformdirs", "rich", "aiosqlite"]


def _plan_service(config: Config) -> PlanService:
	return PlanService(PlanRepository(config.plans_dir))


def _tracker(config: Config, plans: PlanService | None = None) -> SessionTracker:
	return SessionTracker(SessionStore(config.db_path), plans=plans or _plan_service(config))


def _target(plan_id: str, chunk_id: str | None) -> str:
	return f"{plan_id} ({chunk_id})" if chunk_id else plan_id


# -- setup --

def cmd_init(args: argparse.Namespace) -> None:
	"""Create directories and a default config file."""
	config = load_config()
	console.print("[bold]chunkwise init[/bold]")
	console.print(f"  Config: {config.config_dir}")
	console.print(f"  Data:   {config.data_dir}")
	console.print(f"  Plans:  {config.plans_dir}")

	if not config.config_file.exists():
		config.config_file.write_text(DEFAULT_CONFIG_TOML, encoding="utf-8")
		console.print(f"  Config file created: {config.config_file}")
	else:
		console.print(f"  Config file exists: {config.config_file}")


def _check_config_toml(config_file: Path) -> tuple[str, str | None]:
	"""Validate config.toml. Returns (status, issue_or_none)."""
	if not config_file.exists():
		return "not found (optional)", None
	try:
		with open(config_file, "rb") as f:
			tomllib.load(f)
		return "valid", None
	except tomllib.TOMLDecodeError as e:
		return f"INVALID ({e})", f"config.toml parse error: {e}"


def _check_plans(service: PlanService) -> tuple[str, list[str]]:
	"""Parse and validate every plan. Returns (status, issues)."""
	ids = service.repository.list_ids()
	issues = []
	for plan_id in ids:
		try:
			service.get(plan_id).validate_plan()
		except ChunkwiseError as e:
			issues.append(f"plan {plan_id}: {e}")
	return f"{len(ids)} plans ({len(ids) - len(issues)} valid)", issues


def cmd_doctor(args: argparse.Namespace) -> None:
	"""Health check - verify installation, config and plan documents."""
	console.print("[bold]chunkwise doctor[/bold]")
	config = load_config()
	issues: list[str] = []

	console.print("  Core deps:")
	for dep in CORE_DEPS:
		try:
			console.print(f"    {dep:14s} {pkg_version(dep)}")
		except Exception:
			console.print(f"    {dep:14s} [red]NOT INSTALLED[/red]")
			issues.append(f"{dep} package not installed")

	toml_status, toml_issue = _check_config_toml(config.config_file)
	console.print(f"  config.toml:   {toml_status}")
	if toml_issue:
		issues.append(toml_issue)

	plans_status, plan_issues = _check_plans(_plan_service(config))
	console.print(f"  Plans:         {plans_status}")
	issues.extend(plan_issues)

	active = SessionStore(config.db_path).get_active()
	console.print(f"  Active:        {_target(active.plan_id, active.chunk_id) if active else 'none'}")

	console.print()
	if issues:
		console.print(f"  {len(issues)} issue(s) found:")
		for issue in issues:
			console.print(f"    - {issue}")
		sys.exit(1)
	console.print("  All checks passed.")


# -- plans --

async def _indexed_plans(config: Config, service: PlanService, status=None, tag=None) -> list[PlanRecord]:
	"""Refresh the index from the documents and query it."""
	index = PlanIndex(config.db_path)
	try:
		await index.rebuild(
			(plan, str(service.repository.path(plan.id))) for plan in service.list_plans()
		)
		return await index.search(status=status, tag=tag)
	finally:
		await index.close()


def cmd_plan_list(args: argparse.Namespace) -> None:
	"""List plans; archived plans are hidden unless asked for."""
	config = load_config()
	records = asyncio.run(_indexed_plans(config, _plan_service(config), args.status, args.tag))
	if not args.status and not args.all:
		records = [r for r in records if r.status != Status.ARCHIVED]
	render_plan_list(records, console=console)


def cmd_plan_archive(args: argparse.Namespace) -> None:
	"""Set a plan's status to archived."""
	service = _plan_service(load_config())
	plan = service.get(args.plan_id)

	if not args.yes:
		console.print(f"Archive plan '{escape(plan.title)}'? It will be hidden from default listings.")
		if input("  Type plan ID to confirm: ").strip() != plan.id:
			console.print("Archive canceled.")
			return

	plan.status = Status.ARCHIVED.value
	service.update(plan)
	console.print(f"Plan archived: {escape(plan.title)}")
	console.print("  View archived plans: chunkwise plan list --status archived")


def cmd_plan_reindex(args: argparse.Namespace) -> None:
	config = load_config()
	records = asyncio.run(_indexed_plans(config, _plan_service(config)))
	console.print(f"Indexed {len(records)} plans.")


def cmd_plan_show(args: argparse.Namespace) -> None:
	config = load_config()
	service = _plan_service(config)
	plan = service.get(args.plan_id)

	if args.summary:
		logged = _tracker(config, service).total_duration(plan.id)
		render_plan_summary(plan, logged_minutes=logged, console=console)
	else:
		render_plan_progress(plan, console=console)


def cmd_plan_check(args: argparse.Namespace) -> None:
	"""Parse and validate a plan by ID or by file path."""
	path = Path(args.target)
	if path.suffix == ".md" and path.is_file():
		plan = parse(path.read_text(encoding="utf-8"))
	else:
		plan = _plan_service(load_config()).get(args.target)

	plan.validate_plan()
	console.print(
		f"[green]OK[/green] {plan.id}: {len(plan.chunks)} chunks, "
		f"{format_minutes(plan.total_minutes())} planned"
	)


def cmd_plan_add(args: argparse.Namespace) -> None:
	"""Import a plan document into the plans directory."""
	path = Path(args.file)
	if not path.is_file():
		raise NotFoundError(f"file not found: {path}")

	plan = parse(path.read_text(encoding="utf-8"))
	_plan_service(load_config()).create(plan)
	console.print(f"Added plan [cyan]{plan.id}[/cyan] ({len(plan.chunks)} chunks)")


def cmd_plan_chunk(args: argparse.Namespace) -> None:
	"""Set a chunk's status by hand."""
	service = _plan_service(load_config())
	service.set_chunk_status(args.plan_id, args.chunk_id, args.status)
	console.print(f"{args.plan_id}/{args.chunk_id} -> {args.status}")


# -- sessions --

def cmd_start(args: argparse.Namespace) -> None:
	tracker = _tracker(load_config())
	session = tracker.start(args.plan_id, args.chunk_id, notes=args.note or "")

	console.print(f"[green]->[/green] Session started: {_target(session.plan_id, session.chunk_id)}")
	console.print(f"  Started at: {session.start_time.astimezone().strftime('%H:%M')}")
	if session.notes:
		console.print(f"  Notes: {session.notes}")
	console.print("\nTimer running. Stop with: chunkwise stop")


def cmd_stop(args: argparse.Namespace) -> None:
	config = load_config()
	service = _plan_service(config)
	tracker = _tracker(config, service)
	session = tracker.stop(notes=args.note or "", artifacts=args.artifact or [])

	console.print(
		f"[green]x[/green] Session stopped: {_target(session.plan_id, session.chunk_id)} "
		f"({format_minutes(session.duration_minutes)})"
	)
	if session.artifacts:
		console.print(f"  Artifacts: {', '.join(session.artifacts)}")

	if session.chunk_id and service.plan_exists(session.plan_id):
		try:
			chunk = service.get_chunk(session.plan_id, session.chunk_id)
		except ChunkwiseError:
			return
		stats = tracker.chunk_stats(session.plan_id, session.chunk_id)
		console.print(
			f"  Chunk {session.chunk_id}: {chunk.status}, "
			f"{format_minutes(stats.total_minutes)} of {format_minutes(chunk.duration)} logged"
		)


def cmd_status(args: argparse.Namespace) -> None:
	config = load_config()
	tracker = _tracker(config)
	render_status(tracker.get_status(limit=config.recent_sessions), console=console)


def cmd_sessions(args: argparse.Namespace) -> None:
	tracker = _tracker(load_config())
	sessions = tracker.list(args.plan_id, limit=args.limit)
	render_session_table(sessions, title=f"Sessions for {args.plan_id}", console=console)
	console.print(f"Total logged: {format_minutes(tracker.total_duration(args.plan_id))}")


def cmd_show(args: argparse.Namespace) -> None:
	"""Show one chunk with its session history."""
	config = load_config()
	service = _plan_service(config)
	plan = service.get(args.plan_id)
	chunk = service.find_chunk(plan, args.chunk_id)
	sessions = _tracker(config, service).chunk_sessions(plan.id, chunk.id)
	render_chunk_detail(plan, chunk, sessions, console=console)


# -- stats --

def _stats_service(config: Config) -> StatsService:
	return StatsService(SessionStore(config.db_path), _plan_service(config))


def cmd_stats(args: argparse.Namespace) -> None:
	config = load_config()
	stats = _stats_service(config)
	time_range = TimeRange.named(args.range)

	if args.plan_id:
		result = stats.plan_stats(args.plan_id, time_range)
	else:
		result = stats.total_stats(time_range)

	if args.json:
		print(result.model_dump_json(indent=2))
		return

	if args.plan_id:
		render_plan_stats(result, console=console)
	else:
		render_total_stats(result, console=console)
		if args.breakdown:
			render_daily_stats(stats.daily_stats(time_range), console=console)


def cmd_report(args: argparse.Namespace) -> None:
	"""Export statistics as a Markdown report."""
	config = load_config()
	stats = _stats_service(config)
	time_range = TimeRange.named(args.range)

	if args.plan_id:
		report = export_plan_stats(stats.plan_stats(args.plan_id, time_range))
	elif args.type == "summary":
		report = export_total_stats(stats.total_stats(time_range))
	else:
		report = export_full_report(
			stats.total_stats(time_range),
			stats.all_plan_stats(time_range),
			stats.daily_stats(time_range),
			generated_at=stats.clock(),
		)

	if args.output:
		path = Path(args.output).resolve()
		path.write_text(report, encoding="utf-8")
		console.print(f"Report exported to: {path}")
	else:
		print(report)


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(
		prog="chunkwise",
		description="Time-boxed learning plans and session tracking",
	)
	parser.add_argument("--log-level", default=None, help="Console log level (default: from config)")
	subparsers = parser.add_subparsers(dest="command")

	# init
	init_parser = subparsers.add_parser("init", help="Create directories and config file")
	init_parser.set_defaults(func=cmd_init)

	# doctor
	doctor_parser = subparsers.add_parser("doctor", help="Health check")
	doctor_parser.set_defaults(func=cmd_doctor)

	# plan
	plan_parser = subparsers.add_parser("plan", help="Manage plans")
	plan_subparsers = plan_parser.add_subparsers(dest="plan_command")

	plan_list = plan_subparsers.add_parser("list", help="List plans")
	plan_list.add_argument("--status", type=str, default=None, help="Filter by status")
	plan_list.add_argument("--tag", type=str, default=None, help="Filter by tag")
	plan_list.add_argument("--all", action="store_true", help="Include archived plans")
	plan_list.set_defaults(func=cmd_plan_list)

	plan_archive = plan_subparsers.add_parser("archive", help="Archive a plan")
	plan_archive.add_argument("plan_id", help="Plan ID")
	plan_archive.add_argument("--yes", action="store_true", help="Skip confirmation prompt")
	plan_archive.set_defaults(func=cmd_plan_archive)

	plan_show = plan_subparsers.add_parser("show", help="Show plan progress")
	plan_show.add_argument("plan_id", help="Plan ID")
	plan_show.add_argument("--summary", action="store_true", help="Show summary panel instead of tree")
	plan_show.set_defaults(func=cmd_plan_show)

	plan_check = plan_subparsers.add_parser("check", help="Validate a plan")
	plan_check.add_argument("target", help="Plan ID or path to a .md document")
	plan_check.set_defaults(func=cmd_plan_check)

	plan_add = plan_subparsers.add_parser("add", help="Import a plan document")
	plan_add.add_argument("file", help="Path to the .md document")
	plan_add.set_defaults(func=cmd_plan_add)

	plan_chunk = plan_subparsers.add_parser("chunk", help="Set a chunk's status")
	plan_chunk.add_argument("plan_id", help="Plan ID")
	plan_chunk.add_argument("chunk_id", help="Chunk ID")
	plan_chunk.add_argument(
		"status",
		choices=["not-started", "in-progress", "completed", "skipped"],
		help="New status",
	)
	plan_chunk.set_defaults(func=cmd_plan_chunk)

	plan_reindex = plan_subparsers.add_parser("reindex", help="Rebuild the plan index")
	plan_reindex.set_defaults(func=cmd_plan_reindex)

	# start
	start_parser = subparsers.add_parser("start", help="Start a session")
	start_parser.add_argument("plan_id", help="Plan ID")
	start_parser.add_argument("chunk_id", nargs="?", default=None, help="Optional chunk ID")
	start_parser.add_argument("--note", type=str, default=None, help="Initial notes")
	start_parser.set_defaults(func=cmd_start)

	# stop
	stop_parser = subparsers.add_parser("stop", help="Stop the active session")
	stop_parser.add_argument("--note", type=str, default=None, help="Notes to append")
	stop_parser.add_argument(
		"--artifact", action="append", default=None, help="URL or path produced (repeatable)"
	)
	stop_parser.set_defaults(func=cmd_stop)

	# status
	status_parser = subparsers.add_parser("status", help="Show the active and recent sessions")
	status_parser.set_defaults(func=cmd_status)

	# sessions
	sessions_parser = subparsers.add_parser("sessions", help="List sessions of a plan")
	sessions_parser.add_argument("plan_id", help="Plan ID")
	sessions_parser.add_argument("--limit", type=int, default=20, help="Max results")
	sessions_parser.set_defaults(func=cmd_sessions)

	# show
	show_parser = subparsers.add_parser("show", help="Show a chunk with its sessions")
	show_parser.add_argument("plan_id", help="Plan ID")
	show_parser.add_argument("chunk_id", help="Chunk ID")
	show_parser.set_defaults(func=cmd_show)

	# stats
	stats_parser = subparsers.add_parser("stats", help="Show learning statistics")
	stats_parser.add_argument("plan_id", nargs="?", default=None, help="Optional plan ID")
	stats_parser.add_argument("--range", "-r", choices=RANGE_NAMES, default="all", help="Time range")
	stats_parser.add_argument("--breakdown", action="store_true", help="Show daily breakdown")
	stats_parser.add_argument("--json", action="store_true", help="Output JSON")
	stats_parser.set_defaults(func=cmd_stats)

	# report
	report_parser = subparsers.add_parser("report", help="Export statistics as Markdown")
	report_parser.add_argument("plan_id", nargs="?", default=None, help="Optional plan ID")
	report_parser.add_argument("--output", "-o", default=None, help="Output file (default: stdout)")
	report_parser.add_argument("--type", "-t", choices=REPORT_TYPES, default="full", help="Report type")
	report_parser.add_argument("--range", "-r", choices=RANGE_NAMES, default="all", help="Time range")
	report_parser.set_defaults(func=cmd_report)

	return parser


def main(argv: list[str] | None = None) -> None:
	"""CLI entry point."""
	parser = build_parser()
	args = parser.parse_args(argv)

	if not getattr(args, "func", None):
		parser.print_help()
		sys.exit(1)

	config = load_config()
	setup_logging(args.log_level or config.log_level, config.log_dir)

	try:
		args.func(args)
	except ChunkwiseError as e:
		console.print(f"[red]Error:[/red] {e}")
		sys.exit(1)
