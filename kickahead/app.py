import argparse
import importlib
import json
import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .env import load_env

from . import __version__
from .config import KickAheadConfig, to_timedelta
from .database import SqlRepository
from .dispatcher import Dispatcher
from .errors import KickAheadError
from .job import JobRegistry
from .logger import get_logger
from .schema import validate_job_request


def load_registry(spec: str) -> JobRegistry:
    """Import "package.module" or "package.module:attr" and return the JobRegistry in it."""
    module_name, _, attr = spec.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise SystemExit(f"Cannot import jobs module {module_name!r}: {e}")
    registry = getattr(module, attr or "registry", None)
    if not isinstance(registry, JobRegistry):
        raise SystemExit(f"{spec!r} does not point to a JobRegistry")
    return registry


def _tick_interval(args: argparse.Namespace) -> Optional[float]:
    if args.tick_interval is not None:
        return args.tick_interval
    value = os.getenv("KICKAHEAD_TICK_INTERVAL")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        raise SystemExit(f"KICKAHEAD_TICK_INTERVAL must be a number of seconds, got {value!r}")


def _jobs_spec(args: argparse.Namespace) -> Optional[str]:
    return args.jobs or os.getenv("KICKAHEAD_JOBS")


def cmd_tick(args: argparse.Namespace) -> None:
    jobs = _jobs_spec(args)
    if not jobs:
        raise SystemExit("No jobs module given. Pass --jobs or set KICKAHEAD_JOBS.")
    registry = load_registry(jobs)
    config = KickAheadConfig(
        tick_interval=_tick_interval(args),
        repository=SqlRepository(Path(args.db)),
    )
    dispatcher = Dispatcher(config, registry)
    try:
        report = dispatcher.tick()
    except KickAheadError as e:
        raise SystemExit(f"Tick failed: {e}")
    print(
        f"Done. due={report.due} executed={report.executed} "
        f"ignored={report.ignored} hooked={report.hooked}"
    )


def cmd_schedule(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        request = json.load(f)
    errors = validate_job_request(request)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)

    jobs = _jobs_spec(args)
    registry = load_registry(jobs) if jobs else None
    if registry is not None and request["job_type"] not in registry:
        raise SystemExit(f"Unknown job type: {request['job_type']}")

    if "run_at" in request:
        scheduled_at = datetime.fromisoformat(request["run_at"])
    else:
        scheduled_at = datetime.now() + to_timedelta(request["run_in"])

    repository = SqlRepository(Path(args.db))
    job_id = repository.create(request["job_type"], scheduled_at, request.get("args", []))
    print(f"Scheduled: {job_id}")
    print(f"Run at: {scheduled_at.isoformat()}")


def cmd_list(args: argparse.Namespace) -> None:
    db_path = Path(args.db)
    if not db_path.exists():
        print(f"Database not found: {db_path}")
        return
    jobs = SqlRepository(db_path).pending()
    if not jobs:
        print("No pending jobs.")
        return
    print(f"Found {len(jobs)} pending jobs in {db_path}:\n")
    for job in jobs:
        print(f"ID: {job.id}")
        print(f"  Type: {job.job_type}")
        print(f"  Scheduled at: {job.scheduled_at.isoformat()}")
        print(f"  Args: {json.dumps(list(job.args))}")
        print()


def main(argv: Optional[List[str]] = None):
    # Load .env if present (KICKAHEAD_DB, KICKAHEAD_JOBS, etc.)
    load_env()
    default_db = os.getenv("KICKAHEAD_DB", "data/jobs.db")

    parser = argparse.ArgumentParser(prog="kickahead", description="Tick-driven deferred job dispatcher")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--log-level", default=os.getenv("KICKAHEAD_LOG_LEVEL", "INFO"),
                        help="Console log level (default: INFO)")

    subparsers = parser.add_subparsers(dest="command")
    tck = subparsers.add_parser("tick", help="Run every due job once")
    tck.add_argument("--jobs", help="Module holding the JobRegistry, as module or module:attr (or set KICKAHEAD_JOBS)")
    tck.add_argument("--tick-interval", type=float, help="Tick interval in seconds (or set KICKAHEAD_TICK_INTERVAL)")
    tck.add_argument("--db", default=default_db, help=f"Path to SQLite database (default: {default_db})")
    tck.set_defaults(func=cmd_tick)

    sch = subparsers.add_parser("schedule", help="Schedule a job from a request JSON")
    sch.add_argument("--input", required=True, help="Path to request JSON input")
    sch.add_argument("--jobs", help="Optional JobRegistry module used to check the job type")
    sch.add_argument("--db", default=default_db, help=f"Path to SQLite database (default: {default_db})")
    sch.set_defaults(func=cmd_schedule)

    lst = subparsers.add_parser("list", help="List pending jobs")
    lst.add_argument("--db", default=default_db, help=f"Path to SQLite database (default: {default_db})")
    lst.set_defaults(func=cmd_list)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    get_logger(level=args.log_level)

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
