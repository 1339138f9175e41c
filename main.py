"""CLI entry point for the interview readiness engine."""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone

from src.core.config import Settings
from src.core.db import init_db, parse_timestamp
from src.core.schemas import Interview, InterviewStatus, ScoreResult
from src.pipeline.cache import SnapshotCache
from src.pipeline.events import InvalidationBus
from src.pipeline.orchestrator import ReadinessBoard, export_results_json
from src.sources.local import LocalSources


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Interview readiness engine - estimate success probability for scheduled interviews",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- score subcommand (default) ---
    score_parser = subparsers.add_parser("score", help="Score scheduled interviews")
    score_parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    score_parser.add_argument(
        "--now",
        help="Evaluate as of this ISO-8601 timestamp instead of the current time",
    )
    score_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export results to format (json)",
    )
    score_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    # --- init-db subcommand ---
    init_parser = subparsers.add_parser("init-db", help="Create the SQLite schema")
    init_parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    init_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    # --- top-level flags so a bare invocation scores ---
    parser.add_argument("--config", default="config/settings.yaml", help=argparse.SUPPRESS)
    parser.add_argument("--now", help=argparse.SUPPRESS)
    parser.add_argument("--export", choices=["json"], help=argparse.SUPPRESS)
    parser.add_argument("--verbose", "-v", action="store_true", help=argparse.SUPPRESS)

    args = parser.parse_args(argv)

    # Default to score when no subcommand given
    if args.command is None:
        args.command = "score"

    return args


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def resolve_now(raw: str | None) -> datetime:
    """Parse --now, defaulting to the current UTC time."""
    if not raw:
        return datetime.now(timezone.utc)
    parsed = parse_timestamp(raw)
    if parsed is None:
        msg = f"Invalid --now timestamp: {raw!r}"
        raise ValueError(msg)
    return parsed


def format_result(interview: Interview, result: ScoreResult) -> str:
    start = interview.start.strftime("%Y-%m-%d %H:%M") if interview.start else "unscheduled"
    lines = [
        f"{interview.title} ({start})",
        f"  Success probability: {result.raw_probability}%",
        f"  Role match: {result.role_match}% | Practice: {result.practice_minutes} min | "
        f"Confidence: {result.confidence}%",
        "  Top actions:",
    ]
    lines.extend(f"    - {action}" for action in result.top_actions())
    return "\n".join(lines)


async def run(settings: Settings, now: datetime, export_format: str | None) -> None:
    """Score every scheduled interview once and print the results."""
    conn = init_db(settings.database.path)
    sources = LocalSources(conn, settings.local_store)
    board = ReadinessBoard(
        sources,
        InvalidationBus(),
        settings.scoring,
        SnapshotCache(settings.cache.stale_seconds),
    )

    results = await board.refresh(now) or {}
    interviews = [
        iv for iv in await sources.list_scheduled_interviews()
        if iv.status is InterviewStatus.SCHEDULED
    ]
    board.dispose()
    conn.close()

    if not interviews:
        print("No upcoming interviews scheduled.")
        return

    print(f"Interview success probability ({len(interviews)} scheduled):\n")
    for iv in interviews:
        result = results.get(iv.id)
        if result is not None:
            print(format_result(iv, result))
            print()

    if export_format == "json":
        print(export_results_json(interviews, results))


def cmd_init_db(settings: Settings) -> None:
    conn = init_db(settings.database.path)
    conn.close()
    print(f"Database ready at {settings.database.path}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.from_yaml(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.command == "init-db":
        cmd_init_db(settings)
        return

    try:
        now = resolve_now(args.now)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    asyncio.run(run(settings, now, args.export))


if __name__ == "__main__":
    main()
