#!/usr/bin/env python3
"""Fetch a player's games and update the cached daily rating series.

Usage:
    python scripts/fetch_history.py USERNAME PERF [--full] [--db PATH]
        [--replay FILE] [--export FILE] [--max-games N]

This script:
1. Loads settings from ELOKLINE_* environment variables
2. Initializes the cache database
3. Streams new games from Lichess (or a recorded NDJSON export)
4. Aggregates them into daily records and appends them to the cache
5. Prints a summary and optionally exports the full series as JSON

Exit codes:
    0: Refresh succeeded (including "no new games")
    1: Refresh failed
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import get_args

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from elokline.aggregation.chart import summarize_records  # noqa: E402
from elokline.core.config import Settings  # noqa: E402
from elokline.core.days import day_label  # noqa: E402
from elokline.db.session import get_db_session, init_db  # noqa: E402
from elokline.models.types import Perf  # noqa: E402
from elokline.providers.base import GameSourceBase  # noqa: E402
from elokline.providers.lichess import LichessGameSource  # noqa: E402
from elokline.providers.replay import ReplayGameSource  # noqa: E402
from elokline.worker.refresher import HistoryRefresher  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Update daily rating candlesticks for a player")
    parser.add_argument("username", help="Lichess username")
    parser.add_argument("perf", choices=get_args(Perf), help="Speed category")
    parser.add_argument("--full", action="store_true", help="Drop the cache and rebuild")
    parser.add_argument("--db", type=Path, help="Cache database path")
    parser.add_argument("--replay", type=Path, help="Read games from an NDJSON export")
    parser.add_argument("--export", type=Path, help="Write the full series to this JSON file")
    parser.add_argument("--max-games", type=int, help="Upper bound on games to fetch")
    return parser.parse_args(argv)


def build_source(args: argparse.Namespace, settings: Settings) -> GameSourceBase:
    """Pick the game source for this run."""
    if args.replay:
        return ReplayGameSource.from_file(args.replay)
    return LichessGameSource(
        base_url=settings.lichess_base_url,
        token=settings.lichess_token,
        timeout=settings.request_timeout_s,
    )


def print_summary(username: str, perf: str, result) -> None:
    """Print a human-readable refresh summary."""
    summary = summarize_records(result.records)
    print(f"User: {username}  Perf: {perf}")
    print(f"  Games fetched: {result.games_fetched}")
    print(f"  New records:   {len(result.new_records)}")
    if summary.day_count == 0:
        print("  Cache is empty")
        return
    print(f"  Days:          {day_label(summary.first_day)} .. {day_label(summary.last_day)}")
    print(f"  Rating:        {summary.first_open:g} -> {summary.last_close:g}")
    print(f"  Peak/Trough:   {summary.peak:g} / {summary.trough:g}")
    print(f"  W/L/D:         {summary.wins}/{summary.losses}/{summary.draws}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    settings = Settings.from_env()
    if args.db:
        settings = replace(settings, db_path=args.db)
    if args.max_games:
        settings = replace(settings, max_games=args.max_games)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    init_db(settings.db_path)
    source = build_source(args, settings)

    try:
        with get_db_session(settings.db_path) as session:
            refresher = HistoryRefresher(session, source, max_games=settings.max_games)
            result = refresher.refresh(args.username, args.perf, full=args.full)
    except Exception as e:
        print(f"FAIL: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    print_summary(args.username, args.perf, result)

    if args.export:
        args.export.parent.mkdir(parents=True, exist_ok=True)
        payload = [r.model_dump() for r in result.records]
        args.export.write_text(json.dumps(payload, indent=2))
        print(f"  Exported to:   {args.export}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
