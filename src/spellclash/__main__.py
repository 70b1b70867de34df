"""Command line entry point for maintenance tasks."""
import argparse
import logging
import sys
from datetime import timedelta
from typing import List, Optional

from spellclash import __version__
from spellclash.config import ensure_directories, settings
from spellclash.logging_config import setup_logging
from spellclash.models.base import SessionLocal, init_db, utcnow
from spellclash.models.models import HangmanState, MissingLetterState, PracticeState
from spellclash.monitoring import start_monitoring
from spellclash.services.session_store import SessionStore
from spellclash.services.stats_service import StatsService

logger = logging.getLogger(__name__)

CURSOR_MODELS = (PracticeState, HangmanState, MissingLetterState)


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(prog="spellclash", description="Spelling game session maintenance")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create the database tables")

    sweep = subparsers.add_parser("sweep", help="Delete cursors that have been idle too long")
    sweep.add_argument(
        "--max-age-hours",
        type=int,
        default=settings.game.stale_cursor_hours,
        help="Idle time after which a cursor is deleted",
    )

    stats = subparsers.add_parser("stats", help="Print a player's practice statistics")
    stats.add_argument("--player", type=int, required=True, help="Player id")
    return parser


def run_sweep(max_age_hours: int) -> int:
    """Delete stale cursors of every mode."""
    db = SessionLocal()
    try:
        older_than = utcnow() - timedelta(hours=max_age_hours)
        return SessionStore(db).sweep_stale_cursors(CURSOR_MODELS, older_than)
    finally:
        db.close()


def print_stats(player_id: int) -> None:
    """Print a player's statistics."""
    db = SessionLocal()
    try:
        service = StatsService(db)
        stats = service.get_player_stats(player_id)
        print(f"Player {player_id}")
        print(f"  Sessions (all modes): {service.get_total_sessions_count(player_id)}")
        print(f"  Practice sessions: {stats.total_sessions}")
        print(f"  Words practiced: {stats.total_words_practiced} ({stats.unique_words_attempted} unique)")
        print(f"  Accuracy: {stats.overall_accuracy:.1f}%")
        print(f"  Points: {stats.total_points}")
        struggling = service.get_struggling_words(player_id)
        if struggling:
            print("  Struggling words:")
            for word in struggling:
                print(f"    {word.text}: {word.correct}/{word.attempts}")
    finally:
        db.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Run a maintenance command."""
    args = build_parser().parse_args(argv)

    ensure_directories()
    setup_logging(f"Starting spellclash v{__version__} {args.command} ...")
    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)
        logger.info(f"Metrics exported on port {settings.monitoring.port}")

    if args.command == "init-db":
        init_db()
        logger.info("Database initialized")
    elif args.command == "sweep":
        init_db()
        deleted = run_sweep(args.max_age_hours)
        print(f"Deleted {deleted} stale cursors")
    elif args.command == "stats":
        print_stats(args.player)
    return 0


if __name__ == "__main__":
    sys.exit(main())
