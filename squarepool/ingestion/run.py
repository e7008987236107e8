"""CLI entrypoint for scheduled sports sync runs."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from typing import Optional, Sequence

from squarepool.db import Base, SessionLocal, configure_engine
from squarepool.ingestion.changes import PgNotifier
from squarepool.ingestion.errors import SyncCancelled
from squarepool.ingestion.espn_client import ESPNClient
from squarepool.ingestion.leagues import LEAGUES
from squarepool.ingestion.sync import SportsSyncer, SyncResult
from squarepool.settings import load_settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130


class DryRunFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not str(record.msg).startswith("[dry-run]"):
            record.msg = f"[dry-run] {record.msg}"
        return True


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="squarepool-sports-sync",
        description="Sync teams, schedules and scores from ESPN.",
    )
    parser.add_argument("--sync-teams", action="store_true", help="Sync teams for every league.")
    parser.add_argument("--sync-schedule", action="store_true", help="Sync the season schedule.")
    parser.add_argument(
        "--sync-scores",
        action="store_true",
        help="Sync scores for in-progress and recent games.",
    )
    parser.add_argument("--dry-run", action="store_true", help="Log intended changes without writing them.")
    parser.add_argument(
        "--league",
        choices=sorted(LEAGUES),
        default=None,
        help="Only sync this league (default: all).",
    )
    return parser


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not (args.sync_teams or args.sync_schedule or args.sync_scores):
        parser.error("must specify one of: --sync-teams, --sync-schedule, --sync-scores")
    return args


def _resolve_log_level(name: str) -> int:
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        sys.stderr.write(f"invalid LOG_LEVEL: {name!r}\n")
        raise SystemExit(EXIT_USAGE)
    return level


def _configure_logging(level: int, dry_run: bool) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    if dry_run:
        for handler in logging.getLogger().handlers:
            handler.addFilter(DryRunFilter())


def _install_signal_handlers(cancel: threading.Event) -> None:
    def _handle(signum, _frame) -> None:
        logger.warning("Received signal=%s, cancelling sync", signum)
        cancel.set()

    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, _handle)


def _log_result(result: SyncResult) -> None:
    logging.info(
        "Done: type=%s fetched=%s processed=%s skipped=%s errors=%s notified=%s grids=%s failedLeagues=%s",
        result.sync_type,
        result.total_fetched,
        result.processed,
        result.skipped,
        result.errors,
        result.notified,
        result.grids_updated,
        ",".join(result.failed_leagues) or "-",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)

    try:
        settings = load_settings()
    except ValueError as exc:
        sys.stderr.write(f"invalid configuration: {exc}\n")
        raise SystemExit(EXIT_USAGE) from exc
    _configure_logging(_resolve_log_level(settings.log_level), args.dry_run)

    leagues = [args.league] if args.league else list(LEAGUES)
    cancel = threading.Event()
    _install_signal_handlers(cancel)

    logging.info("Starting sports sync leagues=%s dryRun=%s", ",".join(leagues), args.dry_run)
    engine = configure_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)

    client = ESPNClient.from_settings(settings, cancel=cancel)
    syncer = SportsSyncer(
        client,
        session_factory=SessionLocal,
        notifier=PgNotifier(),
        dry_run=args.dry_run,
        cancel=cancel,
    )
    try:
        # Modes run one after another: teams, then schedule, then scores.
        if args.sync_teams:
            _log_result(syncer.sync_teams(leagues))
        if args.sync_schedule:
            _log_result(syncer.sync_schedule(leagues))
        if args.sync_scores:
            _log_result(syncer.sync_scores(leagues))
    except SyncCancelled:
        logging.warning("Sports sync cancelled")
        return EXIT_CANCELLED
    except Exception:
        logging.exception("Sports sync failed")
        return EXIT_FAILURE
    finally:
        client.close()

    logging.info("Finished sports sync")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
