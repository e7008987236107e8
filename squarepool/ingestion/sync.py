"""Sync teams, schedules and live scores from ESPN into the local database."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from sqlalchemy.orm import Session

from squarepool.db import SessionLocal
from squarepool.ingestion.changes import LoggingNotifier, Notifier, ScoreSnapshot, sports_event_data_changed
from squarepool.ingestion.errors import ESPNClientError, EventParseError, SyncCancelled
from squarepool.ingestion.espn_client import ESPNClient, format_espn_date
from squarepool.ingestion.leagues import NCAAB, LeagueInfo, get_league
from squarepool.ingestion.schema import (
    SEASON_TYPE_POSTSEASON,
    SEASON_TYPE_REGULAR,
    EventIngestDTO,
    ScoreboardOptions,
)
from squarepool.models import (
    EVENT_STATUS_FINAL,
    SYNC_TYPE_SCHEDULE,
    SYNC_TYPE_SCORES,
    SYNC_TYPE_TEAMS,
)
from squarepool.store.events import (
    event_by_espn_id,
    event_values,
    events_needing_score_update,
    finalize_stale_events,
    upsert_event,
)
from squarepool.store.grids import sync_grids_from_event
from squarepool.store.sync_log import complete_sync, start_sync
from squarepool.store.teams import teams_by_league, upsert_team

logger = logging.getLogger(__name__)

TEAM_PROGRESS_EVERY = 50


class ScheduleSyncError(RuntimeError):
    pass


@dataclass
class SyncResult:
    sync_type: str
    total_fetched: int = 0
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    notified: int = 0
    grids_updated: int = 0
    failed_leagues: list[str] = field(default_factory=list)


@dataclass
class EventOutcome:
    event_id: Optional[int] = None
    created: bool = False
    skipped: bool = False
    notified: bool = False
    grids_updated: int = 0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _error_text(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class SportsSyncer:
    """Runs the teams, schedule and scores sync modes for a set of leagues.

    Writes go through ``session_factory`` sessions. With ``dry_run`` nothing is
    written or published; intended actions are logged instead.
    """

    def __init__(
        self,
        client: ESPNClient,
        session_factory: Callable[[], Session] = SessionLocal,
        notifier: Optional[Notifier] = None,
        dry_run: bool = False,
        cancel: Optional[threading.Event] = None,
        now_fn: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.client = client
        self.session_factory = session_factory
        self.notifier = notifier or LoggingNotifier()
        self.dry_run = dry_run
        self.cancel = cancel or client.cancel
        self._now = now_fn

    def _check_cancelled(self) -> None:
        if self.cancel.is_set():
            raise SyncCancelled("sync cancelled")

    # -- sync log helpers -------------------------------------------------

    def _start_log(self, db: Session, sync_type: str, league: Optional[str]):
        if self.dry_run:
            return None
        try:
            log = start_sync(db, sync_type, league, now=self._now())
            db.commit()
            return log
        except Exception:
            db.rollback()
            logger.warning("Failed to create sync log type=%s league=%s", sync_type, league, exc_info=True)
            return None

    def _complete_log(self, db: Session, log, processed: int, success: bool, error: Optional[str] = None) -> None:
        if log is None:
            return
        try:
            complete_sync(db, log, processed, success, error, now=self._now())
            db.commit()
        except Exception:
            db.rollback()
            logger.warning("Failed to complete sync log id=%s", log.id, exc_info=True)

    # -- teams ------------------------------------------------------------

    def sync_teams(self, leagues: Iterable[str]) -> SyncResult:
        result = SyncResult(SYNC_TYPE_TEAMS)
        logger.info("Syncing teams")
        with self.session_factory() as db:
            for league_key in leagues:
                self._check_cancelled()
                get_league(league_key)
                logger.info("Fetching teams league=%s", league_key)
                log = self._start_log(db, SYNC_TYPE_TEAMS, league_key)
                try:
                    teams = self.client.get_teams(league_key)
                except SyncCancelled:
                    raise
                except ESPNClientError as exc:
                    result.errors += 1
                    result.failed_leagues.append(league_key)
                    logger.error("Failed to fetch teams league=%s error=%s", league_key, exc)
                    self._complete_log(db, log, 0, False, _error_text(exc))
                    continue

                result.total_fetched += len(teams)
                logger.info("Found teams league=%s count=%s", league_key, len(teams))
                for team in teams:
                    self._check_cancelled()
                    logger.debug("Processing team league=%s teamID=%s name=%s", league_key, team.id, team.name)
                    if self.dry_run:
                        result.skipped += 1
                        continue
                    try:
                        upsert_team(db, league_key, team, now=self._now())
                        db.commit()
                        result.processed += 1
                    except Exception:
                        db.rollback()
                        result.errors += 1
                        logger.exception("Failed upserting team league=%s teamID=%s", league_key, team.id)

                self._complete_log(db, log, len(teams), True)
        return result

    # -- schedule ---------------------------------------------------------

    def sync_schedule(self, leagues: Iterable[str]) -> SyncResult:
        result = SyncResult(SYNC_TYPE_SCHEDULE)
        logger.info("Syncing schedule")
        with self.session_factory() as db:
            for league_key in leagues:
                self._check_cancelled()
                league = get_league(league_key)
                try:
                    season = self.client.get_season_info(league_key, now=self._now())
                except SyncCancelled:
                    raise
                except (ESPNClientError, EventParseError) as exc:
                    result.errors += 1
                    result.failed_leagues.append(league_key)
                    logger.error("Failed to get season info league=%s error=%s", league_key, exc)
                    log = self._start_log(db, SYNC_TYPE_SCHEDULE, league_key)
                    self._complete_log(db, log, 0, False, f"season info: {_error_text(exc)}")
                    continue

                logger.info(
                    "Got season info league=%s seasonYear=%s seasonStart=%s seasonEnd=%s inSeason=%s seasonType=%s",
                    league_key,
                    season.year,
                    season.start_date.date(),
                    season.end_date.date(),
                    season.in_season,
                    season.type_name,
                )
                log = self._start_log(db, SYNC_TYPE_SCHEDULE, league_key)
                try:
                    events = self._fetch_schedule(db, league, season)
                except SyncCancelled:
                    raise
                except (ESPNClientError, EventParseError, ScheduleSyncError) as exc:
                    result.errors += 1
                    result.failed_leagues.append(league_key)
                    logger.error("Failed to fetch schedule league=%s error=%s", league_key, exc)
                    self._complete_log(db, log, 0, False, _error_text(exc))
                    continue

                result.total_fetched += len(events)
                logger.info("Found events league=%s count=%s", league_key, len(events))
                processed = self._process_all(db, league_key, events, result)
                logger.info("Finished syncing schedule league=%s processedCount=%s", league_key, processed)
                self._complete_log(db, log, processed, True)
        return result

    def _fetch_schedule(self, db: Session, league: LeagueInfo, season) -> list[EventIngestDTO]:
        if league.is_football:
            return self._fetch_football_schedule(league, season.year)
        if league.key == NCAAB:
            return self._fetch_team_schedules(db, league)

        now = self._now()
        if season.in_season:
            start, end = now.date(), season.end_date.date()
        else:
            start, end = season.start_date.date(), season.end_date.date()
        logger.info("Fetching schedule by date range league=%s startDate=%s endDate=%s", league.key, start, end)
        return self.client.get_scoreboard_for_date_range(league.key, start, end)

    def _fetch_football_schedule(self, league: LeagueInfo, season_year: int) -> list[EventIngestDTO]:
        events: list[EventIngestDTO] = []
        passes = (
            (SEASON_TYPE_REGULAR, "regular", league.regular_season_weeks),
            (SEASON_TYPE_POSTSEASON, "postseason", league.postseason_weeks),
        )
        for season_type, label, weeks in passes:
            for week in range(1, weeks + 1):
                self._check_cancelled()
                options = ScoreboardOptions(season=season_year, week=week, season_type=season_type)
                try:
                    events.extend(self.client.get_scoreboard(league.key, options))
                except ESPNClientError as exc:
                    logger.warning(
                        "Failed to fetch week league=%s week=%s seasonType=%s error=%s",
                        league.key,
                        week,
                        label,
                        exc,
                    )
        return events

    def _fetch_team_schedules(self, db: Session, league: LeagueInfo) -> list[EventIngestDTO]:
        """Union of every stored team's schedule.

        The NCAAB scoreboard only lists featured games, so smaller schools are
        reached through their team schedule instead.
        """

        teams = teams_by_league(db, league.key)
        if not teams:
            raise ScheduleSyncError(
                f"no teams found in database for {league.key} - run --sync-teams first"
            )
        logger.info("Fetching schedules for all teams league=%s teamCount=%s", league.key, len(teams))

        events: list[EventIngestDTO] = []
        seen: set[str] = set()
        team_ids = [(team.id, team.name) for team in teams]
        for index, (team_id, team_name) in enumerate(team_ids, start=1):
            self._check_cancelled()
            try:
                schedule = self.client.get_team_schedule(league.key, team_id)
            except ESPNClientError as exc:
                logger.warning(
                    "Failed to fetch team schedule league=%s teamID=%s teamName=%s progress=%s/%s error=%s",
                    league.key,
                    team_id,
                    team_name,
                    index,
                    len(team_ids),
                    exc,
                )
                continue
            for event in schedule:
                if event.id not in seen:
                    seen.add(event.id)
                    events.append(event)
            if index % TEAM_PROGRESS_EVERY == 0:
                logger.info(
                    "Sync progress league=%s progress=%s/%s eventsFound=%s",
                    league.key,
                    index,
                    len(team_ids),
                    len(events),
                )
        return events

    # -- scores -----------------------------------------------------------

    def sync_scores(self, leagues: Iterable[str]) -> SyncResult:
        result = SyncResult(SYNC_TYPE_SCORES)
        wanted = [get_league(key).key for key in leagues]
        logger.info("Syncing scores")
        with self.session_factory() as db:
            log = self._start_log(db, SYNC_TYPE_SCORES, None)

            if not self.dry_run:
                try:
                    stale = finalize_stale_events(db, now=self._now())
                    db.commit()
                    if stale:
                        logger.info("Finalized stale events count=%s", stale)
                except Exception:
                    db.rollback()
                    logger.warning("Failed to finalize stale events", exc_info=True)

            try:
                tracked = events_needing_score_update(db, now=self._now())
            except Exception as exc:
                db.rollback()
                self._complete_log(db, log, 0, False, _error_text(exc))
                raise

            by_league: dict[str, list[tuple[int, str, str]]] = {}
            for event in tracked:
                if event.league in wanted:
                    by_league.setdefault(event.league, []).append((event.id, event.espn_id, event.status))
            total = sum(len(items) for items in by_league.values())
            result.total_fetched = total
            logger.info("Found events needing score update count=%s", total)

            for league_key, items in by_league.items():
                self._check_cancelled()
                lookup = self._scoreboard_lookup(league_key)
                for event_id, espn_id, status in items:
                    self._check_cancelled()
                    dto = lookup.get(espn_id)
                    if dto is None:
                        logger.debug(
                            "Event not in scoreboard, fetching summary league=%s eventID=%s espnID=%s",
                            league_key,
                            event_id,
                            espn_id,
                        )
                        try:
                            dto = self.client.get_event_summary(league_key, espn_id)
                        except SyncCancelled:
                            raise
                        except (ESPNClientError, EventParseError) as exc:
                            result.errors += 1
                            logger.warning(
                                "Failed to fetch event summary league=%s eventID=%s espnID=%s status=%s error=%s",
                                league_key,
                                event_id,
                                espn_id,
                                status,
                                exc,
                            )
                            continue
                    self._process_one(db, league_key, dto, result)

            logger.info("Finished syncing scores updatedCount=%s", result.processed)
            self._complete_log(db, log, result.processed, True)
        return result

    def _scoreboard_lookup(self, league_key: str) -> dict[str, EventIngestDTO]:
        now = self._now()
        lookup: dict[str, EventIngestDTO] = {}
        for day in (now, now - timedelta(days=1)):
            date_str = format_espn_date(day)
            try:
                events = self.client.get_scoreboard(league_key, ScoreboardOptions(date=date_str))
            except ESPNClientError as exc:
                logger.warning("Failed to fetch scoreboard league=%s date=%s error=%s", league_key, date_str, exc)
                continue
            for event in events:
                lookup[event.id] = event
        return lookup

    # -- per-event reconciliation -------------------------------------------

    def _process_all(self, db: Session, league_key: str, events: list[EventIngestDTO], result: SyncResult) -> int:
        before = result.processed
        for event in events:
            self._check_cancelled()
            self._process_one(db, league_key, event, result)
        return result.processed - before

    def _process_one(self, db: Session, league_key: str, dto: EventIngestDTO, result: SyncResult) -> None:
        try:
            outcome = self.process_event(db, league_key, dto)
        except SyncCancelled:
            raise
        except Exception:
            db.rollback()
            result.errors += 1
            logger.exception("Failed to process event league=%s eventID=%s", league_key, dto.id)
            return
        if outcome.skipped:
            result.skipped += 1
            return
        result.processed += 1
        if outcome.notified:
            result.notified += 1
        result.grids_updated += outcome.grids_updated

    def process_event(self, db: Session, league_key: str, dto: EventIngestDTO) -> EventOutcome:
        """Reconcile one parsed event with the store.

        Teams are upserted before the event; the event is committed before any
        notification or grid propagation happens.
        """

        if self.dry_run:
            logger.info(
                "Would process event league=%s eventID=%s homeTeam=%s awayTeam=%s status=%s",
                league_key,
                dto.id,
                dto.home_team.abbreviation,
                dto.away_team.abbreviation,
                dto.status,
            )
            return EventOutcome(skipped=True)

        now = self._now()
        upsert_team(db, league_key, dto.home_team, now=now)
        upsert_team(db, league_key, dto.away_team, now=now)

        existing = event_by_espn_id(db, dto.id)
        previous: Optional[ScoreSnapshot] = None
        previous_teams: Optional[tuple[str, str]] = None
        if existing is not None:
            previous = ScoreSnapshot.of(existing)
            previous_teams = (existing.home_team_id, existing.away_team_id)
            if existing.status == EVENT_STATUS_FINAL and dto.status != EVENT_STATUS_FINAL:
                db.commit()
                logger.info(
                    "Skipping non-final update for final event league=%s eventID=%s status=%s",
                    league_key,
                    dto.id,
                    dto.status,
                )
                return EventOutcome(event_id=existing.id, skipped=True)

        event = upsert_event(db, event_values(league_key, dto), now=now)
        db.commit()
        outcome = EventOutcome(event_id=event.id, created=existing is None)

        if previous is not None and sports_event_data_changed(previous, event):
            try:
                self.notifier.notify_event_updated(db, event.id)
                outcome.notified = True
            except Exception:
                db.rollback()
                logger.warning(
                    "Failed to send sports_event_updated notification eventID=%s",
                    event.id,
                    exc_info=True,
                )

        teams_changed = previous_teams is None or previous_teams != (dto.home_team.id, dto.away_team.id)
        if teams_changed:
            outcome.grids_updated = sync_grids_from_event(db, event.id, now=now)
            db.commit()
            if outcome.grids_updated > 0:
                logger.info(
                    "Synced grid team names/colors from event eventID=%s gridsUpdated=%s",
                    event.id,
                    outcome.grids_updated,
                )
        return outcome