"""Event reads, the score-update window, and idempotent event upserts."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session, aliased

from squarepool.ingestion.schema import EventIngestDTO
from squarepool.models import (
    EVENT_STATUS_FINAL,
    EVENT_STATUS_IN_PROGRESS,
    EVENT_STATUS_SCHEDULED,
    SportsEvent,
    SportsTeam,
)
from squarepool.store.teams import team_by_id

logger = logging.getLogger(__name__)

SCORE_LOOKBACK = timedelta(days=1)
UPCOMING_LOOKAHEAD = timedelta(hours=2)
LINKABLE_STATUSES = (EVENT_STATUS_SCHEDULED, EVENT_STATUS_IN_PROGRESS)

LINE_SCORE_FIELDS = (
    "home_q1",
    "home_q2",
    "home_q3",
    "home_q4",
    "home_ot",
    "away_q1",
    "away_q2",
    "away_q3",
    "away_q4",
    "away_ot",
)

# Cleared when a stale event is forced to final.
STALE_CLEARED_FIELDS = ("home_score", "away_score", *LINE_SCORE_FIELDS, "period", "clock", "status_detail")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _like_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def event_by_id(db: Session, event_id: int) -> Optional[SportsEvent]:
    return db.get(SportsEvent, event_id)


def event_by_espn_id(db: Session, espn_id: str) -> Optional[SportsEvent]:
    return db.query(SportsEvent).filter(SportsEvent.espn_id == espn_id).one_or_none()


def event_with_teams(
    db: Session,
    event_id: int,
) -> Optional[tuple[SportsEvent, Optional[SportsTeam], Optional[SportsTeam]]]:
    event = event_by_id(db, event_id)
    if event is None:
        return None
    home = team_by_id(db, event.home_team_id, event.league)
    away = team_by_id(db, event.away_team_id, event.league)
    return event, home, away


def events_by_league(
    db: Session,
    league: str,
    status: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[SportsEvent]:
    query = db.query(SportsEvent).filter(SportsEvent.league == league)
    if status:
        query = query.filter(SportsEvent.status == status)
    query = query.order_by(SportsEvent.event_date.asc())
    if limit and limit > 0:
        query = query.limit(limit)
    return query.all()


def upcoming_events(
    db: Session,
    league: str,
    limit: int,
    now: Optional[datetime] = None,
) -> list[SportsEvent]:
    now = now or _utcnow()
    return (
        db.query(SportsEvent)
        .filter(
            SportsEvent.league == league,
            SportsEvent.status == EVENT_STATUS_SCHEDULED,
            SportsEvent.event_date >= now,
        )
        .order_by(SportsEvent.event_date.asc())
        .limit(limit)
        .all()
    )


def linkable_events(
    db: Session,
    league: str,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[SportsEvent], int]:
    """Events a grid can still be linked to, plus the total for pagination."""

    query = db.query(SportsEvent).filter(
        SportsEvent.league == league,
        SportsEvent.status.in_(LINKABLE_STATUSES),
    )
    total = query.count()
    events = (
        query.order_by(SportsEvent.event_date.asc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return events, total


def search_linkable_events(
    db: Session,
    league: str,
    search: str,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[SportsEvent], int]:
    """Linkable events where either team's name, full name or abbreviation matches ``search``."""

    home = aliased(SportsTeam)
    away = aliased(SportsTeam)
    pattern = f"%{_like_escape(search)}%"
    query = (
        db.query(SportsEvent)
        .join(home, and_(home.id == SportsEvent.home_team_id, home.league == SportsEvent.league))
        .join(away, and_(away.id == SportsEvent.away_team_id, away.league == SportsEvent.league))
        .filter(
            SportsEvent.league == league,
            SportsEvent.status.in_(LINKABLE_STATUSES),
            or_(
                home.name.ilike(pattern, escape="\\"),
                home.full_name.ilike(pattern, escape="\\"),
                home.abbreviation.ilike(pattern, escape="\\"),
                away.name.ilike(pattern, escape="\\"),
                away.full_name.ilike(pattern, escape="\\"),
                away.abbreviation.ilike(pattern, escape="\\"),
            ),
        )
    )
    total = query.count()
    events = (
        query.order_by(SportsEvent.event_date.asc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return events, total


def in_progress_events(db: Session) -> list[SportsEvent]:
    return (
        db.query(SportsEvent)
        .filter(SportsEvent.status == EVENT_STATUS_IN_PROGRESS)
        .order_by(SportsEvent.event_date.asc())
        .all()
    )


def events_needing_score_update(db: Session, now: Optional[datetime] = None) -> list[SportsEvent]:
    """Events in the score-update window.

    In progress and started within the last day, scheduled to start within two
    hours, or not final and started within the last day.
    """

    now = now or _utcnow()
    lookback = now - SCORE_LOOKBACK
    return (
        db.query(SportsEvent)
        .filter(
            or_(
                and_(
                    SportsEvent.status == EVENT_STATUS_IN_PROGRESS,
                    SportsEvent.event_date >= lookback,
                ),
                and_(
                    SportsEvent.status == EVENT_STATUS_SCHEDULED,
                    SportsEvent.event_date.between(now, now + UPCOMING_LOOKAHEAD),
                ),
                and_(
                    SportsEvent.status != EVENT_STATUS_FINAL,
                    SportsEvent.event_date >= lookback,
                    SportsEvent.event_date < now,
                ),
            )
        )
        .order_by(SportsEvent.event_date.asc())
        .all()
    )


def finalize_stale_events(db: Session, now: Optional[datetime] = None) -> int:
    """Force non-final events older than a day to final and clear their scores.

    Returns the number of rows changed; a second call right after returns 0.
    """

    now = now or _utcnow()
    values: dict[Any, Any] = {getattr(SportsEvent, field): None for field in STALE_CLEARED_FIELDS}
    values[SportsEvent.status] = EVENT_STATUS_FINAL
    values[SportsEvent.modified] = now
    return (
        db.query(SportsEvent)
        .filter(
            SportsEvent.status != EVENT_STATUS_FINAL,
            SportsEvent.event_date < now - SCORE_LOOKBACK,
        )
        .update(values, synchronize_session="fetch")
    )


def event_count(db: Session, league: Optional[str] = None) -> int:
    query = db.query(func.count(SportsEvent.id))
    if league:
        query = query.filter(SportsEvent.league == league)
    return query.scalar() or 0


def event_values(league: str, dto: EventIngestDTO) -> dict[str, Any]:
    """Column values for a parsed event. Empty text fields are stored as NULL."""

    values: dict[str, Any] = {
        "espn_id": dto.id,
        "league": league,
        "name": dto.name or None,
        "home_team_id": dto.home_team.id,
        "away_team_id": dto.away_team.id,
        "event_date": dto.start_time_utc,
        "season": dto.season,
        "week": dto.week,
        "postseason": dto.postseason,
        "venue": dto.venue or None,
        "status": dto.status,
        "status_detail": dto.status_detail or None,
        "period": dto.period,
        "clock": dto.clock or None,
        "home_score": dto.home_score,
        "away_score": dto.away_score,
    }
    for field in LINE_SCORE_FIELDS:
        values[field] = getattr(dto, field)
    return values


def upsert_event(db: Session, values: dict[str, Any], now: Optional[datetime] = None) -> SportsEvent:
    """Insert or update an event keyed by ``espn_id``.

    Every column is replaced, NULLs included, so score corrections downward
    land as sent.
    """

    now = now or _utcnow()
    event = event_by_espn_id(db, values["espn_id"])
    if event is None:
        event = SportsEvent(created=now)
        db.add(event)

    for field, value in values.items():
        setattr(event, field, value)
    event.modified = now
    event.last_synced = now
    db.flush()
    return event
