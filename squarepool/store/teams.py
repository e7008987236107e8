"""Team reads and idempotent team upserts."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from squarepool.ingestion.schema import TeamIngestDTO
from squarepool.models import SportsEvent, SportsTeam

logger = logging.getLogger(__name__)

# Only overwritten when ESPN sends a value, so reviewed colors survive a sparse payload.
PRESERVED_TEAM_FIELDS = ("conference", "division", "location", "color", "alternate_color")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def team_by_id(db: Session, team_id: str, league: str) -> Optional[SportsTeam]:
    return db.get(SportsTeam, (team_id, league))


def teams_by_league(db: Session, league: str) -> list[SportsTeam]:
    return (
        db.query(SportsTeam)
        .filter(SportsTeam.league == league)
        .order_by(SportsTeam.name.asc())
        .all()
    )


def team_count(db: Session, league: Optional[str] = None) -> int:
    query = db.query(func.count(SportsTeam.id))
    if league:
        query = query.filter(SportsTeam.league == league)
    return query.scalar() or 0


def upsert_team(
    db: Session,
    league: str,
    dto: TeamIngestDTO,
    now: Optional[datetime] = None,
) -> SportsTeam:
    """Insert or update a team keyed by ``(id, league)``.

    Names and abbreviation always follow ESPN. Optional fields keep their stored
    value when the incoming one is missing.
    """

    now = now or _utcnow()
    team = team_by_id(db, dto.id, league)
    if team is None:
        team = SportsTeam(id=dto.id, league=league, created=now)
        db.add(team)

    team.name = dto.name
    team.full_name = dto.display_name
    team.abbreviation = dto.abbreviation
    for field in PRESERVED_TEAM_FIELDS:
        value = getattr(dto, field)
        if value is not None:
            setattr(team, field, value)
    team.modified = now
    db.flush()
    return team


def teams_for_events(db: Session, events: Iterable[SportsEvent]) -> dict[tuple[str, str], SportsTeam]:
    """Load the home and away teams of ``events``, keyed by ``(id, league)``."""

    keys: set[tuple[str, str]] = set()
    for event in events:
        keys.add((event.home_team_id, event.league))
        keys.add((event.away_team_id, event.league))

    teams: dict[tuple[str, str], SportsTeam] = {}
    for team_id, league in keys:
        team = team_by_id(db, team_id, league)
        if team is not None:
            teams[(team_id, league)] = team
    return teams
