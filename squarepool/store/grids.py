"""Grid-side writes and reads the sync and the squares engine need."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from squarepool.models import GRID_STATE_ACTIVE, Grid, GridNumberSet, GridSettings, SportsEvent
from squarepool.store.teams import team_by_id

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _grid_color(team_color: Optional[str]) -> Optional[str]:
    if team_color is None:
        return None
    return f"#{team_color}"


def _active_grid_ids(event_id: int):
    return select(Grid.id).where(
        Grid.sports_event_id == event_id,
        Grid.state == GRID_STATE_ACTIVE,
    )


def sync_grids_from_event(db: Session, event_id: int, now: Optional[datetime] = None) -> int:
    """Copy team names and colors from an event's teams onto its active grids.

    Names are rewritten wherever they differ. Colors are only filled in while
    both primary grid colors are still unset, so customised colors stay.
    Returns name updates plus color updates.
    """

    now = now or _utcnow()
    event = db.get(SportsEvent, event_id)
    if event is None:
        return 0
    home = team_by_id(db, event.home_team_id, event.league)
    away = team_by_id(db, event.away_team_id, event.league)
    if home is None or away is None:
        logger.warning(
            "Skipping grid sync, team missing eventID=%s home=%s away=%s",
            event_id,
            event.home_team_id,
            event.away_team_id,
        )
        return 0

    names_count = (
        db.query(Grid)
        .filter(
            Grid.sports_event_id == event_id,
            Grid.state == GRID_STATE_ACTIVE,
            or_(
                Grid.home_team_name.is_distinct_from(home.full_name),
                Grid.away_team_name.is_distinct_from(away.full_name),
            ),
        )
        .update(
            {
                Grid.home_team_name: home.full_name,
                Grid.away_team_name: away.full_name,
                Grid.modified: now,
            },
            synchronize_session="fetch",
        )
    )

    colors_count = 0
    if home.color is not None and away.color is not None:
        colors_count = (
            db.query(GridSettings)
            .filter(
                GridSettings.grid_id.in_(_active_grid_ids(event_id)),
                GridSettings.home_team_color_1.is_(None),
                GridSettings.away_team_color_1.is_(None),
            )
            .update(
                {
                    GridSettings.home_team_color_1: _grid_color(home.color),
                    GridSettings.home_team_color_2: _grid_color(home.alternate_color),
                    GridSettings.away_team_color_1: _grid_color(away.color),
                    GridSettings.away_team_color_2: _grid_color(away.alternate_color),
                    GridSettings.modified: now,
                },
                synchronize_session="fetch",
            )
        )

    return names_count + colors_count


def active_grid_pool_ids(db: Session, event_id: int) -> list[int]:
    rows = (
        db.query(Grid.pool_id)
        .filter(Grid.sports_event_id == event_id, Grid.state == GRID_STATE_ACTIVE)
        .distinct()
        .order_by(Grid.pool_id.asc())
        .all()
    )
    return [pool_id for (pool_id,) in rows]


def number_sets_by_grid(db: Session, grid_id: int) -> dict[str, GridNumberSet]:
    rows = db.query(GridNumberSet).filter(GridNumberSet.grid_id == grid_id).all()
    return {row.set_type: row for row in rows}
