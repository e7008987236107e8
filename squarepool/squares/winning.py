"""Map game scores onto winning grid squares."""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from squarepool.models import Grid, SportsEvent
from squarepool.schemas import WinningPeriodInfo
from squarepool.squares.grid_types import get_grid_type
from squarepool.squares.number_sets import (
    ALL,
    FINAL,
    HALF,
    Q1,
    Q2,
    Q3,
    Q4,
    STANDARD,
    get_set_types,
    is_valid_number_set_config_for_league,
    long_label,
)
from squarepool.squares.periods import is_period_complete, score_for_period
from squarepool.store.grids import number_sets_by_grid

logger = logging.getLogger(__name__)

PERIOD_ORDER = {Q1: 1, HALF: 2, Q2: 3, Q3: 4, FINAL: 5, ALL: 6, Q4: 7}


def _position(numbers: Sequence[int], digit: int) -> int:
    for i, n in enumerate(numbers):
        if n == digit:
            return i
    return -1


def calculate_winning_square(
    home_score: int,
    away_score: int,
    home_numbers: Optional[Sequence[int]],
    away_numbers: Optional[Sequence[int]],
    grid_type: str,
) -> int:
    """Return the 1-based square id for a score, or 0 when nothing matches.

    Rows follow the away team's drawn digits and columns the home team's. On the
    smaller boards one cell spans two digit positions along a spanned axis.
    """

    info = get_grid_type(grid_type)
    if home_numbers is None or away_numbers is None:
        return 0
    if len(home_numbers) != 10 or len(away_numbers) != 10:
        return 0

    home_pos = _position(home_numbers, home_score % 10)
    away_pos = _position(away_numbers, away_score % 10)
    if home_pos < 0 or away_pos < 0:
        return 0

    row = away_pos // info.away_span
    col = home_pos // info.home_span
    return row * info.cols + col + 1


def get_winning_squares(
    event,
    config: str,
    grid_type: str,
    home_numbers: Optional[Sequence[int]],
    away_numbers: Optional[Sequence[int]],
    number_sets: Optional[Mapping[str, object]] = None,
) -> dict[str, int]:
    """Winning square per completed period, keyed by set type.

    Periods that are still open or have no score yet are left out. Multi-set
    configs use the per-period draw when one exists and fall back to the grid's
    own numbers otherwise.
    """

    result: dict[str, int] = {}
    if not is_valid_number_set_config_for_league(config, event.league):
        logger.debug("number set config not allowed config=%s league=%s", config, event.league)
        return result

    number_sets = number_sets or {}
    for set_type in get_set_types(config):
        if not is_period_complete(event, set_type):
            continue
        home, away = score_for_period(event, set_type)
        if home is None or away is None:
            continue

        home_nums, away_nums = home_numbers, away_numbers
        if config != STANDARD:
            ns = number_sets.get(set_type)
            if ns is not None and ns.has_numbers():
                home_nums, away_nums = ns.home_numbers, ns.away_numbers

        square_id = calculate_winning_square(home, away, home_nums, away_nums, grid_type)
        if square_id > 0:
            result[set_type] = square_id
    return result


def get_winning_periods_for_square(
    square_id: int,
    winning_squares: Optional[Mapping[str, int]],
    event,
    home_team_name: str,
    away_team_name: str,
) -> list[WinningPeriodInfo]:
    if square_id <= 0 or not winning_squares or event is None:
        return []

    periods: list[WinningPeriodInfo] = []
    for period, winner in winning_squares.items():
        if winner != square_id:
            continue
        home, away = score_for_period(event, period)
        if home is None or away is None:
            continue
        periods.append(
            WinningPeriodInfo(
                period=period,
                label=long_label(period),
                home_score=home,
                away_score=away,
                home_team_name=home_team_name,
                away_team_name=away_team_name,
            )
        )
    periods.sort(key=lambda p: PERIOD_ORDER.get(p.period, len(PERIOD_ORDER) + 1))
    return periods


def grid_winning_squares(db: Session, grid: Grid) -> dict[str, int]:
    """Winning squares for a stored grid using its linked event and drawn numbers."""

    if grid.sports_event_id is None:
        return {}
    event = db.query(SportsEvent).filter(SportsEvent.id == grid.sports_event_id).one_or_none()
    if event is None:
        return {}
    return get_winning_squares(
        event,
        grid.number_set_config,
        grid.grid_type,
        grid.home_numbers,
        grid.away_numbers,
        number_sets_by_grid(db, grid.id),
    )
