"""Board geometries a grid can be played on."""

from __future__ import annotations

from dataclasses import dataclass


class InvalidGridTypeError(ValueError):
    pass


@dataclass(frozen=True)
class GridTypeInfo:
    key: str
    description: str
    rows: int
    cols: int
    # Digit positions covered by one cell along each axis.
    away_span: int
    home_span: int

    @property
    def squares(self) -> int:
        return self.rows * self.cols


STD100 = "std100"
STD50 = "std50"
STD25 = "std25"
ROLL100 = "roll100"

GRID_TYPES: dict[str, GridTypeInfo] = {
    STD100: GridTypeInfo(STD100, "Standard, 100 squares", rows=10, cols=10, away_span=1, home_span=1),
    STD50: GridTypeInfo(STD50, "Standard, 50 squares", rows=5, cols=10, away_span=2, home_span=1),
    STD25: GridTypeInfo(STD25, "Standard, 25 squares", rows=5, cols=5, away_span=2, home_span=2),
    ROLL100: GridTypeInfo(ROLL100, "Rollover, 100 squares", rows=10, cols=10, away_span=1, home_span=1),
}


def get_grid_type(key: str) -> GridTypeInfo:
    info = GRID_TYPES.get(key or "")
    if info is None:
        raise InvalidGridTypeError(f"invalid grid type: {key!r}")
    return info


def is_valid_grid_type(key: str | None) -> bool:
    return bool(key) and key in GRID_TYPES


def grid_types() -> list[str]:
    return list(GRID_TYPES)
