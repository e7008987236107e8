"""Supported leagues and their ESPN endpoint paths."""

from __future__ import annotations

from dataclasses import dataclass

from squarepool.ingestion.errors import InvalidLeagueError


@dataclass(frozen=True)
class LeagueInfo:
    key: str
    label: str
    espn_path: str
    regulation_periods: int
    uses_halves: bool = False
    # Week-keyed schedule fetching; zero for leagues fetched by date or team.
    regular_season_weeks: int = 0
    postseason_weeks: int = 0

    @property
    def is_football(self) -> bool:
        return self.regular_season_weeks > 0


NFL = "nfl"
NBA = "nba"
WNBA = "wnba"
NCAAB = "ncaab"
NCAAF = "ncaaf"

LEAGUES: dict[str, LeagueInfo] = {
    NFL: LeagueInfo(
        key=NFL,
        label="NFL",
        espn_path="football/nfl",
        regulation_periods=4,
        regular_season_weeks=18,
        postseason_weeks=5,
    ),
    NBA: LeagueInfo(key=NBA, label="NBA", espn_path="basketball/nba", regulation_periods=4),
    WNBA: LeagueInfo(key=WNBA, label="WNBA", espn_path="basketball/wnba", regulation_periods=4),
    NCAAB: LeagueInfo(
        key=NCAAB,
        label="NCAAB",
        espn_path="basketball/mens-college-basketball",
        regulation_periods=2,
        uses_halves=True,
    ),
    NCAAF: LeagueInfo(
        key=NCAAF,
        label="NCAAF",
        espn_path="football/college-football",
        regulation_periods=4,
        regular_season_weeks=15,
        postseason_weeks=3,
    ),
}


def is_valid_league(league_key: str | None) -> bool:
    return bool(league_key) and league_key in LEAGUES


def get_league(league_key: str) -> LeagueInfo:
    """Return league metadata for a key such as ``nfl``.

    Raises InvalidLeagueError when the league is not supported.
    """

    league = LEAGUES.get(league_key or "")
    if league is None:
        supported = ", ".join(LEAGUES)
        raise InvalidLeagueError(f"invalid league: {league_key!r} (supported: {supported})")
    return league


def get_league_path(league_key: str) -> str:
    return get_league(league_key).espn_path


def uses_halves(league_key: str) -> bool:
    league = LEAGUES.get(league_key)
    return bool(league and league.uses_halves)


def valid_leagues() -> list[tuple[str, str]]:
    return [(league.key, league.label) for league in LEAGUES.values()]
