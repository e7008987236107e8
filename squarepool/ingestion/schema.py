"""Internal data contract for sports ingestion."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

SEASON_TYPE_PRESEASON = 1
SEASON_TYPE_REGULAR = 2
SEASON_TYPE_POSTSEASON = 3

EventStatus = Literal["scheduled", "in_progress", "final"]


class TeamIngestDTO(BaseModel):
    """A team as reported by ESPN. Colors are hex without the leading '#'."""

    id: str
    name: str = ""
    display_name: str = ""
    abbreviation: str = ""
    location: Optional[str] = None
    color: Optional[str] = None
    alternate_color: Optional[str] = None
    conference: Optional[str] = None
    division: Optional[str] = None


class EventIngestDTO(BaseModel):
    """
    Internal representation of a game used across fetch -> parse -> DB.

    Line scores stay None when the endpoint did not report them.
    """

    # Required fields
    id: str
    start_time_utc: datetime
    status: EventStatus
    home_team: TeamIngestDTO
    away_team: TeamIngestDTO

    # Optional fields
    name: Optional[str] = None
    status_detail: Optional[str] = None
    period: int = 0
    clock: Optional[str] = None
    season: int = 0
    season_type: int = 0
    week: Optional[int] = None
    venue: Optional[str] = None

    home_score: Optional[int] = None
    away_score: Optional[int] = None
    home_q1: Optional[int] = None
    home_q2: Optional[int] = None
    home_q3: Optional[int] = None
    home_q4: Optional[int] = None
    home_ot: Optional[int] = None
    away_q1: Optional[int] = None
    away_q2: Optional[int] = None
    away_q3: Optional[int] = None
    away_q4: Optional[int] = None
    away_ot: Optional[int] = None

    @property
    def postseason(self) -> bool:
        return self.season_type == SEASON_TYPE_POSTSEASON


class SeasonInfo(BaseModel):
    year: int
    start_date: datetime
    end_date: datetime
    type_name: str = ""
    in_season: bool = False


class ScoreboardOptions(BaseModel):
    date: Optional[str] = None  # YYYYMMDD
    week: Optional[int] = None
    season: Optional[int] = None
    season_type: Optional[int] = None
