from datetime import datetime
from pydantic import BaseModel
from typing import Optional


class SportsTeamOut(BaseModel):
    id: str
    league: str
    name: str
    full_name: str
    abbreviation: str
    conference: Optional[str] = None
    division: Optional[str] = None
    location: Optional[str] = None
    color: Optional[str] = None
    alternate_color: Optional[str] = None

    class Config:
        from_attributes = True


class SportsEventOut(BaseModel):
    id: int
    espn_id: str
    league: str
    name: Optional[str] = None
    home_team_id: str
    away_team_id: str
    event_date: datetime
    season: int
    week: Optional[int] = None
    postseason: bool
    venue: Optional[str] = None
    status: str
    status_detail: Optional[str] = None
    period: Optional[int] = None
    clock: Optional[str] = None
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
    home_team: Optional[SportsTeamOut] = None
    away_team: Optional[SportsTeamOut] = None
    last_synced: Optional[datetime] = None

    class Config:
        from_attributes = True


class WinningPeriodInfo(BaseModel):
    period: str
    label: str
    home_score: int
    away_score: int
    home_team_name: str
    away_team_name: str


class NumberSetTypeOut(BaseModel):
    key: str
    label: str
    long_label: str

    class Config:
        from_attributes = True


class NumberSetConfigOut(BaseModel):
    key: str
    label: str
    set_types: list[str]

    class Config:
        from_attributes = True


class LeagueOut(BaseModel):
    key: str
    label: str
    uses_halves: bool

    class Config:
        from_attributes = True
