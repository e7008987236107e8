from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    PrimaryKeyConstraint,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from squarepool.db import Base

# INTEGER[] on PostgreSQL, JSON list elsewhere (SQLite in tests).
NumbersArray = JSON().with_variant(postgresql.ARRAY(Integer), "postgresql")

EVENT_STATUS_SCHEDULED = "scheduled"
EVENT_STATUS_IN_PROGRESS = "in_progress"
EVENT_STATUS_FINAL = "final"

GRID_STATE_ACTIVE = "active"

SYNC_TYPE_TEAMS = "teams"
SYNC_TYPE_SCHEDULE = "schedule"
SYNC_TYPE_SCORES = "scores"


class SportsTeam(Base):
    __tablename__ = "sports_teams"
    __table_args__ = (PrimaryKeyConstraint("id", "league", name="pk_sports_teams"),)

    id = Column(String, nullable=False)
    league = Column(String, nullable=False)
    name = Column(String, nullable=False, default="")
    full_name = Column(String, nullable=False, default="")
    abbreviation = Column(String, nullable=False, default="")
    conference = Column(String, nullable=True)
    division = Column(String, nullable=True)
    location = Column(String, nullable=True)
    color = Column(String, nullable=True)             # RRGGBB, no leading '#'
    alternate_color = Column(String, nullable=True)
    created = Column(DateTime(timezone=True), server_default=func.now())
    modified = Column(DateTime(timezone=True), server_default=func.now())


class SportsEvent(Base):
    __tablename__ = "sports_events"

    id = Column(Integer, primary_key=True, index=True)
    espn_id = Column(String, nullable=False, unique=True)
    league = Column(String, nullable=False, index=True)
    name = Column(String, nullable=True)
    home_team_id = Column(String, nullable=False)
    away_team_id = Column(String, nullable=False)
    event_date = Column(DateTime(timezone=True), nullable=False, index=True)
    season = Column(Integer, nullable=False, default=0)
    week = Column(Integer, nullable=True)
    postseason = Column(Boolean, nullable=False, default=False)
    venue = Column(String, nullable=True)

    status = Column(String, nullable=False, default=EVENT_STATUS_SCHEDULED)
    status_detail = Column(String, nullable=True)   # "Halftime", "End of 1st Quarter"
    period = Column(Integer, nullable=True)
    clock = Column(String, nullable=True)

    home_score = Column(Integer, nullable=True)
    away_score = Column(Integer, nullable=True)
    home_q1 = Column(Integer, nullable=True)
    home_q2 = Column(Integer, nullable=True)
    home_q3 = Column(Integer, nullable=True)
    home_q4 = Column(Integer, nullable=True)
    home_ot = Column(Integer, nullable=True)
    away_q1 = Column(Integer, nullable=True)
    away_q2 = Column(Integer, nullable=True)
    away_q3 = Column(Integer, nullable=True)
    away_q4 = Column(Integer, nullable=True)
    away_ot = Column(Integer, nullable=True)

    created = Column(DateTime(timezone=True), server_default=func.now())
    modified = Column(DateTime(timezone=True), server_default=func.now())
    last_synced = Column(DateTime(timezone=True), server_default=func.now())

    grids = relationship("Grid", back_populates="sports_event")


class SportsSyncLog(Base):
    __tablename__ = "sports_sync_log"

    id = Column(Integer, primary_key=True, index=True)
    sync_type = Column(String, nullable=False)
    league = Column(String, nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    records_processed = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)
    success = Column(Boolean, nullable=True)


# Tables below are owned by the pool service; mapped here so the sync can
# propagate team data and the squares engine can read drawn numbers.


class Grid(Base):
    __tablename__ = "grids"

    id = Column(Integer, primary_key=True, index=True)
    pool_id = Column(Integer, nullable=False, index=True)
    ord = Column(Integer, nullable=False, default=0)
    label = Column(String, nullable=True)
    home_team_name = Column(String, nullable=True)
    away_team_name = Column(String, nullable=True)
    home_numbers = Column(NumbersArray, nullable=True)
    away_numbers = Column(NumbersArray, nullable=True)
    grid_type = Column(String, nullable=False, default="std100")
    number_set_config = Column(String, nullable=False, default="standard")
    state = Column(String, nullable=False, default=GRID_STATE_ACTIVE)
    sports_event_id = Column(Integer, ForeignKey("sports_events.id"), nullable=True, index=True)
    created = Column(DateTime(timezone=True), server_default=func.now())
    modified = Column(DateTime(timezone=True), server_default=func.now())

    sports_event = relationship("SportsEvent", back_populates="grids")
    settings = relationship("GridSettings", back_populates="grid", uselist=False)
    number_sets = relationship("GridNumberSet", back_populates="grid")


class GridSettings(Base):
    __tablename__ = "grid_settings"

    grid_id = Column(Integer, ForeignKey("grids.id"), primary_key=True)
    home_team_color_1 = Column(String, nullable=True)  # '#RRGGBB'
    home_team_color_2 = Column(String, nullable=True)
    away_team_color_1 = Column(String, nullable=True)
    away_team_color_2 = Column(String, nullable=True)
    modified = Column(DateTime(timezone=True), server_default=func.now())

    grid = relationship("Grid", back_populates="settings")


class GridNumberSet(Base):
    __tablename__ = "grid_number_sets"
    __table_args__ = (
        UniqueConstraint("grid_id", "set_type", name="uq_grid_number_sets_grid_set_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    grid_id = Column(Integer, ForeignKey("grids.id"), nullable=False, index=True)
    set_type = Column(String, nullable=False)
    home_numbers = Column(NumbersArray, nullable=True)
    away_numbers = Column(NumbersArray, nullable=True)
    manual_draw = Column(Boolean, nullable=False, default=False)
    created = Column(DateTime(timezone=True), server_default=func.now())

    grid = relationship("Grid", back_populates="number_sets")

    def has_numbers(self) -> bool:
        return bool(self.home_numbers) and bool(self.away_numbers)
