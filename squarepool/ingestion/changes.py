"""Score change detection and the ``sports_event_updated`` notification."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Optional, Protocol

from sqlalchemy import text
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

SPORTS_EVENT_UPDATED_CHANNEL = "sports_event_updated"


@dataclass(frozen=True)
class ScoreSnapshot:
    """The score-relevant columns of an event.

    Name, venue and start time are not here: changing them does not notify.
    """

    status: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    period: Optional[int] = None
    clock: Optional[str] = None
    status_detail: Optional[str] = None
    home_q1: Optional[int] = None
    away_q1: Optional[int] = None
    home_q2: Optional[int] = None
    away_q2: Optional[int] = None
    home_q3: Optional[int] = None
    away_q3: Optional[int] = None
    home_q4: Optional[int] = None
    away_q4: Optional[int] = None
    home_ot: Optional[int] = None
    away_ot: Optional[int] = None

    @classmethod
    def of(cls, event) -> "ScoreSnapshot":
        return cls(**{f.name: getattr(event, f.name, None) for f in fields(cls)})


def sports_event_data_changed(old, new) -> bool:
    """True when any score-relevant field differs. None and 0 count as different."""

    before = old if isinstance(old, ScoreSnapshot) else ScoreSnapshot.of(old)
    after = new if isinstance(new, ScoreSnapshot) else ScoreSnapshot.of(new)
    return before != after


class Notifier(Protocol):
    def notify_event_updated(self, db: Session, event_id: int) -> None:
        ...


class PgNotifier:
    """Publishes through PostgreSQL ``pg_notify``; other databases only log."""

    def __init__(self, channel: str = SPORTS_EVENT_UPDATED_CHANNEL) -> None:
        self.channel = channel

    def notify_event_updated(self, db: Session, event_id: int) -> None:
        if db.get_bind().dialect.name != "postgresql":
            logger.info("Event updated channel=%s eventID=%s (no pg_notify on this database)", self.channel, event_id)
            return
        db.execute(
            text("SELECT pg_notify(:channel, :payload)"),
            {"channel": self.channel, "payload": str(event_id)},
        )
        db.commit()


class LoggingNotifier:
    def notify_event_updated(self, db: Session, event_id: int) -> None:
        logger.info("Event updated channel=%s eventID=%s", SPORTS_EVENT_UPDATED_CHANNEL, event_id)
