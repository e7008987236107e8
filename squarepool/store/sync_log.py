from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from squarepool.models import SportsSyncLog

MAX_ERROR_LENGTH = 500


class SyncLogClosedError(RuntimeError):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _truncate(text: str | None, limit: int = MAX_ERROR_LENGTH) -> str | None:
    if text is None:
        return None
    return text[:limit]


def start_sync(
    db: Session,
    sync_type: str,
    league: Optional[str] = None,
    now: Optional[datetime] = None,
) -> SportsSyncLog:
    log = SportsSyncLog(
        sync_type=sync_type,
        league=league,
        started_at=now or _utcnow(),
        records_processed=0,
    )
    db.add(log)
    db.flush()
    return log


def complete_sync(
    db: Session,
    log: SportsSyncLog,
    records_processed: int,
    success: bool,
    error_message: Optional[str] = None,
    now: Optional[datetime] = None,
) -> SportsSyncLog:
    if log.completed_at is not None:
        raise SyncLogClosedError(f"sync log {log.id} already completed")
    log.completed_at = now or _utcnow()
    log.records_processed = records_processed
    log.success = success
    log.error_message = _truncate(error_message)
    db.flush()
    return log


def last_successful_sync(
    db: Session,
    sync_type: str,
    league: Optional[str] = None,
) -> Optional[SportsSyncLog]:
    query = db.query(SportsSyncLog).filter(
        SportsSyncLog.sync_type == sync_type,
        SportsSyncLog.success.is_(True),
        SportsSyncLog.completed_at.isnot(None),
    )
    if league:
        query = query.filter(SportsSyncLog.league == league)
    return query.order_by(SportsSyncLog.completed_at.desc(), SportsSyncLog.id.desc()).first()
