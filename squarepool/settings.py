from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./squarepool.db"
DEFAULT_ESPN_BASE_URL = "https://site.api.espn.com/apis/site/v2/sports"
DEFAULT_RATE_LIMIT_PER_SECOND = 10.0
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class SyncSettings:
    database_url: str
    espn_base_url: str
    espn_rate_limit: float
    espn_timeout_seconds: float
    espn_max_retries: int
    log_level: str


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


def load_settings() -> SyncSettings:
    database_url = (os.getenv("DATABASE_URL") or "").strip()
    if not database_url:
        database_url = DEFAULT_DATABASE_URL
        logger.debug("DATABASE_URL missing, using %s", DEFAULT_DATABASE_URL)
    return SyncSettings(
        database_url=database_url,
        espn_base_url=(os.getenv("ESPN_BASE_URL") or DEFAULT_ESPN_BASE_URL).rstrip("/"),
        espn_rate_limit=_env_float("ESPN_RATE_LIMIT", DEFAULT_RATE_LIMIT_PER_SECOND),
        espn_timeout_seconds=_env_float("ESPN_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        espn_max_retries=_env_int("ESPN_MAX_RETRIES", DEFAULT_MAX_RETRIES),
        log_level=(os.getenv("LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper(),
    )
