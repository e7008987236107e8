"""ESPN HTTP client for teams, scoreboards, schedules and event summaries."""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, timedelta
from typing import Any, Optional

import requests

from squarepool.ingestion.errors import (
    ESPNDecodeError,
    ESPNRateLimitedError,
    ESPNRequestError,
    ESPNStatusError,
    EventNotFoundError,
    SyncCancelled,
)
from squarepool.ingestion.espn_parser import (
    parse_scoreboard,
    parse_season_info,
    parse_summary,
    parse_team_schedule,
    parse_teams,
)
from squarepool.ingestion.leagues import get_league
from squarepool.ingestion.ratelimit import RateLimiter
from squarepool.ingestion.schema import EventIngestDTO, ScoreboardOptions, SeasonInfo, TeamIngestDTO
from squarepool.settings import (
    DEFAULT_ESPN_BASE_URL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RATE_LIMIT_PER_SECOND,
    DEFAULT_TIMEOUT_SECONDS,
    SyncSettings,
)

logger = logging.getLogger(__name__)

DEFAULT_BACKOFF_SECONDS = 1.0
DEFAULT_USER_AGENT = "squarepool-sports-sync/1.0"
TEAMS_PAGE_LIMIT = "1000"


def _truncate(text: str | None, limit: int = 300) -> str:
    if not text:
        return ""
    return text[:limit]


def format_espn_date(value: date | datetime) -> str:
    return value.strftime("%Y%m%d")


class ESPNClient:
    """Rate-limited ESPN client.

    Only HTTP 429 is retried, with exponential backoff. Every wait honours the
    ``cancel`` event so a shutdown aborts the call in flight.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_ESPN_BASE_URL,
        rate_limit: float = DEFAULT_RATE_LIMIT_PER_SECOND,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        session: Optional[requests.Session] = None,
        cancel: Optional[threading.Event] = None,
        rate_limiter: Optional[RateLimiter] = None,
        sleep_fn=None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self.cancel = cancel or threading.Event()
        self.rate_limiter = rate_limiter or RateLimiter(rate_limit, burst=1)
        self._sleep = sleep_fn
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": DEFAULT_USER_AGENT,
                "Accept": "application/json",
            }
        )

    @classmethod
    def from_settings(cls, settings: SyncSettings, cancel: Optional[threading.Event] = None) -> "ESPNClient":
        return cls(
            base_url=settings.espn_base_url,
            rate_limit=settings.espn_rate_limit,
            timeout=settings.espn_timeout_seconds,
            max_retries=settings.espn_max_retries,
            cancel=cancel,
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ESPNClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _check_cancelled(self) -> None:
        if self.cancel.is_set():
            raise SyncCancelled("ESPN request cancelled")

    def _backoff(self, seconds: float) -> None:
        if self._sleep is None:
            if self.cancel.wait(seconds):
                raise SyncCancelled("cancelled during retry backoff")
            return
        self._sleep(seconds)
        self._check_cancelled()

    def _request(self, path: str, params: Optional[dict[str, str]] = None) -> requests.Response:
        url = f"{self.base_url}{path}"
        for attempt in range(self.max_retries + 1):
            self._check_cancelled()
            self.rate_limiter.wait(self.cancel)
            logger.debug("ESPN request url=%s params=%s attempt=%s", url, params, attempt + 1)
            try:
                response = self.session.get(url, params=params, timeout=self.timeout)
            except requests.RequestException as exc:
                logger.warning("ESPN request failed url=%s error=%s", url, exc)
                raise ESPNRequestError(f"executing request {url}: {exc}") from exc

            logger.debug("ESPN response url=%s status=%s", url, response.status_code)
            if response.status_code != 429:
                return response

            if attempt == self.max_retries:
                break
            backoff = self.backoff_seconds * (2**attempt)
            logger.warning(
                "ESPN rate limited url=%s attempt=%s backoff=%s",
                url,
                attempt + 1,
                backoff,
            )
            self._backoff(backoff)

        raise ESPNRateLimitedError(
            f"rate limited after {self.max_retries} retries: {url}",
            status_code=429,
        )

    def _get_json(self, path: str, params: Optional[dict[str, str]] = None) -> dict[str, Any]:
        response = self._request(path, params)
        if response.status_code != 200:
            body = _truncate(response.text)
            logger.error("ESPN non-200 status=%s path=%s body=%s", response.status_code, path, body)
            raise ESPNStatusError(
                f"unexpected status code: {response.status_code}",
                status_code=response.status_code,
                body=body,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ESPNDecodeError(
                f"decoding response from {path}: {exc}; body={_truncate(response.text, 120)!r}"
            ) from exc
        if not isinstance(payload, dict):
            raise ESPNDecodeError(f"decoding response from {path}: expected an object, got {type(payload).__name__}")
        return payload

    def get_teams(self, league_key: str) -> list[TeamIngestDTO]:
        league = get_league(league_key)
        payload = self._get_json(f"/{league.espn_path}/teams", {"limit": TEAMS_PAGE_LIMIT})
        return parse_teams(payload)

    def get_scoreboard(
        self,
        league_key: str,
        options: Optional[ScoreboardOptions] = None,
    ) -> list[EventIngestDTO]:
        league = get_league(league_key)
        options = options or ScoreboardOptions()
        params: dict[str, str] = {}
        if options.date:
            params["dates"] = options.date
        if options.week and options.week > 0 and league.is_football:
            params["week"] = str(options.week)
        if options.season and options.season > 0:
            params["seasonYear"] = str(options.season)
        if options.season_type and options.season_type > 0:
            params["seasontype"] = str(options.season_type)
        payload = self._get_json(f"/{league.espn_path}/scoreboard", params or None)
        return parse_scoreboard(payload)

    def get_scoreboard_for_date_range(
        self,
        league_key: str,
        start: date,
        end: date,
    ) -> list[EventIngestDTO]:
        """Fetch every day in ``[start, end]`` and merge the results by event id."""

        get_league(league_key)
        if isinstance(start, datetime):
            start = start.date()
        if isinstance(end, datetime):
            end = end.date()

        events: list[EventIngestDTO] = []
        seen: set[str] = set()
        day = start
        while day <= end:
            for event in self.get_scoreboard(league_key, ScoreboardOptions(date=format_espn_date(day))):
                if event.id not in seen:
                    seen.add(event.id)
                    events.append(event)
            day += timedelta(days=1)
        return events

    def get_team_schedule(self, league_key: str, team_id: str) -> list[EventIngestDTO]:
        league = get_league(league_key)
        payload = self._get_json(f"/{league.espn_path}/teams/{team_id}/schedule")
        return parse_team_schedule(payload)

    def get_event_summary(self, league_key: str, event_id: str) -> EventIngestDTO:
        league = get_league(league_key)
        try:
            payload = self._get_json(f"/{league.espn_path}/summary", {"event": event_id})
        except ESPNStatusError as exc:
            if exc.status_code == 404:
                raise EventNotFoundError(
                    f"event not found: {event_id}", status_code=404, body=exc.body
                ) from exc
            raise
        return parse_summary(payload)

    def get_season_info(self, league_key: str, now: Optional[datetime] = None) -> SeasonInfo:
        league = get_league(league_key)
        payload = self._get_json(f"/{league.espn_path}/scoreboard")
        return parse_season_info(payload, now=now)
