"""Parsers for ESPN payloads.

Each endpoint has its own shape so each gets its own parser; all of them produce
the same EventIngestDTO.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from squarepool.ingestion.errors import EventParseError
from squarepool.ingestion.schema import EventIngestDTO, SeasonInfo, TeamIngestDTO

logger = logging.getLogger(__name__)

# Tried in order. ESPN mostly sends the truncated minute form.
ESPN_DATE_FORMATS = (
    "%Y-%m-%dT%H:%MZ",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
)


def _dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _str_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _safe_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        try:
            return int(float(text))
        except ValueError:
            return None


def parse_espn_date(value: Any) -> datetime:
    """Parse an ESPN timestamp into an aware UTC datetime."""

    if not isinstance(value, str) or not value.strip():
        raise EventParseError(f"missing date: {value!r}")
    text = value.strip()
    for fmt in ESPN_DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    raise EventParseError(f"could not parse date {text!r} with any known format")


def map_status(status: dict[str, Any]) -> str:
    status_type = _dict(_dict(status).get("type"))
    name = status_type.get("name")
    if name == "STATUS_SCHEDULED":
        return "scheduled"
    if name in ("STATUS_FINAL", "STATUS_FINAL_OT"):
        return "final"
    if status_type.get("completed") is True:
        return "final"
    if status_type.get("state") == "pre":
        return "scheduled"
    return "in_progress"


def parse_team(team: dict[str, Any]) -> TeamIngestDTO:
    team = _dict(team)
    team_id = _str_or_none(team.get("id"))
    if team_id is None:
        raise EventParseError("team without id")
    return TeamIngestDTO(
        id=team_id,
        name=str(team.get("name") or ""),
        display_name=str(team.get("displayName") or ""),
        abbreviation=str(team.get("abbreviation") or ""),
        location=_str_or_none(team.get("location")),
        color=_str_or_none(team.get("color")),
        alternate_color=_str_or_none(team.get("alternateColor")),
    )


def parse_teams(payload: dict[str, Any]) -> list[TeamIngestDTO]:
    """Flatten the teams endpoint (sports -> leagues -> teams -> team)."""

    teams: list[TeamIngestDTO] = []
    for sport in _list(_dict(payload).get("sports")):
        for league in _list(_dict(sport).get("leagues")):
            for entry in _list(_dict(league).get("teams")):
                try:
                    teams.append(parse_team(_dict(entry).get("team")))
                except EventParseError:
                    logger.warning("Skipping team without id entry=%s", entry)
    return teams


def _scoreboard_linescore(entry: dict[str, Any]) -> int | None:
    return _safe_int(_dict(entry).get("value"))


def _summary_linescore(entry: dict[str, Any]) -> int | None:
    return _safe_int(_dict(entry).get("displayValue"))


def split_linescores(
    linescores: list[Any],
    extract: Callable[[dict[str, Any]], int | None],
) -> dict[str, int | None]:
    """Spread line scores over q1..q4; everything after the fourth is overtime.

    Half-based leagues report two entries, which land in q1 and q2.
    """

    periods: dict[str, int | None] = {"q1": None, "q2": None, "q3": None, "q4": None, "ot": None}
    keys = ("q1", "q2", "q3", "q4")
    for index, entry in enumerate(linescores):
        value = extract(entry)
        if value is None:
            continue
        if index < len(keys):
            periods[keys[index]] = value
        else:
            periods["ot"] = (periods["ot"] or 0) + value
    return periods


def _headline(competition: dict[str, Any]) -> Optional[str]:
    for note in _list(competition.get("notes")):
        headline = _str_or_none(_dict(note).get("headline"))
        if headline:
            return headline
    return None


def _competitors(
    competition: dict[str, Any],
    score_of: Callable[[dict[str, Any]], int | None],
    linescore_of: Optional[Callable[[dict[str, Any]], int | None]],
) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for competitor in _list(competition.get("competitors")):
        competitor = _dict(competitor)
        side = "home" if competitor.get("homeAway") == "home" else "away"
        fields[f"{side}_team"] = parse_team(competitor.get("team"))
        fields[f"{side}_score"] = score_of(competitor)
        if linescore_of is not None:
            periods = split_linescores(_list(competitor.get("linescores")), linescore_of)
            for key, value in periods.items():
                fields[f"{side}_{key}"] = value
    if "home_team" not in fields or "away_team" not in fields:
        raise EventParseError("event is missing a home or away competitor")
    return fields


def _status_fields(status: dict[str, Any]) -> dict[str, Any]:
    status = _dict(status)
    status_type = _dict(status.get("type"))
    return {
        "status": map_status(status),
        "period": _safe_int(status.get("period")) or 0,
        "clock": _str_or_none(status.get("displayClock")),
        "status_detail": _str_or_none(status_type.get("description")),
    }


def _first_competition(container: dict[str, Any]) -> dict[str, Any]:
    competitions = _list(container.get("competitions"))
    if not competitions:
        raise EventParseError("no competitions found")
    return _dict(competitions[0])


def _week(event: dict[str, Any]) -> Optional[int]:
    week = event.get("week")
    if isinstance(week, dict):
        return _safe_int(week.get("number"))
    return None


def parse_scoreboard_event(event: dict[str, Any]) -> EventIngestDTO:
    """Scoreboard events: status on the event, numeric line score values."""

    event = _dict(event)
    event_id = _str_or_none(event.get("id"))
    if event_id is None:
        raise EventParseError("event without id")
    competition = _first_competition(event)
    season = _dict(event.get("season"))
    venue = _dict(competition.get("venue"))

    return EventIngestDTO(
        id=event_id,
        start_time_utc=parse_espn_date(event.get("date")),
        name=_headline(competition),
        season=_safe_int(season.get("year")) or 0,
        season_type=_safe_int(season.get("type")) or 0,
        week=_week(event),
        venue=_str_or_none(venue.get("fullName")),
        **_status_fields(event.get("status")),
        **_competitors(
            competition,
            score_of=lambda c: _safe_int(c.get("score")),
            linescore_of=_scoreboard_linescore,
        ),
    )


def parse_schedule_event(event: dict[str, Any]) -> EventIngestDTO:
    """Team schedule events: score objects and no line scores at all."""

    event = _dict(event)
    event_id = _str_or_none(event.get("id"))
    if event_id is None:
        raise EventParseError("event without id")
    competition = _first_competition(event)
    venue = _dict(competition.get("venue"))

    def score_of(competitor: dict[str, Any]) -> int | None:
        score = competitor.get("score")
        if isinstance(score, dict):
            return _safe_int(score.get("value"))
        return _safe_int(score)

    return EventIngestDTO(
        id=event_id,
        start_time_utc=parse_espn_date(event.get("date")),
        name=_headline(competition),
        season=_safe_int(_dict(event.get("season")).get("year")) or 0,
        season_type=_safe_int(_dict(event.get("seasonType")).get("type")) or 0,
        week=_week(event),
        venue=_str_or_none(venue.get("fullName")),
        **_status_fields(competition.get("status")),
        **_competitors(competition, score_of=score_of, linescore_of=None),
    )


def parse_summary(payload: dict[str, Any]) -> EventIngestDTO:
    """Event summary: everything lives under ``header``; line scores are display strings."""

    header = _dict(_dict(payload).get("header"))
    event_id = _str_or_none(header.get("id"))
    if event_id is None:
        raise EventParseError("summary without event id")
    competition = _first_competition(header)
    season = _dict(header.get("season"))
    venue = _dict(competition.get("venue"))

    return EventIngestDTO(
        id=event_id,
        start_time_utc=parse_espn_date(competition.get("date")),
        name=_headline(competition),
        season=_safe_int(season.get("year")) or 0,
        season_type=_safe_int(season.get("type")) or 0,
        venue=_str_or_none(venue.get("fullName")),
        **_status_fields(competition.get("status")),
        **_competitors(
            competition,
            score_of=lambda c: _safe_int(c.get("score")),
            linescore_of=_summary_linescore,
        ),
    )


def _parse_events(
    events: list[Any],
    parse: Callable[[dict[str, Any]], EventIngestDTO],
) -> list[EventIngestDTO]:
    parsed: list[EventIngestDTO] = []
    for event in events:
        try:
            parsed.append(parse(event))
        except (EventParseError, ValueError) as exc:
            logger.warning("Failed to parse event eventID=%s error=%s", _dict(event).get("id"), exc)
    return parsed


def parse_scoreboard(payload: dict[str, Any]) -> list[EventIngestDTO]:
    return _parse_events(_list(_dict(payload).get("events")), parse_scoreboard_event)


def parse_team_schedule(payload: dict[str, Any]) -> list[EventIngestDTO]:
    return _parse_events(_list(_dict(payload).get("events")), parse_schedule_event)


def parse_season_info(payload: dict[str, Any], now: datetime | None = None) -> SeasonInfo:
    """Read the current season window from a scoreboard envelope."""

    leagues = _list(_dict(payload).get("leagues"))
    if not leagues:
        raise EventParseError("no league info in response")
    season = _dict(_dict(leagues[0]).get("season"))
    start_date = parse_espn_date(season.get("startDate"))
    end_date = parse_espn_date(season.get("endDate"))
    now = now or datetime.now(timezone.utc)
    return SeasonInfo(
        year=_safe_int(season.get("year")) or 0,
        start_date=start_date,
        end_date=end_date,
        type_name=str(_dict(season.get("type")).get("name") or ""),
        in_season=start_date < now < end_date,
    )
