from __future__ import annotations

import threading
import unittest
from datetime import date

import requests

from squarepool.ingestion.errors import (
    ESPNDecodeError,
    ESPNRateLimitedError,
    ESPNRequestError,
    ESPNStatusError,
    EventNotFoundError,
    InvalidLeagueError,
    SyncCancelled,
)
from squarepool.ingestion.espn_client import ESPNClient
from squarepool.ingestion.schema import ScoreboardOptions

BASE_URL = "https://espn.test/apis/site/v2/sports"


class _FakeResponse:
    def __init__(self, status_code: int, payload=None, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else str(payload)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _FakeSession:
    def __init__(self, responses=None, handler=None):
        self.headers: dict[str, str] = {}
        self.calls: list[tuple[str, dict | None]] = []
        self._responses = list(responses or [])
        self._handler = handler
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params))
        if self._handler is not None:
            return self._handler(url, params)
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


def _event(event_id: str) -> dict:
    return {
        "id": event_id,
        "date": "2026-10-18T17:00Z",
        "status": {"type": {"name": "STATUS_SCHEDULED"}},
        "competitions": [
            {
                "competitors": [
                    {"homeAway": "home", "team": {"id": "1", "name": "A"}, "score": "0"},
                    {"homeAway": "away", "team": {"id": "2", "name": "B"}, "score": "0"},
                ]
            }
        ],
    }


def _client(session: _FakeSession, **kwargs) -> tuple[ESPNClient, list[float]]:
    sleeps: list[float] = []
    client = ESPNClient(
        base_url=BASE_URL,
        rate_limit=1000.0,
        session=session,
        sleep_fn=sleeps.append,
        **kwargs,
    )
    return client, sleeps


class ESPNClientRequestTests(unittest.TestCase):
    def test_teams_request_uses_league_path_and_limit(self) -> None:
        payload = {"sports": [{"leagues": [{"teams": [{"team": {"id": "1", "name": "Hawks"}}]}]}]}
        session = _FakeSession([_FakeResponse(200, payload)])
        client, _ = _client(session)

        teams = client.get_teams("nba")

        self.assertEqual(["1"], [t.id for t in teams])
        url, params = session.calls[0]
        self.assertEqual(f"{BASE_URL}/basketball/nba/teams", url)
        self.assertEqual({"limit": "1000"}, params)
        self.assertEqual("application/json", session.headers["Accept"])

    def test_week_is_only_sent_for_football(self) -> None:
        session = _FakeSession([_FakeResponse(200, {"events": []}), _FakeResponse(200, {"events": []})])
        client, _ = _client(session)
        options = ScoreboardOptions(week=3, season=2026, season_type=2)

        client.get_scoreboard("nfl", options)
        client.get_scoreboard("nba", options)

        self.assertEqual({"week": "3", "seasonYear": "2026", "seasontype": "2"}, session.calls[0][1])
        self.assertEqual({"seasonYear": "2026", "seasontype": "2"}, session.calls[1][1])

    def test_invalid_league_fails_before_any_request(self) -> None:
        session = _FakeSession()
        client, _ = _client(session)

        with self.assertRaises(InvalidLeagueError):
            client.get_scoreboard("xfl")
        with self.assertRaises(InvalidLeagueError):
            client.get_scoreboard_for_date_range("xfl", date(2026, 10, 1), date(2026, 10, 3))

        self.assertEqual([], session.calls)

    def test_date_range_is_inclusive_and_deduplicated(self) -> None:
        pages = {
            "20261017": {"events": [_event("a")]},
            "20261018": {"events": [_event("a"), _event("b")]},
            "20261019": {"events": [_event("c")]},
        }
        session = _FakeSession(handler=lambda url, params: _FakeResponse(200, pages[params["dates"]]))
        client, _ = _client(session)

        events = client.get_scoreboard_for_date_range("nba", date(2026, 10, 17), date(2026, 10, 19))

        self.assertEqual(["a", "b", "c"], [e.id for e in events])
        self.assertEqual(3, len(session.calls))


class ESPNClientErrorTests(unittest.TestCase):
    def test_429_is_retried_with_exponential_backoff(self) -> None:
        session = _FakeSession(
            [
                _FakeResponse(429, {}),
                _FakeResponse(429, {}),
                _FakeResponse(429, {}),
                _FakeResponse(200, {"events": []}),
            ]
        )
        client, sleeps = _client(session, max_retries=3, backoff_seconds=1.0)

        self.assertEqual([], client.get_scoreboard("nba"))
        self.assertEqual([1.0, 2.0, 4.0], sleeps)
        self.assertEqual(4, len(session.calls))

    def test_rate_limited_after_retries_are_exhausted(self) -> None:
        session = _FakeSession([_FakeResponse(429, {}) for _ in range(3)])
        client, sleeps = _client(session, max_retries=2)

        with self.assertRaises(ESPNRateLimitedError) as ctx:
            client.get_scoreboard("nba")

        self.assertEqual(429, ctx.exception.status_code)
        self.assertEqual(3, len(session.calls))
        self.assertEqual([1.0, 2.0], sleeps)

    def test_server_error_is_not_retried(self) -> None:
        session = _FakeSession([_FakeResponse(500, None, text="x" * 1000)])
        client, sleeps = _client(session)

        with self.assertRaises(ESPNStatusError) as ctx:
            client.get_scoreboard("nba")

        self.assertEqual(500, ctx.exception.status_code)
        self.assertEqual(1, len(session.calls))
        self.assertEqual([], sleeps)

    def test_network_error_is_a_request_error(self) -> None:
        session = _FakeSession([requests.ConnectionError("connection refused")])
        client, _ = _client(session)

        with self.assertRaises(ESPNRequestError):
            client.get_teams("nfl")

    def test_summary_404_is_event_not_found(self) -> None:
        session = _FakeSession([_FakeResponse(404, None, text="not found")])
        client, _ = _client(session)

        with self.assertRaises(EventNotFoundError) as ctx:
            client.get_event_summary("nfl", "999")

        self.assertEqual(404, ctx.exception.status_code)
        self.assertEqual({"event": "999"}, session.calls[0][1])

    def test_bad_json_is_a_decode_error(self) -> None:
        session = _FakeSession(
            [
                _FakeResponse(200, ValueError("Expecting value"), text="<html>"),
                _FakeResponse(200, ["not", "an", "object"]),
            ]
        )
        client, _ = _client(session)

        with self.assertRaises(ESPNDecodeError):
            client.get_scoreboard("nba")
        with self.assertRaises(ESPNDecodeError):
            client.get_scoreboard("nba")

    def test_cancelled_client_makes_no_request(self) -> None:
        cancel = threading.Event()
        cancel.set()
        session = _FakeSession()
        client, _ = _client(session, cancel=cancel)

        with self.assertRaises(SyncCancelled):
            client.get_teams("nfl")

        self.assertEqual([], session.calls)

    def test_cancel_during_backoff_stops_retrying(self) -> None:
        cancel = threading.Event()
        session = _FakeSession([_FakeResponse(429, {}), _FakeResponse(200, {"events": []})])
        client = ESPNClient(
            base_url=BASE_URL,
            rate_limit=1000.0,
            session=session,
            cancel=cancel,
            sleep_fn=lambda seconds: cancel.set(),
        )

        with self.assertRaises(SyncCancelled):
            client.get_scoreboard("nba")

        self.assertEqual(1, len(session.calls))

    def test_close_closes_the_session(self) -> None:
        session = _FakeSession()
        with ESPNClient(base_url=BASE_URL, session=session):
            pass

        self.assertTrue(session.closed)


if __name__ == "__main__":
    unittest.main()
