from __future__ import annotations

import unittest
from datetime import datetime, timezone

from squarepool.ingestion.errors import EventParseError
from squarepool.ingestion.espn_parser import (
    ESPN_DATE_FORMATS,
    map_status,
    parse_espn_date,
    parse_scoreboard,
    parse_season_info,
    parse_summary,
    parse_team_schedule,
    parse_teams,
)


def _competitor(side: str, team_id: str, score, linescores=None) -> dict:
    competitor = {
        "homeAway": side,
        "score": score,
        "team": {
            "id": team_id,
            "name": f"Team{team_id}",
            "displayName": f"City Team{team_id}",
            "abbreviation": f"T{team_id}",
            "color": "112233",
            "alternateColor": "",
        },
    }
    if linescores is not None:
        competitor["linescores"] = linescores
    return competitor


def _scoreboard_event(event_id: str = "401", date: str = "2026-10-18T17:00Z") -> dict:
    return {
        "id": event_id,
        "date": date,
        "season": {"year": 2026, "type": 2},
        "week": {"number": 7},
        "status": {
            "period": 5,
            "displayClock": "0:00",
            "type": {"name": "STATUS_FINAL_OT", "description": "Final/OT", "completed": True},
        },
        "competitions": [
            {
                "venue": {"fullName": "Lakeside Field"},
                "notes": [{"headline": "Rivalry Week"}],
                "competitors": [
                    _competitor(
                        "home",
                        "10",
                        "30",
                        [{"value": 7.0}, {"value": 7.0}, {"value": 3.0}, {"value": 7.0}, {"value": 3.0}, {"value": 3.0}],
                    ),
                    _competitor(
                        "away",
                        "20",
                        "27",
                        [{"value": 0.0}, {"value": 14.0}, {"value": 7.0}, {"value": 3.0}, {"value": 3.0}, {"value": 0.0}],
                    ),
                ],
            }
        ],
    }


def _first_matching_format(text: str):
    for index, fmt in enumerate(ESPN_DATE_FORMATS):
        try:
            datetime.strptime(text, fmt)
        except ValueError:
            continue
        return index
    return None


class ParseDateTests(unittest.TestCase):
    def test_minute_precision_form_is_utc(self) -> None:
        self.assertEqual(
            datetime(2026, 10, 18, 17, 0, tzinfo=timezone.utc),
            parse_espn_date("2026-10-18T17:00Z"),
        )

    def test_offset_form_is_converted_to_utc(self) -> None:
        self.assertEqual(
            datetime(2026, 10, 18, 21, 30, tzinfo=timezone.utc),
            parse_espn_date("2026-10-18T17:30:00-04:00"),
        )

    def test_seconds_form_with_z(self) -> None:
        self.assertEqual(
            datetime(2026, 10, 18, 17, 0, 5, tzinfo=timezone.utc),
            parse_espn_date("2026-10-18T17:00:05Z"),
        )

    def test_fractional_seconds_form(self) -> None:
        self.assertEqual(
            datetime(2026, 10, 18, 17, 30, 0, 250000, tzinfo=timezone.utc),
            parse_espn_date("2026-10-18T17:30:00.250Z"),
        )

    def test_every_format_is_the_first_to_match_its_own_shape(self) -> None:
        samples = [
            "2026-10-18T17:00Z",
            "2026-10-18T17:00:05Z",
            "2026-10-18T17:30:00-04:00",
            "2026-10-18T17:30:00.250+00:00",
        ]
        self.assertEqual(len(samples), len(ESPN_DATE_FORMATS))

        for expected, sample in enumerate(samples):
            with self.subTest(sample=sample):
                self.assertEqual(expected, _first_matching_format(sample))

    def test_unparseable_date_raises(self) -> None:
        with self.assertRaises(EventParseError):
            parse_espn_date("next sunday")
        with self.assertRaises(EventParseError):
            parse_espn_date(None)


class MapStatusTests(unittest.TestCase):
    def test_status_names(self) -> None:
        self.assertEqual("scheduled", map_status({"type": {"name": "STATUS_SCHEDULED"}}))
        self.assertEqual("final", map_status({"type": {"name": "STATUS_FINAL"}}))
        self.assertEqual("final", map_status({"type": {"name": "STATUS_FINAL_OT"}}))
        self.assertEqual("in_progress", map_status({"type": {"name": "STATUS_HALFTIME"}}))

    def test_completed_flag_and_pre_state(self) -> None:
        self.assertEqual("final", map_status({"type": {"name": "STATUS_WHATEVER", "completed": True}}))
        self.assertEqual("scheduled", map_status({"type": {"name": "STATUS_DELAYED", "state": "pre"}}))
        self.assertEqual("in_progress", map_status({}))


class ParseTeamsTests(unittest.TestCase):
    def test_teams_are_flattened_and_empty_strings_become_none(self) -> None:
        payload = {
            "sports": [
                {
                    "leagues": [
                        {
                            "teams": [
                                {"team": {"id": "1", "name": "Hawks", "displayName": "Atlanta Hawks",
                                          "abbreviation": "ATL", "location": "Atlanta",
                                          "color": "c8102e", "alternateColor": ""}},
                                {"team": {"name": "No Id"}},
                                {"team": {"id": "2", "name": "Celtics", "displayName": "Boston Celtics",
                                          "abbreviation": "BOS"}},
                            ]
                        }
                    ]
                }
            ]
        }

        teams = parse_teams(payload)

        self.assertEqual(["1", "2"], [t.id for t in teams])
        self.assertEqual("Atlanta Hawks", teams[0].display_name)
        self.assertEqual("c8102e", teams[0].color)
        self.assertIsNone(teams[0].alternate_color)
        self.assertIsNone(teams[1].location)


class ParseScoreboardTests(unittest.TestCase):
    def test_scoreboard_event_fields(self) -> None:
        events = parse_scoreboard({"events": [_scoreboard_event()]})

        self.assertEqual(1, len(events))
        event = events[0]
        self.assertEqual("401", event.id)
        self.assertEqual("final", event.status)
        self.assertEqual("Final/OT", event.status_detail)
        self.assertEqual(5, event.period)
        self.assertEqual("0:00", event.clock)
        self.assertEqual("Rivalry Week", event.name)
        self.assertEqual("Lakeside Field", event.venue)
        self.assertEqual(7, event.week)
        self.assertEqual(2026, event.season)
        self.assertFalse(event.postseason)
        self.assertEqual("10", event.home_team.id)
        self.assertEqual(30, event.home_score)
        self.assertEqual(27, event.away_score)

    def test_linescores_after_the_fourth_are_summed_into_overtime(self) -> None:
        event = parse_scoreboard({"events": [_scoreboard_event()]})[0]

        self.assertEqual((7, 7, 3, 7), (event.home_q1, event.home_q2, event.home_q3, event.home_q4))
        self.assertEqual(6, event.home_ot)
        self.assertEqual((0, 14, 7, 3), (event.away_q1, event.away_q2, event.away_q3, event.away_q4))
        self.assertEqual(3, event.away_ot)

    def test_missing_linescores_stay_none(self) -> None:
        raw = _scoreboard_event()
        for competitor in raw["competitions"][0]["competitors"]:
            competitor.pop("linescores")

        event = parse_scoreboard({"events": [raw]})[0]

        self.assertIsNone(event.home_q1)
        self.assertIsNone(event.away_ot)

    def test_bad_events_are_skipped(self) -> None:
        no_competitions = {"id": "402", "date": "2026-10-18T17:00Z", "competitions": []}
        bad_date = _scoreboard_event("403", date="not-a-date")

        events = parse_scoreboard({"events": [bad_date, _scoreboard_event("404"), no_competitions]})

        self.assertEqual(["404"], [e.id for e in events])


class ParseScheduleTests(unittest.TestCase):
    def test_schedule_event_uses_score_objects_and_competition_status(self) -> None:
        payload = {
            "events": [
                {
                    "id": "500",
                    "date": "2026-11-20T00:00Z",
                    "seasonType": {"type": 3},
                    "competitions": [
                        {
                            "status": {
                                "period": 2,
                                "displayClock": "0:00",
                                "type": {"name": "STATUS_FINAL", "description": "Final", "completed": True},
                            },
                            "competitors": [
                                _competitor("home", "1", {"value": 71.0, "displayValue": "71"},
                                            [{"value": 35.0}, {"value": 36.0}]),
                                _competitor("away", "2", {"value": 64.0, "displayValue": "64"}),
                            ],
                        }
                    ],
                }
            ]
        }

        event = parse_team_schedule(payload)[0]

        self.assertEqual("final", event.status)
        self.assertEqual(71, event.home_score)
        self.assertEqual(64, event.away_score)
        self.assertTrue(event.postseason)
        self.assertIsNone(event.home_q1)
        self.assertIsNone(event.home_q2)


class ParseSummaryTests(unittest.TestCase):
    def test_summary_reads_header_and_display_value_linescores(self) -> None:
        payload = {
            "header": {
                "id": "600",
                "season": {"year": 2026, "type": 2},
                "competitions": [
                    {
                        "date": "2026-10-18T20:25Z",
                        "status": {
                            "period": 2,
                            "displayClock": "0:00",
                            "type": {"name": "STATUS_HALFTIME", "description": "Halftime"},
                        },
                        "competitors": [
                            _competitor("home", "1", "14", [{"displayValue": "7"}, {"displayValue": "7"}]),
                            _competitor("away", "2", "10", [{"displayValue": "3"}, {"displayValue": "7"}]),
                        ],
                    }
                ],
            }
        }

        event = parse_summary(payload)

        self.assertEqual("600", event.id)
        self.assertEqual("in_progress", event.status)
        self.assertEqual("Halftime", event.status_detail)
        self.assertEqual(datetime(2026, 10, 18, 20, 25, tzinfo=timezone.utc), event.start_time_utc)
        self.assertEqual((7, 7), (event.home_q1, event.home_q2))
        self.assertEqual((3, 7), (event.away_q1, event.away_q2))
        self.assertIsNone(event.home_q3)

    def test_summary_without_id_raises(self) -> None:
        with self.assertRaises(EventParseError):
            parse_summary({"header": {}})


class ParseSeasonInfoTests(unittest.TestCase):
    def _payload(self) -> dict:
        return {
            "leagues": [
                {
                    "season": {
                        "year": 2026,
                        "startDate": "2026-08-01T07:00Z",
                        "endDate": "2027-02-15T07:59Z",
                        "type": {"name": "Regular Season"},
                    }
                }
            ]
        }

    def test_in_season(self) -> None:
        info = parse_season_info(self._payload(), now=datetime(2026, 10, 19, tzinfo=timezone.utc))

        self.assertEqual(2026, info.year)
        self.assertEqual("Regular Season", info.type_name)
        self.assertTrue(info.in_season)

    def test_before_season(self) -> None:
        info = parse_season_info(self._payload(), now=datetime(2026, 7, 1, tzinfo=timezone.utc))

        self.assertFalse(info.in_season)

    def test_missing_leagues_raises(self) -> None:
        with self.assertRaises(EventParseError):
            parse_season_info({"leagues": []})


if __name__ == "__main__":
    unittest.main()
