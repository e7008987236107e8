"""Which scoring periods of a game are locked in, and the cumulative score at each."""

from __future__ import annotations

from typing import Optional

from squarepool.ingestion.leagues import uses_halves
from squarepool.models import EVENT_STATUS_FINAL
from squarepool.squares.number_sets import ALL, FINAL, HALF, Q1, Q2, Q3, Q4

ScorePair = tuple[Optional[int], Optional[int]]


def _sum(*parts: Optional[int]) -> Optional[int]:
    if any(p is None for p in parts):
        return None
    return sum(parts)


def half_scores(event) -> ScorePair:
    return (
        _sum(event.home_q1, event.home_q2),
        _sum(event.away_q1, event.away_q2),
    )


def q3_scores(event) -> ScorePair:
    return (
        _sum(event.home_q1, event.home_q2, event.home_q3),
        _sum(event.away_q1, event.away_q2, event.away_q3),
    )


def is_period_complete(event, set_type: str) -> bool:
    """Whether ``set_type`` is over for ``event`` and can pay out.

    Uses the event status, the current period and the provider's status text
    ("End of 1st Quarter", "Halftime"). NCAA men's basketball plays halves, so
    its half is over once the first period ends.
    """

    is_final = event.status == EVENT_STATUS_FINAL
    period = event.period or 0
    detail = (event.status_detail or "").lower()
    at_end_of_period = "end of" in detail
    at_halftime = "halftime" in detail

    if set_type == Q1:
        return is_final or period >= 2 or (period == 1 and at_end_of_period)
    if set_type in (Q2, HALF):
        if uses_halves(event.league):
            return is_final or period >= 2 or at_halftime or (period == 1 and at_end_of_period)
        return is_final or period >= 3 or at_halftime or (period == 2 and at_end_of_period)
    if set_type == Q3:
        return is_final or period >= 4 or (period == 3 and at_end_of_period)
    if set_type in (Q4, FINAL, ALL):
        return is_final
    return False


def score_for_period(event, set_type: str) -> ScorePair:
    if set_type == Q1:
        return event.home_q1, event.away_q1
    if set_type == HALF:
        # Half-based leagues report each half as its own line score.
        if uses_halves(event.league):
            return event.home_q1, event.away_q1
        return half_scores(event)
    if set_type == Q2:
        return half_scores(event)
    if set_type == Q3:
        return q3_scores(event)
    if set_type in (Q4, FINAL, ALL):
        return event.home_score, event.away_score
    return None, None
