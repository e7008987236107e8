"""Number-set configurations (which periods a grid pays out on) and digit permutations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from squarepool.ingestion.leagues import LEAGUES, uses_halves


class InvalidNumberSetConfigError(ValueError):
    pass


class InvalidNumbersError(ValueError):
    pass


# Set types
ALL = "all"
Q1 = "q1"
Q2 = "q2"
Q3 = "q3"
Q4 = "q4"
HALF = "half"
FINAL = "final"

# Configs
STANDARD = "standard"
C1234 = "1234"
C123F = "123f"
HF = "hf"
H4 = "h4"


@dataclass(frozen=True)
class NumberSetTypeInfo:
    key: str
    label: str
    long_label: str


@dataclass(frozen=True)
class NumberSetConfigInfo:
    key: str
    label: str
    set_types: tuple[str, ...]
    enabled: bool = True


NUMBER_SET_TYPES: dict[str, NumberSetTypeInfo] = {
    ALL: NumberSetTypeInfo(ALL, "All", "Final"),
    Q1: NumberSetTypeInfo(Q1, "1st", "1st Quarter"),
    Q2: NumberSetTypeInfo(Q2, "2nd", "2nd Quarter"),
    Q3: NumberSetTypeInfo(Q3, "3rd", "3rd Quarter"),
    Q4: NumberSetTypeInfo(Q4, "4th", "4th Quarter"),
    HALF: NumberSetTypeInfo(HALF, "Half", "Halftime"),
    FINAL: NumberSetTypeInfo(FINAL, "Final", "Final"),
}

NUMBER_SET_CONFIGS: dict[str, NumberSetConfigInfo] = {
    STANDARD: NumberSetConfigInfo(STANDARD, "Same", (ALL,)),
    C123F: NumberSetConfigInfo(C123F, "1st, 2nd, 3rd, Final", (Q1, Q2, Q3, FINAL)),
    HF: NumberSetConfigInfo(HF, "Half, Final", (HALF, FINAL)),
    # Defined for stored grids but not offered to new ones.
    C1234: NumberSetConfigInfo(C1234, "1st, 2nd, 3rd, 4th", (Q1, Q2, Q3, Q4), enabled=False),
    H4: NumberSetConfigInfo(H4, "Half, 4th", (HALF, Q4), enabled=False),
}

QUARTER_LEAGUE_CONFIGS = (STANDARD, C123F, HF)
HALF_LEAGUE_CONFIGS = (STANDARD, HF)

LEAGUE_NUMBER_SET_CONFIGS: dict[str, tuple[str, ...]] = {
    key: HALF_LEAGUE_CONFIGS if uses_halves(key) else QUARTER_LEAGUE_CONFIGS for key in LEAGUES
}


def get_set_types(config: str) -> tuple[str, ...]:
    info = NUMBER_SET_CONFIGS.get(config)
    if info is None or not info.enabled:
        return ()
    return info.set_types


def long_label(set_type: str) -> str:
    info = NUMBER_SET_TYPES.get(set_type)
    return info.long_label if info else set_type


def is_valid_number_set_type(set_type: str) -> bool:
    return set_type in NUMBER_SET_TYPES


def is_valid_number_set_config(config: str) -> bool:
    info = NUMBER_SET_CONFIGS.get(config)
    return bool(info and info.enabled)


def is_valid_number_set_config_for_league(config: str, league: str) -> bool:
    if not is_valid_number_set_config(config):
        return False
    # Grids not linked to a league may use any enabled config.
    allowed = LEAGUE_NUMBER_SET_CONFIGS.get(league) if league else None
    if allowed is None:
        return not league
    return config in allowed


def valid_number_set_configs() -> list[NumberSetConfigInfo]:
    return [info for info in NUMBER_SET_CONFIGS.values() if info.enabled]


def valid_number_set_configs_for_league(league: str) -> list[NumberSetConfigInfo]:
    return [
        info for info in valid_number_set_configs()
        if is_valid_number_set_config_for_league(info.key, league)
    ]


def validate_number_set_config(config: str, league: Optional[str] = None) -> NumberSetConfigInfo:
    if not is_valid_number_set_config(config):
        raise InvalidNumberSetConfigError(f"invalid number set config: {config!r}")
    if league and not is_valid_number_set_config_for_league(config, league):
        raise InvalidNumberSetConfigError(
            f"number set config {config!r} is not allowed for league {league!r}"
        )
    return NUMBER_SET_CONFIGS[config]


def numbers_are_valid(numbers: Optional[Sequence[int]]) -> bool:
    """True when ``numbers`` is a permutation of the digits 0-9."""

    if numbers is None or len(numbers) != 10:
        return False
    seen = set()
    for n in numbers:
        if isinstance(n, bool) or not isinstance(n, int) or n < 0 or n > 9 or n in seen:
            return False
        seen.add(n)
    return True


def validate_numbers(home_numbers: Optional[Sequence[int]], away_numbers: Optional[Sequence[int]]) -> None:
    for side, numbers in (("home", home_numbers), ("away", away_numbers)):
        if not numbers_are_valid(numbers):
            raise InvalidNumbersError(f"{side} numbers must be a permutation of 0-9, got {numbers!r}")
