from __future__ import annotations

import unittest

from squarepool.ingestion.leagues import LEAGUES, valid_leagues
from squarepool.schemas import LeagueOut, NumberSetConfigOut, NumberSetTypeOut
from squarepool.squares.grid_types import InvalidGridTypeError, get_grid_type, grid_types, is_valid_grid_type
from squarepool.squares.number_sets import (
    NUMBER_SET_TYPES,
    InvalidNumberSetConfigError,
    InvalidNumbersError,
    get_set_types,
    is_valid_number_set_config,
    is_valid_number_set_config_for_league,
    is_valid_number_set_type,
    long_label,
    numbers_are_valid,
    valid_number_set_configs,
    valid_number_set_configs_for_league,
    validate_number_set_config,
    validate_numbers,
)


class NumberSetConfigTests(unittest.TestCase):
    def test_set_types_per_config(self) -> None:
        self.assertEqual(("all",), get_set_types("standard"))
        self.assertEqual(("q1", "q2", "q3", "final"), get_set_types("123f"))
        self.assertEqual(("half", "final"), get_set_types("hf"))
        self.assertEqual((), get_set_types("1234"))
        self.assertEqual((), get_set_types("nope"))

    def test_enabled_configs(self) -> None:
        self.assertEqual(["standard", "123f", "hf"], [c.key for c in valid_number_set_configs()])
        self.assertFalse(is_valid_number_set_config("h4"))

    def test_league_allowlist(self) -> None:
        self.assertEqual(["standard", "123f", "hf"], [c.key for c in valid_number_set_configs_for_league("nfl")])
        self.assertEqual(["standard", "hf"], [c.key for c in valid_number_set_configs_for_league("ncaab")])
        self.assertFalse(is_valid_number_set_config_for_league("123f", "ncaab"))
        self.assertTrue(is_valid_number_set_config_for_league("123f", ""))
        self.assertFalse(is_valid_number_set_config_for_league("standard", "xfl"))

    def test_validate_config(self) -> None:
        self.assertEqual("Half, Final", validate_number_set_config("hf", "ncaab").label)
        with self.assertRaises(InvalidNumberSetConfigError):
            validate_number_set_config("123f", "ncaab")
        with self.assertRaises(InvalidNumberSetConfigError):
            validate_number_set_config("1234")

    def test_labels(self) -> None:
        self.assertEqual("Halftime", long_label("half"))
        self.assertEqual("Final", long_label("all"))
        self.assertEqual("overtime", long_label("overtime"))
        self.assertTrue(is_valid_number_set_type("q4"))
        self.assertFalse(is_valid_number_set_type("ot"))

    def test_serialised_outputs(self) -> None:
        config = NumberSetConfigOut.model_validate(validate_number_set_config("123f"))
        self.assertEqual(["q1", "q2", "q3", "final"], config.set_types)
        set_type = NumberSetTypeOut.model_validate(NUMBER_SET_TYPES["q2"])
        self.assertEqual("2nd Quarter", set_type.long_label)
        leagues = [LeagueOut.model_validate(LEAGUES[key]) for key, _ in valid_leagues()]
        self.assertEqual(["ncaab"], [league.key for league in leagues if league.uses_halves])


class NumbersTests(unittest.TestCase):
    def test_permutations(self) -> None:
        self.assertTrue(numbers_are_valid([3, 7, 0, 9, 1, 5, 8, 2, 6, 4]))
        self.assertFalse(numbers_are_valid(None))
        self.assertFalse(numbers_are_valid([0, 1, 2]))
        self.assertFalse(numbers_are_valid([0, 0, 2, 3, 4, 5, 6, 7, 8, 9]))
        self.assertFalse(numbers_are_valid([0, 1, 2, 3, 4, 5, 6, 7, 8, 10]))
        self.assertFalse(numbers_are_valid([True, 0, 2, 3, 4, 5, 6, 7, 8, 9]))

    def test_validate_numbers_names_the_side(self) -> None:
        with self.assertRaises(InvalidNumbersError) as ctx:
            validate_numbers(list(range(10)), [1] * 10)
        self.assertIn("away", str(ctx.exception))


class GridTypeTests(unittest.TestCase):
    def test_known_types(self) -> None:
        self.assertEqual(["std100", "std50", "std25", "roll100"], grid_types())
        self.assertEqual(25, get_grid_type("std25").squares)
        self.assertTrue(is_valid_grid_type("roll100"))
        self.assertFalse(is_valid_grid_type(None))
        with self.assertRaises(InvalidGridTypeError):
            get_grid_type("std9")


if __name__ == "__main__":
    unittest.main()
