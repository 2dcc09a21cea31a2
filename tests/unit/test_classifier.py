from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from meal_tally.models.person_record import RowKind
from meal_tally.services.classifier import classify_row, parse_meal_count

MEALS = [0, 1, 2, 3]


@pytest.mark.parametrize(
    "value, expected",
    [
        (2, 2.0),
        (1.5, 1.5),
        (" 3 ", 3.0),
        ("1,5", 1.5),
        ("x", 0.0),
        ("", 0.0),
        (None, 0.0),
        (True, 0.0),
        (-4, 0.0),
        ("nan", 0.0),
        ("inf", 0.0),
        ("0,1", Decimal("0.1")),
        (0.1, Decimal("0.1")),
        (datetime(2024, 3, 1), 0),
        (date(2024, 3, 1), 0),
        (time(12, 0), 0),
    ],
)
def test_parse_meal_count(value, expected):
    assert parse_meal_count(value) == expected


def test_numeric_sum():
    result = classify_row([1, "2", None, "1,5"], MEALS)
    assert result.kind is RowKind.MEAL
    assert result.meals == 4.5


@pytest.mark.parametrize("code", ["A", "a", "F", " f "])
def test_absence_in_primary_overrides_numbers(code):
    result = classify_row([code, 2, 3, 1], MEALS)
    assert result.kind is RowKind.ABSENT
    assert result.meals == 0


def test_absence_code_outside_primary_is_not_absence():
    result = classify_row([1, "A", 2, None], MEALS)
    assert result.kind is RowKind.MEAL
    assert result.meals == 3


@pytest.mark.parametrize("row", [["PB", 2, None, None], ["pb", None, None, None], [1, 2, "Pb", None]])
def test_packed_lunch_anywhere(row):
    result = classify_row(row, MEALS)
    assert result.kind is RowKind.PACKED_LUNCH
    assert result.meals == 0


def test_packed_lunch_beats_absence():
    assert classify_row(["A", "PB", None, None], MEALS).kind is RowKind.PACKED_LUNCH


def test_nothing_parseable_is_meal_zero():
    result = classify_row(["?", "", None], MEALS)
    assert result.kind is RowKind.MEAL
    assert result.meals == 0


def test_short_row_and_no_meal_columns():
    assert classify_row([], MEALS).meals == 0
    assert classify_row([5], []).kind is RowKind.MEAL


def test_uses_configured_indices_in_order():
    row = [None] * 8 + ["A", 3, 4, 5]
    assert classify_row(row, [8, 9, 10, 11]).kind is RowKind.ABSENT
    # primary moved: absence code now ignored
    assert classify_row(row, [9, 8, 10, 11]).meals == 12


def test_fractional_counts_sum_exactly():
    result = classify_row(["0,1", "0,2", "0,3", None], MEALS)
    assert result.meals == Decimal("0.6")
    assert isinstance(parse_meal_count("0,1"), Decimal)
