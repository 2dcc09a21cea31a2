from __future__ import annotations

from collections.abc import Sequence
from datetime import date, time
from decimal import Decimal, InvalidOperation
from numbers import Number
from typing import Any

from ..models.person_record import RowClassification, RowKind
from .names import to_key

"""Row classification: absent, packed lunch, or a meal count.

The primary (first configured) meal column carries the absence codes A/F.
The packed-lunch code PB is honoured in the primary column and in any other
meal column. Absence is only read from the primary column.
"""

__all__ = [
    "ABSENCE_CODES",
    "PACKED_LUNCH_CODE",
    "cell_at",
    "classify_row",
    "parse_meal_count",
]

ABSENCE_CODES = frozenset({"a", "f"})
PACKED_LUNCH_CODE = "pb"


def cell_at(row: Sequence[Any], index: int) -> Any:
    """Cell value at index, or None when the row is shorter."""
    if 0 <= index < len(row):
        return row[index]
    return None


def _fold(value: Any) -> str:
    return to_key(value) if value is not None else ""


def parse_meal_count(value: Any) -> Decimal:
    """Numeric meal count of a cell; anything unparseable counts as 0.

    Text is trimmed and a decimal comma becomes a point ("1,5" -> 1.5).
    Negative and non-finite numbers count as 0. Counts are Decimals so that
    sums of fractional values do not depend on the order they are added in.
    Date and time cells are not counts.
    """
    if value is None or isinstance(value, (bool, date, time)):
        return Decimal(0)
    if isinstance(value, Number):
        # str() of a float is its shortest repr: 0.1 -> Decimal("0.1")
        text = str(value)
    else:
        text = str(value).strip().replace(",", ".", 1)
        if not text:
            return Decimal(0)
    try:
        number = Decimal(text)
    except InvalidOperation:
        return Decimal(0)
    if not number.is_finite() or number < 0:
        return Decimal(0)
    return number


def classify_row(row: Sequence[Any], meal_indices: Sequence[int]) -> RowClassification:
    """Classify one attendance row.

    Args:
        row: cell values of the row (None for empty)
        meal_indices: 0-based meal columns; the first is the primary column

    Returns:
        PACKED_LUNCH, ABSENT or MEAL(n) with n >= 0
    """
    if not meal_indices:
        return RowClassification(RowKind.MEAL)

    primary = _fold(cell_at(row, meal_indices[0]))
    packed_lunch = primary == PACKED_LUNCH_CODE or any(
        _fold(cell_at(row, i)) == PACKED_LUNCH_CODE for i in meal_indices
    )
    if packed_lunch:
        return RowClassification(RowKind.PACKED_LUNCH)
    if primary in ABSENCE_CODES:
        return RowClassification(RowKind.ABSENT)

    total = sum((parse_meal_count(cell_at(row, i)) for i in meal_indices), Decimal(0))
    return RowClassification(RowKind.MEAL, total)
