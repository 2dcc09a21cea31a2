from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

"""Per-person tally models.

PersonRecord is the mutable running record owned by the Aggregator during a
run. ReportLine is the immutable finalized view handed to export and template
reconciliation.
"""

__all__ = [
    "PB_SENTINEL",
    "PersonRecord",
    "ReportLine",
    "RowClassification",
    "RowKind",
]

PB_SENTINEL = "PB"


class RowKind(Enum):
    """Classification of a single attendance row.

    Precedence when several apply: PACKED_LUNCH > ABSENT > MEAL.
    """
    ABSENT = "absent"
    PACKED_LUNCH = "packed_lunch"
    MEAL = "meal"


@dataclass(frozen=True)
class RowClassification:
    kind: RowKind
    meals: Decimal = Decimal(0)  # always 0 unless kind is MEAL


@dataclass
class PersonRecord:
    """Running totals for one identity key.

    Invariant: rows_seen == pb_days + absent rows + meal rows.
    total_meals never decreases.
    """
    key: str
    display_name: str
    total_meals: Decimal = Decimal(0)
    pb_days: int = 0
    meal_days: int = 0
    rows_seen: int = 0
    ever_numeric_meals: bool = False
    ever_packed_lunch: bool = False

    @property
    def only_packed_lunch(self) -> bool:
        return self.ever_packed_lunch and not self.ever_numeric_meals and self.total_meals == 0


@dataclass(frozen=True)
class ReportLine:
    """Finalized per-person line: total is a number or the "PB" sentinel."""
    key: str
    name: str
    total: int | float | str
    pb_days: int
    meal_days: int
    rows_seen: int

    @property
    def is_packed_lunch_only(self) -> bool:
        return self.total == PB_SENTINEL

    @property
    def numeric_total(self) -> int | float | None:
        """Numeric total, or None for PB-only people."""
        return None if self.is_packed_lunch_only else self.total  # type: ignore[return-value]
