from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from ..models.config_models import ColumnConfig
from ..models.person_record import PB_SENTINEL, PersonRecord, ReportLine, RowClassification, RowKind
from .classifier import cell_at, classify_row
from .names import NameNormalizer

"""Per-person aggregation of classified attendance rows.

One Aggregator per run. It owns the key -> PersonRecord mapping while rows are
ingested; finalize() turns the records into ReportLines and clears the state
so nothing leaks into a later run.
"""

__all__ = [
    "Aggregator",
    "finalize_record",
]

logger = logging.getLogger(__name__)


def _as_number(value: Decimal | float) -> int | float:
    if value == int(value):
        return int(value)
    return float(value)


def finalize_record(record: PersonRecord) -> ReportLine:
    """Build the report line for one record; PB-only people get the "PB" total."""
    total: int | float | str
    total = PB_SENTINEL if record.only_packed_lunch else _as_number(record.total_meals)
    return ReportLine(
        key=record.key,
        name=record.display_name,
        total=total,
        pb_days=record.pb_days,
        meal_days=record.meal_days,
        rows_seen=record.rows_seen,
    )


class Aggregator:
    """Running per-person tally keyed by identity key.

    Insertion order of the mapping is first-seen order, which is deterministic
    for a fixed sequence of inputs.
    """

    def __init__(self, normalizer: NameNormalizer | None = None) -> None:
        self.normalizer = normalizer or NameNormalizer()
        self._records: dict[str, PersonRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def ingest(self, row: Sequence[Any], columns: ColumnConfig) -> RowClassification | None:
        """Fold one row into the tally.

        Returns:
            The row's classification, or None when the row has no usable name
        """
        identity = self.normalizer.identify(cell_at(row, columns.name_index))
        if identity is None:
            return None
        display, key = identity

        record = self._records.get(key)
        if record is None:
            record = PersonRecord(key=key, display_name=display)
            self._records[key] = record
        else:
            record.display_name = self.normalizer.choose_better_display(record.display_name, display)

        result = classify_row(row, columns.meal_indices)
        record.rows_seen += 1
        if result.kind is RowKind.PACKED_LUNCH:
            record.pb_days += 1
            record.ever_packed_lunch = True
        elif result.kind is RowKind.MEAL:
            record.total_meals += result.meals
            if result.meals > 0:
                record.meal_days += 1
                record.ever_numeric_meals = True
        return result

    def ingest_sheet(self, rows: Sequence[Sequence[Any]], columns: ColumnConfig, start_row: int = 0) -> int:
        """Ingest rows[start_row:]; returns the number of rows attributed to a person."""
        counted = 0
        for row in rows[max(0, start_row):]:
            if self.ingest(row, columns) is not None:
                counted += 1
        return counted

    def finalize(self) -> list[ReportLine]:
        """Report lines in first-seen order. Resets the aggregator."""
        lines = [finalize_record(r) for r in self._records.values()]
        logger.debug(f"finalized {len(lines)} people")
        self._records = {}
        return lines
