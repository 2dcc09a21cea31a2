from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from ..models.person_record import ReportLine
from .names import to_key

"""Flat report: search, sort, console table and CSV export."""

__all__ = [
    "REPORT_COLUMNS",
    "SORT_MODES",
    "filter_lines",
    "render_table",
    "sort_lines",
    "to_frame",
    "write_csv",
]

REPORT_COLUMNS = ["Name", "Total", "PB days", "Meal days", "Rows counted"]
SORT_MODES = ("nameAsc", "nameDesc", "mealsAsc", "mealsDesc")


def filter_lines(lines: Iterable[ReportLine], query: str | None) -> list[ReportLine]:
    """Keep lines whose folded name contains the folded query."""
    q = to_key(query or "")
    if not q:
        return list(lines)
    return [line for line in lines if q in to_key(line.name)]


def _meals_sort_value(line: ReportLine) -> float:
    # PB-only people sort below everyone with a number
    numeric = line.numeric_total
    return -1.0 if numeric is None else float(numeric)


def sort_lines(lines: Iterable[ReportLine], mode: str | None) -> list[ReportLine]:
    """Sort by name or by meal total; unknown/None mode keeps input order.

    Sorting is stable, so equal entries keep their first-seen order.
    """
    result = list(lines)
    if mode == "nameAsc":
        result.sort(key=lambda line: to_key(line.name))
    elif mode == "nameDesc":
        result.sort(key=lambda line: to_key(line.name), reverse=True)
    elif mode == "mealsAsc":
        result.sort(key=_meals_sort_value)
    elif mode == "mealsDesc":
        result.sort(key=_meals_sort_value, reverse=True)
    return result


def to_frame(lines: Iterable[ReportLine]) -> pd.DataFrame:
    """Report lines as a DataFrame with the export column headers."""
    records = [
        [line.name, line.total, line.pb_days, line.meal_days, line.rows_seen]
        for line in lines
    ]
    # object dtype keeps "PB" next to numbers in the Total column
    return pd.DataFrame(records, columns=REPORT_COLUMNS, dtype=object)


def write_csv(lines: Iterable[ReportLine], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    to_frame(lines).to_csv(path, index=False, encoding="utf-8")
    return path


def render_table(lines: Iterable[ReportLine]) -> str:
    """Plain-text table for the console."""
    df = to_frame(lines)
    if df.empty:
        return "(no people found)"
    return df.to_string(index=False)
