from __future__ import annotations

from datetime import date, datetime, time
from numbers import Integral, Real
from pathlib import Path
from typing import Any

import pandas as pd

"""Attendance workbook reader.

Sheets are read raw (header=None) because the header banner size varies from
sheet to sheet; locating the data rows is left to the start-row detection.
Cells come back as plain Python values: None, int, float, str, or a
date/datetime/time for cells Excel stores as dates. Dates are numbers to Excel,
so they are never turned into text that could pass for a name.
"""

__all__ = [
    "Cell",
    "Grid",
    "WorkbookReadError",
    "read_workbook_grids",
    "to_cell",
]

Cell = int | float | str | date | time | None
Grid = list[list[Cell]]


class WorkbookReadError(Exception):
    """Raised when a workbook cannot be opened or parsed."""


def to_cell(value: Any) -> Cell:
    """Convert a pandas/numpy cell to a plain Python cell value."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).upper()
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, (datetime, date, time)):
        return value
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, Real):
        number = float(value)
        return int(number) if number.is_integer() else number
    return str(value)


def dataframe_to_grid(df: pd.DataFrame) -> Grid:
    """Rows of a header-less DataFrame as lists of cells (row 0 = sheet row 1)."""
    return [[to_cell(v) for v in raw] for raw in df.itertuples(index=False, name=None)]


def read_workbook_grids(path: Path) -> dict[str, Grid]:
    """Read a workbook returning one cell grid per sheet, in workbook order.

    Parameters
    ----------
    path: workbook path (.xlsx/.xlsm)
    """
    try:
        xls = pd.ExcelFile(path)
    except Exception as e:
        raise WorkbookReadError(f"cannot open workbook {path}: {e}") from e

    grids: dict[str, Grid] = {}
    with xls:
        for name in xls.sheet_names:
            try:
                # raw read; values like "NA" must stay text, not NaN
                df = xls.parse(name, header=None, keep_default_na=False, na_values=[""])
            except Exception as e:
                raise WorkbookReadError(f"cannot parse sheet '{name}' of {path}: {e}") from e
            grids[str(name)] = dataframe_to_grid(df)
    return grids
