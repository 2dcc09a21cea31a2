from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.worksheet.worksheet import Worksheet

from .reader import Cell, Grid, to_cell

"""Template workbook access built on openpyxl.

The template is edited in place in memory and only serialized by save(), so a
failed merge never leaves a half-written document behind. Coordinates in this
module's API are 0-based (row 0 = sheet row 1, column 0 = "A").
"""

__all__ = [
    "TemplateWorkbook",
]

logger = logging.getLogger(__name__)


class TemplateWorkbook:
    """In-memory report template with cell-level reads and writes."""

    def __init__(self, workbook: Workbook, path: Path | None = None) -> None:
        self.workbook = workbook
        self.path = path

    @classmethod
    def load(cls, path: Path) -> TemplateWorkbook:
        keep_vba = path.suffix.lower() == ".xlsm"
        return cls(load_workbook(path, keep_vba=keep_vba), path=path)

    @property
    def sheet_names(self) -> list[str]:
        return list(self.workbook.sheetnames)

    def _sheet(self, sheet: str) -> Worksheet:
        return self.workbook[sheet]

    def used_range(self, sheet: str) -> tuple[int, int]:
        """(max_row, max_column) of the sheet, 1-based as openpyxl reports them."""
        ws = self._sheet(sheet)
        return ws.max_row, ws.max_column

    def read_cell(self, sheet: str, row: int, col: int) -> Cell:
        ws = self._sheet(sheet)
        max_row, max_col = ws.max_row, ws.max_column
        if row + 1 > max_row or col + 1 > max_col:
            # reading through ws.cell() would create the cell
            return None
        return to_cell(ws.cell(row=row + 1, column=col + 1).value)

    def grid(self, sheet: str, max_rows: int | None = None) -> Grid:
        """Snapshot of the sheet's values as a 0-based grid."""
        ws = self._sheet(sheet)
        limit = ws.max_row if max_rows is None else min(ws.max_row, max_rows)
        return [
            [to_cell(v) for v in values]
            for values in ws.iter_rows(min_row=1, max_row=limit, values_only=True)
        ]

    def write_cell(self, sheet: str, row: int, col: int, value: Any) -> None:
        """Write a value; numbers stay numeric, everything else is text.

        openpyxl grows the sheet dimensions to include the new cell.
        """
        ws = self._sheet(sheet)
        max_row, max_col = ws.max_row, ws.max_column
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            value = "" if value is None else str(value)
        ws.cell(row=row + 1, column=col + 1, value=value)
        if row + 1 > max_row or col + 1 > max_col:
            logger.debug(f"used range of '{sheet}' widened to {ws.dimensions}")

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        self.workbook.save(path)
        return path
