from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..excel.reader import Grid
from ..excel.template_io import TemplateWorkbook
from ..models.config_models import TemplateConfig
from ..models.person_record import ReportLine
from .classifier import cell_at
from .names import NameNormalizer, to_key
from .orchestrator import ProcessingError

"""Template reconciliation: merge report lines into an existing report workbook.

Steps:
1. Locate the sheet: first sheet whose folded name contains the marker,
   otherwise the first sheet with a recognizable header row.
2. Locate the header in the name column; the next row starts the data.
   Without a header the configured default data row is used.
3. Overwrite pass down the contiguous name list: matched people get their
   total, unmatched listed people get 0.
4. Append pass: people not listed are added after the last touched row,
   ordered by identity key.

Sheet and header lookup are heuristics and can pick the wrong region on
templates that deviate from the convention.
"""

__all__ = [
    "ReconcileResult",
    "TemplateStructureError",
    "locate_header_row",
    "locate_template_sheet",
    "merge_into_template",
    "reconcile",
]

logger = logging.getLogger(__name__)


class TemplateStructureError(ProcessingError):
    """Raised when no sheet of the template can be recognized."""

    def __init__(self, message: str = "template structure not recognized") -> None:
        super().__init__(message)


@dataclass
class ReconcileResult:
    sheet_name: str
    data_start_row: int  # 0-based
    header_found: bool
    overwritten: list[str] = field(default_factory=list)  # keys matched in place
    zeroed: list[str] = field(default_factory=list)  # listed keys with no data
    appended: list[str] = field(default_factory=list)  # keys added as new rows
    last_row: int = -1  # 0-based last row written


def locate_header_row(
    grid: Sequence[Sequence[Any]],
    name_index: int,
    header_phrase: str,
    scan_rows: int = 60,
) -> int | None:
    """0-based data start row (row after the header), or None when no header is found."""
    phrase = to_key(header_phrase)
    if not phrase:
        return None
    for r, row in enumerate(grid[:scan_rows]):
        value = cell_at(row, name_index)
        if value is None:
            continue
        if phrase in to_key(value):
            return r + 1
    return None


def locate_template_sheet(workbook: TemplateWorkbook, config: TemplateConfig) -> tuple[str, int | None] | None:
    """Find the beneficiary sheet.

    Returns:
        (sheet name, data start row or None) or None when no sheet qualifies
    """
    marker = to_key(config.sheet_marker)
    names = workbook.sheet_names

    def header_of(sheet: str) -> int | None:
        grid = workbook.grid(sheet, max_rows=config.header_scan_rows)
        return locate_header_row(grid, config.name_index, config.header_phrase, config.header_scan_rows)

    if marker:
        for sheet in names:
            if marker in to_key(sheet):
                return sheet, header_of(sheet)
    for sheet in names:
        data_row = header_of(sheet)
        if data_row is not None:
            return sheet, data_row
    return None


def reconcile(
    lines: Iterable[ReportLine],
    workbook: TemplateWorkbook,
    config: TemplateConfig,
    normalizer: NameNormalizer | None = None,
) -> ReconcileResult:
    """Merge report lines into the template workbook in memory.

    Raises:
        TemplateStructureError: no sheet can be located
    """
    normalizer = normalizer or NameNormalizer()
    by_key: dict[str, ReportLine] = {line.key: line for line in lines}

    located = locate_template_sheet(workbook, config)
    if located is None:
        raise TemplateStructureError()
    sheet, header_row = located
    data_row = header_row if header_row is not None else max(0, config.default_data_row - 1)
    result = ReconcileResult(sheet_name=sheet, data_start_row=data_row, header_found=header_row is not None)
    logger.info(f"template sheet='{sheet}' data_row={data_row + 1} header_found={result.header_found}")

    grid: Grid = workbook.grid(sheet)
    seen: set[str] = set()
    r = data_row
    while r < len(grid):
        identity = normalizer.identify(cell_at(grid[r], config.name_index))
        if identity is None:
            break
        _, key = identity
        seen.add(key)
        line = by_key.get(key)
        if line is not None:
            workbook.write_cell(sheet, r, config.target_index, line.total)
            result.overwritten.append(key)
        else:
            workbook.write_cell(sheet, r, config.target_index, 0)
            result.zeroed.append(key)
        result.last_row = r
        r += 1

    next_row = result.last_row + 1 if result.last_row >= 0 else data_row
    for key in sorted(k for k in by_key if k not in seen):
        line = by_key[key]
        workbook.write_cell(sheet, next_row, config.name_index, line.name)
        workbook.write_cell(sheet, next_row, config.aux_index, config.aux_value)
        workbook.write_cell(sheet, next_row, config.target_index, line.total)
        result.appended.append(key)
        result.last_row = next_row
        next_row += 1

    logger.info(
        f"template merge overwritten={len(result.overwritten)} zeroed={len(result.zeroed)} "
        f"appended={len(result.appended)}"
    )
    return result


def merge_into_template(
    lines: Iterable[ReportLine],
    template_path: Path,
    output_path: Path,
    config: TemplateConfig,
    normalizer: NameNormalizer | None = None,
) -> ReconcileResult:
    """Load the template, merge fully in memory, then save to output_path.

    Nothing is written when reconciliation raises.
    """
    try:
        workbook = TemplateWorkbook.load(template_path)
    except Exception as e:
        raise ProcessingError(f"cannot open template {template_path}: {e}") from e
    result = reconcile(lines, workbook, config, normalizer)
    workbook.save(output_path)
    logger.info(f"merged template written: {output_path}")
    return result
