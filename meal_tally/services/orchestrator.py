from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..excel.reader import Grid, WorkbookReadError, read_workbook_grids
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import TallyConfig
from ..models.processing_result import FileStat, TallyResult
from ..models.source_file import FileStatus, SheetTally, SourceFile
from .aggregator import Aggregator
from .names import NameNormalizer
from .progress import ProgressTracker, SheetProgressIndicator
from .start_row import resolve_start_row

"""Run orchestration.

process_all() reads the given workbooks strictly in caller order, every sheet
in workbook order, and feeds the rows through a fresh Aggregator. A workbook
that cannot be read is recorded in the error log and the run continues; bad
cells never fail a run.
"""

__all__ = [
    "ProcessingError",
    "SUPPORTED_SUFFIXES",
    "collect_input_files",
    "process_all",
    "tally_sheet",
]

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".xlsx", ".xlsm")


class ProcessingError(Exception):
    """Base exception for fatal processing errors."""


def collect_input_files(paths: Sequence[Path]) -> list[Path]:
    """Expand directories (non-recursive, sorted by name) and keep the given file order.

    Raises:
        ProcessingError: a path does not exist
    """
    files: list[Path] = []
    for p in paths:
        if not p.exists():
            raise ProcessingError(f"input not found: {p}")
        if p.is_dir():
            try:
                found = sorted(
                    c for c in p.iterdir()
                    if c.is_file() and c.suffix.lower() in SUPPORTED_SUFFIXES and not c.name.startswith("~$")
                )
            except OSError as e:
                raise ProcessingError(f"error reading directory {p}: {e}") from e
            files.extend(found)
        else:
            files.append(p)
    return files


def tally_sheet(
    sheet_name: str,
    rows: Grid,
    aggregator: Aggregator,
    config: TallyConfig,
) -> SheetTally:
    """Aggregate one sheet starting at its forced or detected first data row."""
    start_row, detected = resolve_start_row(rows, config.columns, aggregator.normalizer)
    counted = aggregator.ingest_sheet(rows, config.columns, start_row)
    logger.debug(
        f"sheet '{sheet_name}' start_row={start_row + 1} "
        f"({'detected' if detected else 'forced'}) rows={counted}"
    )
    return SheetTally(
        sheet_name=sheet_name,
        start_row=start_row,
        start_row_detected=detected,
        rows_counted=counted,
    )


def _process_single_file(
    file_path: Path,
    aggregator: Aggregator,
    config: TallyConfig,
    error_log: ErrorLogBuffer,
) -> SourceFile:
    try:
        grids = read_workbook_grids(file_path)
    except WorkbookReadError as e:
        logger.error(f"read: {e}")
        error_log.append(
            ErrorRecord.create(
                file=file_path.name,
                sheet="<FILE_LEVEL>",
                row=-1,
                error_type="WORKBOOK_READ_ERROR",
                message=str(e),
            )
        )
        return SourceFile(path=file_path, name=file_path.name, status=FileStatus.FAILED)

    sheet_progress = SheetProgressIndicator(file_name=file_path.name, total_sheets=len(grids))
    sheets: list[SheetTally] = []
    for sheet_name, rows in grids.items():
        if not rows:
            # empty sheets are skipped silently
            continue
        sheet_progress.start_sheet(sheet_name)
        sheet = tally_sheet(sheet_name, rows, aggregator, config)
        sheet_progress.finish_sheet(sheet)
        sheets.append(sheet)

    return SourceFile(
        path=file_path,
        name=file_path.name,
        sheets=sheets,
        status=FileStatus.SUCCESS,
        rows_counted=sum(s.rows_counted for s in sheets),
    )


def process_all(
    paths: Sequence[Path],
    config: TallyConfig | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> TallyResult:
    """Tally every workbook in order and finalize the report lines.

    Args:
        paths: workbook files and/or directories, in processing order
        config: run configuration (defaults when None)
        error_log: buffer for per-file errors (flushed before returning)

    Returns:
        TallyResult with report lines and per-file statistics

    Raises:
        ProcessingError: an input path does not exist
    """
    config = config or TallyConfig()
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    start_time = datetime.now(UTC)

    file_paths = collect_input_files(paths)
    aggregator = Aggregator(NameNormalizer(config.stop_words))

    file_stats: list[FileStat] = []
    success_count = 0
    failed_count = 0
    total_sheets = 0
    total_rows = 0

    with ProgressTracker(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            logger.info(f"Parsing: {file_path.name}")

            file_start = datetime.now(UTC)
            source = _process_single_file(file_path, aggregator, config, error_log)
            file_elapsed = (datetime.now(UTC) - file_start).total_seconds()

            if source.status == FileStatus.SUCCESS:
                success_count += 1
                total_sheets += len(source.sheets)
                total_rows += source.rows_counted
            else:
                failed_count += 1

            progress.set_postfix(people=len(aggregator), rows=total_rows, failed=failed_count)
            progress.finish_file(success=(source.status == FileStatus.SUCCESS))
            file_stats.append(
                FileStat(
                    file_name=source.name,
                    status=source.status.value,
                    sheets=len(source.sheets),
                    rows_counted=source.rows_counted,
                    elapsed_seconds=file_elapsed,
                )
            )

    lines = aggregator.finalize()

    log_path = error_log.flush()
    if log_path is not None:
        logger.warning(f"errors written to {log_path}")

    end_time = datetime.now(UTC)
    return TallyResult(
        success_files=success_count,
        failed_files=failed_count,
        total_sheets=total_sheets,
        total_rows=total_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        lines=lines,
        file_stats=file_stats,
    )
