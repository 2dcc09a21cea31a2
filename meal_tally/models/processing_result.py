from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .person_record import ReportLine

"""Processing result models for a tally run.

TallyResult aggregates per-file statistics and carries the finalized report
lines; it is what the CLI renders, exports and feeds to template merging.
"""

__all__ = [
    "FileStat",
    "TallyResult",
]


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics."""
    file_name: str
    status: str  # success/failed
    sheets: int  # sheets that had at least one row
    rows_counted: int
    elapsed_seconds: float


@dataclass(frozen=True)
class TallyResult:
    """Aggregated results and summary metrics for one run."""
    success_files: int
    failed_files: int
    total_sheets: int
    total_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    lines: list[ReportLine] = field(default_factory=list)
    file_stats: list[FileStat] = field(default_factory=list)

    @property
    def people(self) -> int:
        return len(self.lines)

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
