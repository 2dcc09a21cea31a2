from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

"""SourceFile domain model and FileStatus enum.

A SourceFile is the outcome of reading one attendance workbook: whether it
could be read and the per-sheet tallies it contributed to the run.
"""

__all__ = [
    "FileStatus",
    "SheetTally",
    "SourceFile",
]


class FileStatus(Enum):
    """Outcome of reading one workbook.

    FAILED only means the workbook could not be read; noisy cells never fail a file.
    """
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class SheetTally:
    """What one sheet contributed to the aggregate."""
    sheet_name: str
    start_row: int  # 0-based first data row actually used
    start_row_detected: bool  # False when forced by configuration
    rows_counted: int = 0  # rows attributed to a person


@dataclass(frozen=True)
class SourceFile:
    path: Path
    name: str
    status: FileStatus
    sheets: list[SheetTally] = field(default_factory=list)
    rows_counted: int = 0
