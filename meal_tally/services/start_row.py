from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..models.config_models import DEFAULT_BANNER_THRESHOLD, ColumnConfig
from .classifier import cell_at
from .names import NameNormalizer

"""First-data-row detection for sheets with a header banner of unknown size.

This is a heuristic: on sheets that deviate from the usual layout it can pick a
wrong row without noticing. The forced first row setting (--first-row) is the
escape hatch.
"""

__all__ = [
    "detect_start_row",
    "resolve_start_row",
]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def detect_start_row(
    rows: Sequence[Sequence[Any]],
    name_index: int,
    meal_indices: Sequence[int],
    normalizer: NameNormalizer,
    banner_threshold: int = DEFAULT_BANNER_THRESHOLD,
) -> int | None:
    """Return the 0-based index of the first data row, or None if nothing qualifies.

    A row qualifies when its name cell normalizes to a non-empty name and
    either one of its meal cells is filled or it lies below the banner area
    (index > banner_threshold).
    """
    for r, row in enumerate(rows):
        if not normalizer.to_display(cell_at(row, name_index)):
            continue
        if any(not _is_blank(cell_at(row, c)) for c in meal_indices):
            return r
        if r > banner_threshold:
            return r
    return None


def resolve_start_row(
    rows: Sequence[Sequence[Any]],
    columns: ColumnConfig,
    normalizer: NameNormalizer,
) -> tuple[int, bool]:
    """Start row for a sheet honouring the forced first row.

    Returns:
        (0-based start row, detected) where detected is False when forced
    """
    if columns.first_row > 0:
        return columns.first_row - 1, False
    detected = detect_start_row(
        rows,
        columns.name_index,
        columns.meal_indices,
        normalizer,
        banner_threshold=columns.banner_threshold,
    )
    return (detected if detected is not None else 0), True
