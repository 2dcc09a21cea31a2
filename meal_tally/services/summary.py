from __future__ import annotations

from ..models.processing_result import TallyResult

"""SUMMARY line rendering.

The "SUMMARY" label itself comes from the log formatter (see
logging.init.log_summary); this module renders the key=value metrics.
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.2f}".rstrip("0").rstrip(".")


def render_summary(result: TallyResult) -> str:
    """Render the end-of-run metrics logged at SUMMARY level.

    Format:
    files={total}/{total} success={s} failed={f} sheets={k} rows={r}
    people={p} elapsed_sec={e}

    >>> from datetime import datetime, timezone
    >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
    >>> render_summary(TallyResult(
    ...     success_files=2, failed_files=0, total_sheets=3, total_rows=40,
    ...     start_time=t, end_time=t, elapsed_seconds=2.0))
    'files=2/2 success=2 failed=0 sheets=3 rows=40 people=0 elapsed_sec=2'
    """
    total = result.total_files
    return (
        f"files={total}/{total} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"sheets={result.total_sheets} "
        f"rows={result.total_rows} "
        f"people={result.people} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
