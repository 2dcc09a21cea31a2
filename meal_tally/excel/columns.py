from __future__ import annotations

"""Spreadsheet column letter helpers."""

__all__ = [
    "column_to_index",
    "parse_column_list",
]


def column_to_index(letters: str | None) -> int:
    """Convert a column letter ("A", "E", "AA") to a 0-based index.

    Characters outside A-Z are ignored; empty or invalid input maps to 0.

    >>> column_to_index("A"), column_to_index("E"), column_to_index("AA")
    (0, 4, 26)
    """
    n = 0
    for ch in (letters or "").strip().upper():
        code = ord(ch)
        if code < 65 or code > 90:
            continue
        n = n * 26 + (code - 64)
    return max(0, n - 1)


def parse_column_list(value: str | list[str] | None) -> list[str]:
    """Split "I,J,K,L" (or a list of letters) into upper-cased letters, dropping blanks."""
    if value is None:
        return []
    parts = value.split(",") if isinstance(value, str) else [str(v) for v in value]
    return [p.strip().upper() for p in parts if p.strip()]
