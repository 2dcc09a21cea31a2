from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterable
from datetime import date, time
from numbers import Number
from typing import Any

from ..models.config_models import DEFAULT_STOP_WORDS

"""Name normalization and identity folding.

Two small pure transforms:
- to_display: cleans a raw cell into a human-readable spelling
- to_key: folds a spelling into an identity key (case, diacritics and
  punctuation removed). Equal keys mean the same person.

choose_better_display picks which of two spellings of the same key to keep.
"""

__all__ = [
    "NameNormalizer",
    "choose_better_display",
    "has_diacritic",
    "to_display",
    "to_key",
]

_KEY_STRIP_RE = re.compile(r"[^a-z0-9\s]")


def _collapse(text: str) -> str:
    return " ".join(text.split())


def to_key(display: Any) -> str:
    """Fold a name (or any cell) into its identity key.

    >>> to_key("  José DA  Silva* ")
    'jose da silva'
    """
    if display is None:
        return ""
    text = unicodedata.normalize("NFD", str(display).lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return _collapse(_KEY_STRIP_RE.sub("", text))


def has_diacritic(text: str) -> bool:
    return any(unicodedata.combining(ch) for ch in unicodedata.normalize("NFD", text))


def choose_better_display(current: str, candidate: str) -> str:
    """Pick the better of two spellings that share an identity key.

    Accented beats unaccented, then longer beats shorter; ties keep current.
    """
    current_marked = has_diacritic(current)
    candidate_marked = has_diacritic(candidate)
    if candidate_marked != current_marked:
        return candidate if candidate_marked else current
    if len(candidate) > len(current):
        return candidate
    return current


class NameNormalizer:
    """Display/key normalization bound to a stop-list of header junk words.

    The stop-list holds folded keys (e.g. "nome", "familias"); a cell whose
    key matches one is treated as a header label, not a person.
    """

    def __init__(self, stop_words: Iterable[str] | None = None) -> None:
        words = DEFAULT_STOP_WORDS if stop_words is None else stop_words
        self.stop_words = frozenset(to_key(w) for w in words if to_key(w))

    def to_display(self, raw: Any) -> str:
        if raw is None or isinstance(raw, (Number, date, time)):
            # names are never numeric; Excel dates are numbers too
            return ""
        text = unicodedata.normalize("NFC", str(raw))
        text = "".join(ch for ch in text if ch.isalnum() or ch.isspace())
        text = _collapse(text)
        if not text or to_key(text) in self.stop_words:
            return ""
        return text

    def to_key(self, display: Any) -> str:
        return to_key(display)

    def identify(self, raw: Any) -> tuple[str, str] | None:
        """Return (display, key) for a name cell, or None when it is not a name."""
        display = self.to_display(raw)
        if not display:
            return None
        key = to_key(display)
        if not key:
            return None
        return display, key

    choose_better_display = staticmethod(choose_better_display)


_default = NameNormalizer()


def to_display(raw: Any) -> str:
    """to_display with the default stop-list."""
    return _default.to_display(raw)
