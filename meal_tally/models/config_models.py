from __future__ import annotations

from dataclasses import dataclass, field

from ..excel.columns import column_to_index

"""Config dataclasses for the meal tally tool.

These are the typed domain models produced by the YAML loader in
meal_tally/config/loader.py. Column settings are kept as letters (as the user
types them) and exposed as 0-based indices through properties.
"""

DEFAULT_NAME_COLUMN = "E"
DEFAULT_MEAL_COLUMNS = ("I", "J", "K", "L")
DEFAULT_STOP_WORDS = frozenset({"familias", "families", "family", "nome", "name"})
DEFAULT_BANNER_THRESHOLD = 3


@dataclass(frozen=True)
class ColumnConfig:
    """Where names and meal counts live in the attendance sheets.

    The first meal column is the primary one: it carries the absence (A/F)
    and packed-lunch (PB) codes.
    """
    name_column: str = DEFAULT_NAME_COLUMN
    meal_columns: tuple[str, ...] = DEFAULT_MEAL_COLUMNS
    first_row: int = 0  # 1-based forced first data row; 0 = auto-detect
    banner_threshold: int = DEFAULT_BANNER_THRESHOLD

    @property
    def name_index(self) -> int:
        return column_to_index(self.name_column)

    @property
    def meal_indices(self) -> list[int]:
        return [column_to_index(c) for c in self.meal_columns]


@dataclass(frozen=True)
class TemplateConfig:
    """How to find and fill the beneficiary list of a report template."""
    sheet_marker: str = "benef"  # folded substring looked up in sheet names
    header_phrase: str = "nome"  # folded substring looked up in the name column
    name_column: str = "B"
    aux_column: str = "C"  # receives aux_value on appended rows
    target_column: str = "D"  # overwritten with the meal total
    aux_value: int = 1
    header_scan_rows: int = 60
    default_data_row: int = 2  # 1-based, used when no header row is found

    @property
    def name_index(self) -> int:
        return column_to_index(self.name_column)

    @property
    def aux_index(self) -> int:
        return column_to_index(self.aux_column)

    @property
    def target_index(self) -> int:
        return column_to_index(self.target_column)


@dataclass(frozen=True)
class TallyConfig:
    """Root configuration object for a tally run."""
    columns: ColumnConfig = field(default_factory=ColumnConfig)
    template: TemplateConfig = field(default_factory=TemplateConfig)
    stop_words: frozenset[str] = DEFAULT_STOP_WORDS
