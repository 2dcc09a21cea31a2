"""Domain models for the meal tally tool."""

from .config_models import ColumnConfig, TallyConfig, TemplateConfig
from .error_record import ErrorRecord
from .person_record import PB_SENTINEL, PersonRecord, ReportLine, RowClassification, RowKind
from .processing_result import FileStat, TallyResult
from .source_file import FileStatus, SheetTally, SourceFile

__all__ = [
    # Configuration models
    "ColumnConfig",
    "TallyConfig",
    "TemplateConfig",
    # Tally models
    "PB_SENTINEL",
    "PersonRecord",
    "ReportLine",
    "RowClassification",
    "RowKind",
    # Processing models
    "ErrorRecord",
    "FileStat",
    "FileStatus",
    "SheetTally",
    "SourceFile",
    "TallyResult",
]
