"""Domain models for the schema documentation tool.

Schema snapshot (Database/Table/Column), sheet layout cells, run results and error
records.
"""

from .error_record import ErrorRecord
from .layout import BorderStyle, Color, GridRange, IndexEntry, LayoutCell, TextFormat
from .processing_result import ExportResult, ImportResult, TableStat
from .schema import Column, Database, SchemaSnapshot, Table

__all__ = [
    # Schema snapshot
    "Column",
    "Database",
    "SchemaSnapshot",
    "Table",
    # Sheet layout
    "BorderStyle",
    "Color",
    "GridRange",
    "IndexEntry",
    "LayoutCell",
    "TextFormat",
    # Run results
    "ErrorRecord",
    "ExportResult",
    "ImportResult",
    "TableStat",
]
