from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Run result models for the export and import commands.

Aggregated per run and rendered into the SUMMARY line by services.summary.
"""


@dataclass(frozen=True)
class TableStat:
    """Per-table statistics (one CSV file written or one sheet uploaded)."""
    table_name: str
    status: str  # success/failed
    rows: int  # columns exported / data rows laid out
    elapsed_seconds: float
    error: str | None = None


@dataclass(frozen=True)
class ExportResult:
    """Aggregated result of one schema -> CSV export."""
    database: str
    output_directory: str
    success_tables: int
    failed_tables: int
    total_columns: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    table_stats: list[TableStat] | None = None


@dataclass(frozen=True)
class ImportResult:
    """Aggregated result of one CSV -> spreadsheet upload."""
    spreadsheet_id: str
    success_sheets: int
    failed_sheets: int
    total_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    table_stats: list[TableStat] | None = None
