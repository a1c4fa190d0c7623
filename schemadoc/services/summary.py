from __future__ import annotations

from ..models.processing_result import ExportResult, ImportResult

"""SUMMARY line rendering for the export and import commands.

Formats:
    SUMMARY tables={n}/{n} success={s} failed={f} columns={c} elapsed_sec={e} output={dir}
    SUMMARY sheets={n}/{n} success={s} failed={f} rows={r} elapsed_sec={e} spreadsheet={id}
"""


def format_seconds(value: float) -> str:
    """Render seconds without scientific notation or trailing zeros."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.2f}".rstrip("0").rstrip(".")


def render_export_summary(result: ExportResult) -> str:
    total = result.success_tables + result.failed_tables
    return (
        f"SUMMARY tables={total}/{total} "
        f"success={result.success_tables} "
        f"failed={result.failed_tables} "
        f"columns={result.total_columns} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)} "
        f"output={result.output_directory}"
    )


def render_import_summary(result: ImportResult) -> str:
    """
    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> render_import_summary(ImportResult(
        ...     spreadsheet_id="abc", success_sheets=2, failed_sheets=1, total_rows=9,
        ...     start_time=t, end_time=t, elapsed_seconds=6.5))
        'SUMMARY sheets=3/3 success=2 failed=1 rows=9 elapsed_sec=6.5 spreadsheet=abc'
    """
    total = result.success_sheets + result.failed_sheets
    return (
        f"SUMMARY sheets={total}/{total} "
        f"success={result.success_sheets} "
        f"failed={result.failed_sheets} "
        f"rows={result.total_rows} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)} "
        f"spreadsheet={result.spreadsheet_id}"
    )
