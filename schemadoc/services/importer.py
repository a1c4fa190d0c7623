from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from googleapiclient.errors import HttpError

from ..config.loader import AppConfig
from ..csvio.reader import CsvReadError, read_table_csv, scan_csv_files
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.processing_result import ImportResult, TableStat
from ..sheets.layout import build_index_entries, build_table_layout
from ..sheets.uploader import SheetsUploader, UploadError
from .progress import ProgressTracker

"""Import orchestration: CSV tree -> formatted spreadsheet.

1. Scan the CSV directory (missing directory is fatal)
2. Create the spreadsheet titled after the directory and share it (both fatal)
3. Per CSV: parse, add a sheet, submit its layout batch; failures skip that table only
4. Write the index sheet linking every successfully laid-out sheet (fatal)
"""

logger = logging.getLogger(__name__)


def run_import(
    config: AppConfig,
    sheets_service: Any,
    drive_service: Any,
    csv_directory: Path | None = None,
    error_log: ErrorLogBuffer | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ImportResult:
    """Upload every ``*.csv`` in the CSV directory as a documentation sheet.

    Raises:
        ConfigError: no key file, or no CSV directory from either argument or config
        CsvDirectoryError: CSV directory missing or unreadable
        UploadError: spreadsheet creation, permission grant or index update failed
    """
    start_time = datetime.now(UTC)
    sheets_cfg = config.require_sheets()
    directory = config.csv_directory(csv_directory)
    files = scan_csv_files(directory)
    logger.info(f"Processing {len(files)} csv files from: {directory}")

    uploader = SheetsUploader(sheets_service, drive_service, sheets_cfg, sleep=sleep)
    title = directory.resolve().name
    spreadsheet_id, index_sheet_id = uploader.create_spreadsheet(title)
    if sheets_cfg.share_email:
        uploader.share(spreadsheet_id, sheets_cfg.share_email)
    else:
        logger.warning("GOOGLE_SERVICE_ACCOUNT_EMAIL not set; spreadsheet not shared")

    stats: list[TableStat] = []
    laid_out: list[tuple[str, int]] = []
    total_rows = 0
    with ProgressTracker(len(files), description="Import", unit="sheet") as progress:
        for path in files:
            name = path.stem
            progress.start(name)
            t0 = time.perf_counter()
            try:
                table_csv = read_table_csv(path)
                cells = build_table_layout(table_csv.table_name, table_csv.rows)
                sheet_id = uploader.upload_table(spreadsheet_id, table_csv.table_name, cells)
            except (CsvReadError, HttpError, UploadError) as e:
                error_type = "CSV_READ_FAILED" if isinstance(e, CsvReadError) else "SHEET_UPLOAD_FAILED"
                logger.error(f"sheet {name} skipped: {e}")
                if error_log is not None:
                    error_log.append(ErrorRecord.create("import", name, error_type, str(e)))
                stats.append(
                    TableStat(
                        table_name=name,
                        status="failed",
                        rows=0,
                        elapsed_seconds=time.perf_counter() - t0,
                        error=str(e),
                    )
                )
                progress.finish(success=False)
                continue
            laid_out.append((table_csv.table_name, sheet_id))
            total_rows += table_csv.data_rows
            stats.append(
                TableStat(
                    table_name=name,
                    status="success",
                    rows=table_csv.data_rows,
                    elapsed_seconds=time.perf_counter() - t0,
                )
            )
            logger.debug(f"sheet {name} gid={sheet_id} rows={table_csv.data_rows}")
            progress.finish(success=True)
            progress.set_postfix(rows=total_rows)

    uploader.write_index(spreadsheet_id, index_sheet_id, build_index_entries(laid_out))
    logger.info(f"index updated entries={len(laid_out)}")

    end_time = datetime.now(UTC)
    success = len(laid_out)
    return ImportResult(
        spreadsheet_id=spreadsheet_id,
        success_sheets=success,
        failed_sheets=len(files) - success,
        total_rows=total_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        table_stats=stats,
    )
