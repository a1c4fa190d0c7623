from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import AppConfig
from ..csvio.writer import create_output_directory, write_table_csv
from ..db.schema_reader import SchemaReader
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.processing_result import ExportResult, TableStat
from .progress import ProgressTracker

"""Export orchestration: live schema -> CSV tree.

1. Read the schema snapshot (fatal on connection errors; query/scan errors are fatal
   unless keep_going isolates them per table)
2. Create a fresh output directory named after the database
3. Write one CSV per table (filesystem errors are fatal)
4. Aggregate per-table stats into an ExportResult
"""

logger = logging.getLogger(__name__)


def run_export(
    config: AppConfig,
    reader: SchemaReader | None = None,
    output_root: Path | None = None,
    keep_going: bool = False,
    error_log: ErrorLogBuffer | None = None,
) -> ExportResult:
    """Export every table of the configured schema to CSV.

    Raises:
        SchemaReadError: connection failure, or query/scan failure without keep_going
        FileSystemError: output directory or a CSV file could not be written
    """
    start_time = datetime.now(UTC)
    db_cfg = config.require_database()
    reader = reader or SchemaReader(db_cfg)
    root = output_root if output_root is not None else Path(config.output_root)

    snapshot = reader.read(keep_going=keep_going)
    database = snapshot.database
    directory = create_output_directory(root / database.name)
    logger.info(f"output directory: {directory}")

    stats: list[TableStat] = []
    total_columns = 0
    with ProgressTracker(len(database.tables), description="Export") as progress:
        for table in database.tables:
            progress.start(table.name)
            t0 = time.perf_counter()
            write_table_csv(directory, table)
            total_columns += len(table.columns)
            stats.append(
                TableStat(
                    table_name=table.name,
                    status="success",
                    rows=len(table.columns),
                    elapsed_seconds=time.perf_counter() - t0,
                )
            )
            progress.finish(success=True)
            progress.set_postfix(columns=total_columns)

    for name, message in snapshot.failed_tables.items():
        stats.append(TableStat(table_name=name, status="failed", rows=0, elapsed_seconds=0.0, error=message))
        if error_log is not None:
            error_log.append(ErrorRecord.create("export", name, "SCHEMA_READ_FAILED", message))

    end_time = datetime.now(UTC)
    return ExportResult(
        database=database.name,
        output_directory=str(directory),
        success_tables=len(database.tables),
        failed_tables=len(snapshot.failed_tables),
        total_columns=total_columns,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        table_stats=stats,
    )
