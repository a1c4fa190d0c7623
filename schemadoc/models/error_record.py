from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the JSON Lines error log.

One record per table that failed during export (per-table isolation) or import
(per-sheet skip). Fixed key set; no extra keys are ever serialized.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        stage: "export" or "import"
        table: table (or CSV base) name the error belongs to; '' for run-level errors
        error_type: SCHEMA_READ_FAILED (export), CSV_READ_FAILED or SHEET_UPLOAD_FAILED (import)
        message: error message from the driver / API / parser
    """
    timestamp: str
    stage: str
    table: str
    error_type: str
    message: str

    @staticmethod
    def create(stage: str, table: str, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            stage=stage,
            table=table,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
