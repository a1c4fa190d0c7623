from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from .writer import CSV_HEADER

"""CSV reading for the import half.

Files are read raw (no header inference, every field as str, no NA conversion) so the
layout builder sees exactly what the exporter wrote, header row included.
"""


class CsvReadError(Exception):
    """Raised when a table CSV cannot be parsed into documentation rows."""


class CsvDirectoryError(Exception):
    """Raised when the CSV directory is missing or unreadable."""


@dataclass
class TableCsv:
    table_name: str
    path: Path
    rows: list[list[str]]  # rows[0] はヘッダ行

    @property
    def data_rows(self) -> int:
        return max(len(self.rows) - 1, 0)


def scan_csv_files(directory: Path) -> list[Path]:
    """List ``*.csv`` files in ``directory`` (non-recursive), sorted by name.

    Raises:
        CsvDirectoryError: If the directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise CsvDirectoryError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise CsvDirectoryError(f"Path is not a directory: {directory}")
    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == ".csv")
    except OSError as e:
        raise CsvDirectoryError(f"Error reading directory {directory}: {e}") from e


def read_table_csv(path: Path) -> TableCsv:
    """Parse one exported CSV.

    Steps:
    1. Read every cell as str with NA detection disabled
    2. Blank cells (short rows) become ''
    3. Require at least the header row and CSV_HEADER's width
    """
    try:
        df = pd.read_csv(path, header=None, dtype=str, keep_default_na=False, encoding="utf-8")
    except pd.errors.EmptyDataError as e:
        raise CsvReadError(f"{path.name}: empty file") from e
    except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
        raise CsvReadError(f"{path.name}: {e}") from e

    if df.shape[1] < len(CSV_HEADER):
        raise CsvReadError(
            f"{path.name}: expected {len(CSV_HEADER)} fields per row, got {df.shape[1]}"
        )
    rows: list[list[str]] = []
    for raw in df.itertuples(index=False, name=None):
        rows.append(["" if pd.isna(v) else str(v) for v in raw])
    return TableCsv(table_name=path.stem, path=path, rows=rows)
