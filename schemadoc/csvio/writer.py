from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from schemadoc.models.schema import Column, Table

"""CSV export of the schema snapshot.

One ``<table>.csv`` per table inside a freshly created directory named after the
database. Flags are rendered with two fixed glyphs.
"""

__all__ = [
    "CSV_HEADER",
    "PRESENT",
    "ABSENT",
    "FileSystemError",
    "create_output_directory",
    "column_record",
    "write_table_csv",
]

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "COLUMN_NAME",
    "COLUMN_TYPE",
    "IS_PRIMARY_KEY",
    "IS_NULLABLE",
    "IS_UNIQUE",
    "IS_INDEX",
    "IS_FOREIGN_KEY",
    "FOREIGN_KEY_TABLE",
    "FOREIGN_KEY_COLUMN",
    "COMMENT",
]

PRESENT = "○"
ABSENT = "×"


class FileSystemError(Exception):
    """Output directory or CSV file could not be created."""


def _flag(value: bool) -> str:
    return PRESENT if value else ABSENT


def create_output_directory(base: Path) -> Path:
    """Create ``base`` or, if taken, the first free ``base_1``, ``base_2``, ...

    Never reuses an existing directory. mkdir(exist_ok=False) keeps the check and the
    creation atomic per candidate.
    """
    candidate = base
    suffix = 0
    while True:
        try:
            candidate.mkdir(parents=True, exist_ok=False)
            return candidate
        except FileExistsError:
            suffix += 1
            candidate = base.with_name(f"{base.name}_{suffix}")
        except OSError as e:
            raise FileSystemError(f"could not create directory {candidate}: {e}") from e


def column_record(col: Column) -> list[str]:
    """Render one column as a CSV record in CSV_HEADER order."""
    # IS_INDEX は外部キー列でも ○ (既存出力フォーマット互換)
    return [
        col.name,
        col.type,
        _flag(col.is_primary_key),
        _flag(col.is_nullable),
        _flag(col.is_unique),
        _flag(col.is_indexed or col.is_foreign),
        _flag(col.is_foreign),
        col.foreign_key_table,
        col.foreign_key_column,
        col.comment,
    ]


def write_table_csv(directory: Path, table: Table) -> Path:
    path = directory / f"{table.name}.csv"
    df = pd.DataFrame([column_record(c) for c in table.columns], columns=CSV_HEADER)
    try:
        df.to_csv(path, index=False, encoding="utf-8", lineterminator="\n")
    except OSError as e:
        raise FileSystemError(f"could not write {path}: {e}") from e
    logger.debug(f"wrote {path} rows={len(table.columns)}")
    return path
