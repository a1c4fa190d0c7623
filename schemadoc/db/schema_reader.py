from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

import mysql.connector

from schemadoc.config.loader import DatabaseConfig
from schemadoc.models.schema import Column, Database, SchemaSnapshot, Table

from .connection import QueryError, ScanError, SchemaReadError, open_connection

"""Schema introspection against MySQL information_schema.

Per table the reader issues four queries, each returning the whole table's answer:
- COLUMNS: name / type / nullability / default / comment / column key
- TABLE_CONSTRAINTS x KEY_COLUMN_USAGE (CONSTRAINT_TYPE='UNIQUE'): unique columns
- STATISTICS: indexed columns
- KEY_COLUMN_USAGE (REFERENCED_TABLE_NAME IS NOT NULL): foreign key targets
"""

__all__ = [
    "SchemaReader",
    "TABLES_SQL",
    "COLUMNS_SQL",
    "UNIQUE_SQL",
    "INDEXED_SQL",
    "FOREIGN_KEYS_SQL",
]

logger = logging.getLogger(__name__)

TABLES_SQL = """
SELECT TABLE_NAME
FROM information_schema.TABLES
WHERE TABLE_SCHEMA = %s
ORDER BY TABLE_NAME
"""

COLUMNS_SQL = """
SELECT COLUMN_NAME, COLUMN_TYPE, IS_NULLABLE, COLUMN_DEFAULT, COLUMN_COMMENT, COLUMN_KEY
FROM information_schema.COLUMNS
WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s
ORDER BY ORDINAL_POSITION
"""

UNIQUE_SQL = """
SELECT DISTINCT kcu.COLUMN_NAME
FROM information_schema.TABLE_CONSTRAINTS AS tc
JOIN information_schema.KEY_COLUMN_USAGE AS kcu
  ON tc.CONSTRAINT_NAME = kcu.CONSTRAINT_NAME
 AND tc.TABLE_SCHEMA = kcu.TABLE_SCHEMA
 AND tc.TABLE_NAME = kcu.TABLE_NAME
WHERE tc.TABLE_SCHEMA = %s AND tc.TABLE_NAME = %s AND tc.CONSTRAINT_TYPE = 'UNIQUE'
"""

INDEXED_SQL = """
SELECT DISTINCT COLUMN_NAME
FROM information_schema.STATISTICS
WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s
"""

FOREIGN_KEYS_SQL = """
SELECT COLUMN_NAME, REFERENCED_TABLE_NAME, REFERENCED_COLUMN_NAME
FROM information_schema.KEY_COLUMN_USAGE
WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s AND REFERENCED_TABLE_NAME IS NOT NULL
ORDER BY CONSTRAINT_NAME, ORDINAL_POSITION
"""


def _text(value: Any, what: str, *, nullable: bool = False) -> str | None:
    """Normalize a driver value to str (the connector may hand back bytes)."""
    if value is None:
        if nullable:
            return None
        raise ScanError(f"unexpected NULL for {what}")
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ScanError(f"cannot decode {what}: {e}") from e
    if isinstance(value, str):
        return value
    raise ScanError(f"unexpected {type(value).__name__} for {what}: {value!r}")


def _unpack(row: Any, width: int, what: str) -> Sequence[Any]:
    if not isinstance(row, (tuple, list)) or len(row) != width:
        raise ScanError(f"{what}: expected {width} fields, got {row!r}")
    return row


class SchemaReader:
    """Read a full Database snapshot for the configured schema.

    The reader owns no connection state between runs; each read() opens one connection
    and closes it when done.
    """

    def __init__(self, config: DatabaseConfig, connect: Callable[..., Any] | None = None) -> None:
        if not config.database:
            raise ValueError("DatabaseConfig.database is required for schema reads")
        self.config = config
        self._connect = connect
        self.schema: str = config.database

    def read(self, keep_going: bool = False) -> SchemaSnapshot:
        """Read every table of the schema.

        Args:
            keep_going: isolate QueryError/ScanError per table (log, record, continue)
                instead of aborting the whole read.

        Raises:
            DatabaseConnectionError: connection / authentication failure (always fatal)
            QueryError, ScanError: metadata query or row decoding failure (fatal unless
                keep_going)
        """
        with open_connection(self.config, self._connect) as conn:
            cursor = conn.cursor()
            try:
                table_names = self.list_tables(cursor)
                logger.info(f"schema={self.schema} tables={len(table_names)}")
                tables: list[Table] = []
                failed: dict[str, str] = {}
                for name in table_names:
                    try:
                        tables.append(self.read_table(cursor, name))
                    except SchemaReadError as e:
                        if not keep_going:
                            raise
                        logger.error(f"table {name}: {e}")
                        failed[name] = str(e)
            finally:
                cursor.close()
        return SchemaSnapshot(database=Database(name=self.schema, tables=tuple(tables)), failed_tables=failed)

    def _query(self, cursor: Any, sql: str, params: tuple[Any, ...]) -> list[Any]:
        try:
            cursor.execute(sql, params)
            return list(cursor.fetchall())
        except mysql.connector.Error as e:
            raise QueryError(f"query failed ({params}): {e}") from e

    def list_tables(self, cursor: Any) -> list[str]:
        rows = self._query(cursor, TABLES_SQL, (self.schema,))
        return [_text(_unpack(r, 1, "table list")[0], "TABLE_NAME") for r in rows]  # type: ignore[misc]

    def unique_columns(self, cursor: Any, table: str) -> set[str]:
        rows = self._query(cursor, UNIQUE_SQL, (self.schema, table))
        return {_text(_unpack(r, 1, "unique")[0], "COLUMN_NAME") for r in rows}  # type: ignore[misc]

    def indexed_columns(self, cursor: Any, table: str) -> set[str]:
        rows = self._query(cursor, INDEXED_SQL, (self.schema, table))
        return {_text(_unpack(r, 1, "index")[0], "COLUMN_NAME") for r in rows}  # type: ignore[misc]

    def foreign_keys(self, cursor: Any, table: str) -> dict[str, tuple[str, str]]:
        """Map column -> (referenced table, referenced column); first constraint wins."""
        targets: dict[str, tuple[str, str]] = {}
        for r in self._query(cursor, FOREIGN_KEYS_SQL, (self.schema, table)):
            col, ref_table, ref_col = _unpack(r, 3, "foreign key")
            name = _text(col, "COLUMN_NAME")
            ref_t = _text(ref_table, "REFERENCED_TABLE_NAME")
            ref_c = _text(ref_col, "REFERENCED_COLUMN_NAME")
            if not ref_t or not ref_c:
                raise ScanError(f"foreign key {table}.{name} has an empty reference target")
            targets.setdefault(name, (ref_t, ref_c))  # type: ignore[arg-type]
        return targets

    def read_table(self, cursor: Any, table: str) -> Table:
        rows = self._query(cursor, COLUMNS_SQL, (self.schema, table))
        unique = self.unique_columns(cursor, table)
        indexed = self.indexed_columns(cursor, table)
        fks = self.foreign_keys(cursor, table)

        columns: list[Column] = []
        for r in rows:
            name, col_type, nullable, default, comment, key = _unpack(r, 6, f"columns of {table}")
            col_name = _text(name, "COLUMN_NAME")
            ref_table, ref_column = fks.get(col_name, ("", ""))  # type: ignore[arg-type]
            columns.append(
                Column(
                    name=col_name,  # type: ignore[arg-type]
                    type=_text(col_type, "COLUMN_TYPE"),  # type: ignore[arg-type]
                    is_nullable=_text(nullable, "IS_NULLABLE") == "YES",
                    default=_text(default, "COLUMN_DEFAULT", nullable=True),
                    comment=_text(comment, "COLUMN_COMMENT", nullable=True) or "",
                    is_primary_key=_text(key, "COLUMN_KEY", nullable=True) == "PRI",
                    is_unique=col_name in unique,
                    is_indexed=col_name in indexed,
                    is_foreign=col_name in fks,
                    foreign_key_table=ref_table,
                    foreign_key_column=ref_column,
                )
            )
        logger.debug(f"table={table} columns={len(columns)} unique={len(unique)} fks={len(fks)}")
        return Table(name=table, columns=tuple(columns))
