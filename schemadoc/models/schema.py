from __future__ import annotations

from dataclasses import dataclass, field

"""Schema snapshot models (Database / Table / Column).

Built once per export run from information_schema and never mutated afterwards.
Column order inside a Table always follows ORDINAL_POSITION.
"""

__all__ = [
    "Column",
    "Table",
    "Database",
    "SchemaSnapshot",
]


@dataclass(frozen=True)
class Column:
    """A single column definition with derived key/index flags.

    Attributes:
        name: COLUMN_NAME
        type: COLUMN_TYPE as declared (e.g. ``varchar(255)``)
        is_nullable: IS_NULLABLE == 'YES'
        default: COLUMN_DEFAULT, None when the column has no default
        comment: COLUMN_COMMENT ('' when unset)
        is_primary_key: COLUMN_KEY == 'PRI'
        is_unique: column participates in a UNIQUE constraint
        is_indexed: column appears in information_schema.STATISTICS
        is_foreign: column references another table
        foreign_key_table / foreign_key_column: reference target, '' when not foreign
    """
    name: str
    type: str
    is_nullable: bool = False
    default: str | None = None
    comment: str = ""
    is_primary_key: bool = False
    is_unique: bool = False
    is_indexed: bool = False
    is_foreign: bool = False
    foreign_key_table: str = ""
    foreign_key_column: str = ""

    def __post_init__(self) -> None:
        has_target = bool(self.foreign_key_table) and bool(self.foreign_key_column)
        if self.is_foreign and not has_target:
            raise ValueError(f"foreign key column '{self.name}' lacks referenced table/column")
        if not self.is_foreign and (self.foreign_key_table or self.foreign_key_column):
            raise ValueError(f"column '{self.name}' has a reference target but is not foreign")


@dataclass(frozen=True)
class Table:
    name: str
    columns: tuple[Column, ...] = ()


@dataclass(frozen=True)
class Database:
    name: str
    tables: tuple[Table, ...] = ()


@dataclass(frozen=True)
class SchemaSnapshot:
    """Result of a schema read: the database plus tables that could not be read.

    ``failed_tables`` maps table name -> error message and is only populated when the
    reader runs with per-table isolation enabled.
    """
    database: Database
    failed_tables: dict[str, str] = field(default_factory=dict)
