from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import mysql.connector

from schemadoc.config.loader import DatabaseConfig

"""MySQL connection handling and the schema-read error taxonomy."""

__all__ = [
    "SchemaReadError",
    "DatabaseConnectionError",
    "QueryError",
    "ScanError",
    "open_connection",
]

logger = logging.getLogger(__name__)


class SchemaReadError(Exception):
    """Base class for failures while reading the live schema."""


class DatabaseConnectionError(SchemaReadError):
    """Database unreachable or authentication failed."""


class QueryError(SchemaReadError):
    """A metadata query failed inside the driver."""


class ScanError(SchemaReadError):
    """A result row had an unexpected shape or value type."""


@contextmanager
def open_connection(
    cfg: DatabaseConfig, connect: Callable[..., Any] | None = None
) -> Iterator[Any]:
    """Yield an open MySQL connection for ``cfg`` and always close it afterwards.

    ``connect`` defaults to ``mysql.connector.connect``; tests pass a fake.
    """
    connect = connect or mysql.connector.connect
    logger.debug(f"connecting to mysql host={cfg.host} port={cfg.port} database={cfg.database}")
    try:
        conn = connect(
            host=cfg.host,
            port=cfg.port,
            user=cfg.user,
            password=cfg.password,
            database=cfg.database,
        )
    except mysql.connector.Error as e:
        raise DatabaseConnectionError(
            f"cannot connect to {cfg.host}:{cfg.port}/{cfg.database}: {e}"
        ) from e
    try:
        yield conn
    finally:
        conn.close()
