# Shared pytest fixtures: temp workdir, fake MySQL connection, fake Google services
from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, Callable

import pytest

from schemadoc.config.loader import AppConfig, DatabaseConfig, SheetsConfig
from schemadoc.db import schema_reader as sr
from schemadoc.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "csv").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in (
        "DB_HOST",
        "DB_PORT",
        "DB_DATABASE",
        "DB_USERNAME",
        "DB_PASSWORD",
        "CSV_DIRECTORY",
        "GOOGLE_SERVICE_ACCOUNT_KEY_FILE",
        "GOOGLE_SERVICE_ACCOUNT_EMAIL",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_logging()
    yield
    reset_logging()


# --- MySQL fakes -----------------------------------------------------------


class FakeCursor:
    """Answers the reader's information_schema queries from a dict-described schema.

    schema = {
        "users": {
            "columns": [(name, type, is_nullable, default, comment, key), ...],
            "unique": ["email"],
            "indexed": ["id", "email"],
            "fks": [("dept_id", "departments", "id")],
        },
    }
    """

    def __init__(self, schema: dict[str, dict[str, Any]], fail_on: Callable[[str, tuple], Exception | None] | None = None) -> None:
        self.schema = schema
        self.fail_on = fail_on
        self.executed: list[tuple[str, tuple]] = []
        self._result: list[Any] = []
        self.closed = False

    def execute(self, sql: str, params: tuple = ()) -> None:
        self.executed.append((sql, params))
        if self.fail_on is not None:
            err = self.fail_on(sql, params)
            if err is not None:
                raise err
        if sql == sr.TABLES_SQL:
            self._result = [(name,) for name in sorted(self.schema)]
            return
        table = self.schema[params[1]]
        if sql == sr.COLUMNS_SQL:
            self._result = list(table.get("columns", []))
        elif sql == sr.UNIQUE_SQL:
            self._result = [(c,) for c in table.get("unique", [])]
        elif sql == sr.INDEXED_SQL:
            self._result = [(c,) for c in table.get("indexed", [])]
        elif sql == sr.FOREIGN_KEYS_SQL:
            self._result = list(table.get("fks", []))
        else:  # pragma: no cover
            raise AssertionError(f"unexpected sql: {sql}")

    def fetchall(self) -> list[Any]:
        return self._result

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    def __init__(self, cursor: FakeCursor) -> None:
        self._cursor = cursor
        self.closed = False

    def cursor(self) -> FakeCursor:
        return self._cursor

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def users_schema() -> dict[str, dict[str, Any]]:
    return {
        "departments": {
            "columns": [
                ("id", "int", "NO", None, "", "PRI"),
                ("name", "varchar(100)", "NO", None, "部署名", ""),
            ],
            "indexed": ["id"],
        },
        "users": {
            "columns": [
                ("id", "int", "NO", None, "", "PRI"),
                ("email", "varchar(255)", "NO", None, "login address", "UNI"),
                ("dept_id", "int", "YES", "NULL", "", "MUL"),
            ],
            "unique": ["email"],
            "indexed": ["id", "email"],
            "fks": [("dept_id", "departments", "id")],
        },
    }


@pytest.fixture()
def db_config() -> DatabaseConfig:
    return DatabaseConfig(host="localhost", port=3306, user="app", password="secret", database="appdb")


@pytest.fixture()
def make_connect():
    """Factory: make_connect(schema, fail_on=None) -> connect() replacement.

    The returned callable exposes ``calls``, ``cursor`` and (after a call) ``connection``.
    """

    def _make(schema: dict[str, dict[str, Any]], fail_on=None):
        calls: list[dict[str, Any]] = []
        cursor = FakeCursor(schema, fail_on=fail_on)

        def _connect(**kwargs: Any) -> FakeConnection:
            calls.append(kwargs)
            conn = FakeConnection(cursor)
            _connect.connection = conn  # type: ignore[attr-defined]
            return conn

        _connect.calls = calls  # type: ignore[attr-defined]
        _connect.cursor = cursor  # type: ignore[attr-defined]
        return _connect

    return _make


@pytest.fixture()
def fake_connect(make_connect, users_schema):
    return make_connect(users_schema)


# --- Google API fakes ------------------------------------------------------


class FakeRequest:
    def __init__(self, fn: Callable[[], Any]) -> None:
        self._fn = fn

    def execute(self) -> Any:
        return self._fn()


class FakeSpreadsheets:
    def __init__(self, service: FakeSheetsService) -> None:
        self._service = service

    def create(self, body: dict[str, Any]) -> FakeRequest:
        return FakeRequest(lambda: self._service._create(body))

    def batchUpdate(self, spreadsheetId: str, body: dict[str, Any]) -> FakeRequest:  # noqa: N802,N803
        return FakeRequest(lambda: self._service._batch_update(spreadsheetId, body))


class FakeSheetsService:
    """Records every call; ``fail`` decides per batch whether to raise instead of answering."""

    def __init__(self) -> None:
        self.created: list[dict[str, Any]] = []
        self.batches: list[dict[str, Any]] = []
        self.fail: Callable[[dict[str, Any]], Exception | None] | None = None
        self.fail_create: Exception | None = None
        self._next_sheet_id = 1001

    def spreadsheets(self) -> FakeSpreadsheets:
        return FakeSpreadsheets(self)

    def _create(self, body: dict[str, Any]) -> dict[str, Any]:
        if self.fail_create is not None:
            raise self.fail_create
        self.created.append(body)
        return {
            "spreadsheetId": "ss-1",
            "properties": body["properties"],
            "sheets": [{"properties": {"sheetId": 0, "title": "Sheet1"}}],
        }

    def _batch_update(self, spreadsheet_id: str, body: dict[str, Any]) -> dict[str, Any]:
        if self.fail is not None:
            err = self.fail(body)
            if err is not None:
                raise err
        self.batches.append(body)
        replies: list[dict[str, Any]] = []
        for req in body["requests"]:
            if "addSheet" in req:
                sheet_id = self._next_sheet_id
                self._next_sheet_id += 1
                title = req["addSheet"]["properties"]["title"]
                replies.append({"addSheet": {"properties": {"sheetId": sheet_id, "title": title}}})
            else:
                replies.append({})
        return {"spreadsheetId": spreadsheet_id, "replies": replies}

    def add_sheet_titles(self) -> list[str]:
        return [
            b["requests"][0]["addSheet"]["properties"]["title"]
            for b in self.batches
            if "addSheet" in b["requests"][0]
        ]


class FakePermissions:
    def __init__(self, service: FakeDriveService) -> None:
        self._service = service

    def create(self, fileId: str, body: dict[str, Any]) -> FakeRequest:  # noqa: N803
        return FakeRequest(lambda: self._service._create(fileId, body))


class FakeDriveService:
    def __init__(self) -> None:
        self.permissions_created: list[tuple[str, dict[str, Any]]] = []
        self.fail: Exception | None = None

    def permissions(self) -> FakePermissions:
        return FakePermissions(self)

    def _create(self, file_id: str, body: dict[str, Any]) -> dict[str, Any]:
        if self.fail is not None:
            raise self.fail
        self.permissions_created.append((file_id, body))
        return {"id": "perm-1"}


@pytest.fixture()
def sheets_service() -> FakeSheetsService:
    return FakeSheetsService()


@pytest.fixture()
def drive_service() -> FakeDriveService:
    return FakeDriveService()


def http_error(status: int) -> Exception:
    import httplib2
    from googleapiclient.errors import HttpError

    return HttpError(httplib2.Response({"status": status}), b'{"error": {"message": "boom"}}')


@pytest.fixture()
def make_http_error() -> Callable[[int], Exception]:
    return http_error


@pytest.fixture()
def sheets_config() -> SheetsConfig:
    return SheetsConfig(
        csv_directory="csv",
        key_file="key.json",
        share_email="doc-owner@example.com",
        batch_interval_seconds=3.0,
        max_retries=2,
        backoff_base_seconds=1.0,
    )


@pytest.fixture()
def app_config(db_config: DatabaseConfig, sheets_config: SheetsConfig) -> AppConfig:
    return AppConfig(database=db_config, sheets=sheets_config, output_root=".")


@pytest.fixture()
def write_users_csv(temp_workdir: Path) -> Callable[..., Path]:
    """Write a CSV in the exporter's format into temp_workdir/csv."""
    from schemadoc.csvio.writer import CSV_HEADER

    def _write(name: str = "users", rows: list[list[str]] | None = None) -> Path:
        rows = rows if rows is not None else [
            ["id", "int", "○", "×", "×", "○", "×", "", "", ""],
            ["email", "varchar(255)", "×", "×", "○", "○", "×", "", "", "login address"],
        ]
        path = temp_workdir / "csv" / f"{name}.csv"
        lines = [",".join(CSV_HEADER)] + [",".join(r) for r in rows]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
