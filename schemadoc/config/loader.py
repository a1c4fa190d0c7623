from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Configuration loader.

Responsibilities:
- Load the optional YAML file (config/schemadoc.yml)
- Validate it against the packaged JSON schema
- Overlay environment variables (DB_*, CSV_DIRECTORY, GOOGLE_SERVICE_ACCOUNT_*)
- Apply defaults and return explicit, frozen config objects

Resolution order per value: environment variable > YAML > built-in default.
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/schemadoc.yml")

DEFAULT_DB_PORT = 3306
DEFAULT_BATCH_INTERVAL_SECONDS = 3.0
DEFAULT_MAX_RETRIES = 5
DEFAULT_BACKOFF_BASE_SECONDS = 1.0


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    host: str
    port: int
    user: str
    password: str
    database: str | None


@dataclass(frozen=True)
class SheetsConfig:
    csv_directory: str | None
    key_file: str | None
    share_email: str | None
    batch_interval_seconds: float = DEFAULT_BATCH_INTERVAL_SECONDS
    max_retries: int = DEFAULT_MAX_RETRIES
    backoff_base_seconds: float = DEFAULT_BACKOFF_BASE_SECONDS


@dataclass(frozen=True)
class AppConfig:
    database: DatabaseConfig
    sheets: SheetsConfig
    output_root: str = "."

    def require_database(self) -> DatabaseConfig:
        """Return the DB config, failing when no schema name is configured."""
        if not self.database.database:
            raise ConfigError("database name is required (DB_DATABASE or database.database)")
        return self.database

    def require_sheets(self) -> SheetsConfig:
        """Return the Sheets config, failing when no service account key file is configured.

        The CSV directory is resolved by the caller since --csv-dir may supply it.
        """
        if not self.sheets.key_file:
            raise ConfigError(
                "service account key file is required "
                "(GOOGLE_SERVICE_ACCOUNT_KEY_FILE or sheets.key_file)"
            )
        return self.sheets

    def csv_directory(self, override: str | Path | None = None) -> Path:
        """CSV directory for the import: ``override`` (--csv-dir) wins over the configured one."""
        directory = override or self.sheets.csv_directory
        if not directory:
            raise ConfigError(
                "csv directory is required (--csv-dir, CSV_DIRECTORY or sheets.csv_directory)"
            )
        return Path(directory)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the packaged JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the data fails validation.
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _read_yaml(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    _validate_config_schema(data)
    return data


def _pick(env: Mapping[str, str], key: str, fallback: Any) -> Any:
    # 空文字の環境変数は未設定扱い
    value = env.get(key)
    if value is None or value == "":
        return fallback
    return value


def _as_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from e


def load_config(path: Path | None = None, environ: Mapping[str, str] | None = None) -> AppConfig:
    """Build the application config from an optional YAML file and the environment.

    ``path=None`` skips the YAML layer entirely; an explicit path that does not exist is an
    error. ``environ`` defaults to ``os.environ``.
    """
    env = os.environ if environ is None else environ
    data = _read_yaml(path)

    db_raw = data.get("database", {})
    sheets_raw = data.get("sheets", {})

    db = DatabaseConfig(
        host=_pick(env, "DB_HOST", db_raw.get("host", "localhost")),
        port=_as_int("DB_PORT", _pick(env, "DB_PORT", db_raw.get("port", DEFAULT_DB_PORT))),
        user=_pick(env, "DB_USERNAME", db_raw.get("user", "root")),
        password=_pick(env, "DB_PASSWORD", db_raw.get("password", "")),
        database=_pick(env, "DB_DATABASE", db_raw.get("database")),
    )
    sheets = SheetsConfig(
        csv_directory=_pick(env, "CSV_DIRECTORY", sheets_raw.get("csv_directory")),
        key_file=_pick(env, "GOOGLE_SERVICE_ACCOUNT_KEY_FILE", sheets_raw.get("key_file")),
        share_email=_pick(env, "GOOGLE_SERVICE_ACCOUNT_EMAIL", sheets_raw.get("share_email")),
        batch_interval_seconds=float(
            sheets_raw.get("batch_interval_seconds", DEFAULT_BATCH_INTERVAL_SECONDS)
        ),
        max_retries=int(sheets_raw.get("max_retries", DEFAULT_MAX_RETRIES)),
        backoff_base_seconds=float(
            sheets_raw.get("backoff_base_seconds", DEFAULT_BACKOFF_BASE_SECONDS)
        ),
    )
    return AppConfig(
        database=db,
        sheets=sheets,
        output_root=str(data.get("output_root", ".")),
    )


def resolve_config_path(explicit: str | None) -> Path | None:
    """CLI helper: explicit --config wins, otherwise the default file if it exists."""
    if explicit:
        return Path(explicit)
    if DEFAULT_CONFIG_PATH.exists():
        return DEFAULT_CONFIG_PATH
    return None
