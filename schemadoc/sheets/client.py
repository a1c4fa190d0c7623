from __future__ import annotations

from pathlib import Path
from typing import Any

from google.oauth2 import service_account
from googleapiclient.discovery import build

"""Google API client construction from a service account key file."""

SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"
DRIVE_SCOPE = "https://www.googleapis.com/auth/drive"


class CredentialsError(Exception):
    pass


def load_credentials(key_file: str | Path, scopes: list[str]) -> Any:
    path = Path(key_file)
    if not path.exists():
        raise CredentialsError(f"service account key file not found: {path}")
    try:
        return service_account.Credentials.from_service_account_file(str(path), scopes=scopes)
    except (ValueError, KeyError) as e:
        raise CredentialsError(f"invalid service account key file {path}: {e}") from e


def build_services(key_file: str | Path) -> tuple[Any, Any]:
    """Return (sheets v4 service, drive v3 service) sharing one credential."""
    creds = load_credentials(key_file, [SHEETS_SCOPE, DRIVE_SCOPE])
    sheets = build("sheets", "v4", credentials=creds, cache_discovery=False)
    drive = build("drive", "v3", credentials=creds, cache_discovery=False)
    return sheets, drive
