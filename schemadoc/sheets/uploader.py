from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

import httplib2
from google.auth.exceptions import TransportError
from googleapiclient.errors import HttpError

from schemadoc.config.loader import SheetsConfig
from schemadoc.models.layout import IndexEntry, LayoutCell

from .requests import add_sheet_request, index_requests, layout_requests

"""Spreadsheet upload primitives.

SheetsUploader wraps the Sheets v4 / Drive v3 services with:
- a RateLimiter keeping a minimum interval between layout batch submissions
- exponential backoff retry on HTTP 429 and 5xx responses and on transport failures
  (socket timeouts, connection errors); transport failures that outlast the retries
  surface as UploadError

Per-sheet error isolation is the caller's job (services.importer); methods here raise.
"""

__all__ = [
    "UploadError",
    "RateLimiter",
    "SheetsUploader",
    "RETRYABLE_STATUSES",
]

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})
TRANSPORT_ERRORS = (OSError, TransportError, httplib2.HttpLib2Error)


class UploadError(Exception):
    pass


def _status_of(error: HttpError) -> int | None:
    status = getattr(error.resp, "status", None)
    try:
        return int(status) if status is not None else None
    except (TypeError, ValueError):
        return None


class RateLimiter:
    """Enforce a minimum interval between consecutive acquire() calls."""

    def __init__(
        self,
        min_interval: float,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.min_interval = min_interval
        self._sleep = sleep
        self._clock = clock
        self._last: float | None = None

    def acquire(self) -> float:
        """Block until the interval since the previous call has passed; returns seconds slept."""
        waited = 0.0
        if self._last is not None:
            remaining = self.min_interval - (self._clock() - self._last)
            if remaining > 0:
                self._sleep(remaining)
                waited = remaining
        self._last = self._clock()
        return waited


class SheetsUploader:
    def __init__(
        self,
        sheets_service: Any,
        drive_service: Any,
        config: SheetsConfig,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.sheets = sheets_service
        self.drive = drive_service
        self.config = config
        self._sleep = sleep
        self.limiter = RateLimiter(config.batch_interval_seconds, sleep=sleep, clock=clock)

    def _execute(self, request: Any, what: str) -> Any:
        """Execute an API request, retrying retryable failures with exponential backoff.

        Raises:
            HttpError: non-retryable status, or a retryable one after max_retries
            UploadError: transport failure after max_retries
        """
        attempt = 0
        while True:
            try:
                return request.execute()
            except HttpError as e:
                status = _status_of(e)
                if status not in RETRYABLE_STATUSES or attempt >= self.config.max_retries:
                    raise
                reason = f"HTTP {status}"
            except TRANSPORT_ERRORS as e:
                if attempt >= self.config.max_retries:
                    raise UploadError(f"{what}: {type(e).__name__}: {e}") from e
                reason = type(e).__name__
            delay = self.config.backoff_base_seconds * (2 ** attempt)
            attempt += 1
            logger.warning(
                f"{what}: {reason}, retry {attempt}/{self.config.max_retries} in {delay:g}s"
            )
            self._sleep(delay)

    def create_spreadsheet(self, title: str) -> tuple[str, int]:
        """Create the spreadsheet; returns (spreadsheet id, sheet id of its first sheet)."""
        body = {"properties": {"title": title}}
        try:
            created = self._execute(self.sheets.spreadsheets().create(body=body), "create spreadsheet")
        except HttpError as e:
            raise UploadError(f"unable to create spreadsheet '{title}': {e}") from e
        try:
            spreadsheet_id = created["spreadsheetId"]
        except (KeyError, TypeError) as e:
            raise UploadError(f"create spreadsheet returned no id: {created!r}") from e
        index_sheet_id = 0
        first = (created.get("sheets") or [{}])[0]
        if first.get("properties", {}).get("sheetId") is not None:
            index_sheet_id = int(first["properties"]["sheetId"])
        logger.info(f"spreadsheet created id={spreadsheet_id} title={title}")
        return spreadsheet_id, index_sheet_id

    def share(self, spreadsheet_id: str, email: str) -> None:
        permission = {"type": "user", "role": "writer", "emailAddress": email}
        try:
            self._execute(
                self.drive.permissions().create(fileId=spreadsheet_id, body=permission),
                "grant permission",
            )
        except HttpError as e:
            raise UploadError(f"unable to share spreadsheet with {email}: {e}") from e
        logger.info(f"spreadsheet shared with {email}")

    def submit(self, spreadsheet_id: str, requests: Sequence[dict[str, Any]], what: str) -> Any:
        body = {"requests": list(requests)}
        return self._execute(
            self.sheets.spreadsheets().batchUpdate(spreadsheetId=spreadsheet_id, body=body), what
        )

    def add_sheet(self, spreadsheet_id: str, title: str) -> int:
        resp = self.submit(spreadsheet_id, [add_sheet_request(title)], f"add sheet {title}")
        try:
            return int(resp["replies"][0]["addSheet"]["properties"]["sheetId"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise UploadError(f"failed to get the new sheet id for {title}") from e

    def upload_table(self, spreadsheet_id: str, title: str, cells: Sequence[LayoutCell]) -> int:
        """Add a sheet and submit its whole layout as one batch update; returns the sheet id.

        Raises:
            HttpError: API failure after retries
            UploadError: malformed add-sheet reply, or transport failure after retries
        """
        sheet_id = self.add_sheet(spreadsheet_id, title)
        waited = self.limiter.acquire()
        if waited:
            logger.debug(f"rate limit: waited {waited:.2f}s before {title}")
        self.submit(spreadsheet_id, layout_requests(sheet_id, cells), f"layout {title}")
        return sheet_id

    def write_index(self, spreadsheet_id: str, index_sheet_id: int, entries: Sequence[IndexEntry]) -> None:
        try:
            self.submit(spreadsheet_id, index_requests(index_sheet_id, entries), "index update")
        except HttpError as e:
            raise UploadError(f"unable to update index page: {e}") from e
