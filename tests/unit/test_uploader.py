from __future__ import annotations

import pytest
from googleapiclient.errors import HttpError

from schemadoc.models.layout import GridRange, IndexEntry, LayoutCell
from schemadoc.sheets.uploader import RateLimiter, SheetsUploader, UploadError


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def uploader(sheets_service, drive_service, sheets_config, clock) -> SheetsUploader:
    return SheetsUploader(sheets_service, drive_service, sheets_config, sleep=clock.sleep, clock=clock)


CELLS = [LayoutCell(range=GridRange(0, 1, 0, 1), text="x")]


def test_rate_limiter_first_call_does_not_wait(clock):
    limiter = RateLimiter(3.0, sleep=clock.sleep, clock=clock)
    assert limiter.acquire() == 0.0
    assert clock.sleeps == []


def test_rate_limiter_waits_remaining_interval(clock):
    limiter = RateLimiter(3.0, sleep=clock.sleep, clock=clock)
    limiter.acquire()
    clock.now += 1.0
    assert limiter.acquire() == pytest.approx(2.0)
    clock.now += 5.0
    assert limiter.acquire() == 0.0
    assert clock.sleeps == [pytest.approx(2.0)]


def test_rate_limiter_zero_interval_never_sleeps(clock):
    limiter = RateLimiter(0.0, sleep=clock.sleep, clock=clock)
    for _ in range(3):
        limiter.acquire()
    assert clock.sleeps == []


def test_create_spreadsheet_returns_ids(uploader, sheets_service):
    assert uploader.create_spreadsheet("appdb") == ("ss-1", 0)
    assert sheets_service.created == [{"properties": {"title": "appdb"}}]


def test_create_spreadsheet_failure(uploader, sheets_service, make_http_error):
    sheets_service.fail_create = make_http_error(403)
    with pytest.raises(UploadError, match="unable to create spreadsheet"):
        uploader.create_spreadsheet("appdb")


def test_share_grants_writer(uploader, drive_service):
    uploader.share("ss-1", "doc-owner@example.com")
    assert drive_service.permissions_created == [
        ("ss-1", {"type": "user", "role": "writer", "emailAddress": "doc-owner@example.com"})
    ]


def test_share_failure(uploader, drive_service, make_http_error):
    drive_service.fail = make_http_error(404)
    with pytest.raises(UploadError, match="unable to share"):
        uploader.share("ss-1", "doc-owner@example.com")


def test_upload_table_adds_sheet_then_layout(uploader, sheets_service):
    sheet_id = uploader.upload_table("ss-1", "users", CELLS)
    assert sheet_id == 1001
    assert sheets_service.add_sheet_titles() == ["users"]
    layout = sheets_service.batches[1]["requests"]
    assert [next(iter(r)) for r in layout] == ["mergeCells", "repeatCell", "updateBorders"]
    assert layout[0]["mergeCells"]["range"]["sheetId"] == 1001


def test_layout_batches_are_spaced(uploader, clock):
    uploader.upload_table("ss-1", "a", CELLS)
    uploader.upload_table("ss-1", "b", CELLS)
    assert clock.sleeps == [pytest.approx(3.0)]


def test_retry_on_429_then_success(uploader, sheets_service, clock, make_http_error):
    failures = [make_http_error(429), make_http_error(503)]
    sheets_service.fail = lambda body: failures.pop(0) if failures else None
    assert uploader.add_sheet("ss-1", "users") == 1001
    # exponential backoff: base, base * 2
    assert clock.sleeps == [1.0, 2.0]


def test_retry_gives_up_after_max_retries(uploader, sheets_service, clock, make_http_error):
    sheets_service.fail = lambda body: make_http_error(429)
    with pytest.raises(HttpError):
        uploader.add_sheet("ss-1", "users")
    assert clock.sleeps == [1.0, 2.0]


def test_non_retryable_error_is_raised_immediately(uploader, sheets_service, clock, make_http_error):
    sheets_service.fail = lambda body: make_http_error(400)
    with pytest.raises(HttpError):
        uploader.add_sheet("ss-1", "users")
    assert clock.sleeps == []


def test_add_sheet_malformed_reply(uploader, sheets_service):
    sheets_service._batch_update = lambda spreadsheet_id, body: {"replies": []}
    with pytest.raises(UploadError, match="new sheet id"):
        uploader.add_sheet("ss-1", "users")


def test_write_index(uploader, sheets_service):
    uploader.write_index("ss-1", 0, [IndexEntry("users", 1001, 0)])
    reqs = sheets_service.batches[0]["requests"]
    assert "updateSheetProperties" in reqs[0]
    assert len(reqs) == 2


def test_write_index_failure(uploader, sheets_service, make_http_error):
    sheets_service.fail = lambda body: make_http_error(400)
    with pytest.raises(UploadError, match="unable to update index page"):
        uploader.write_index("ss-1", 0, [])


def test_retry_on_timeout_then_success(uploader, sheets_service, clock):
    failures = [TimeoutError("timed out")]
    sheets_service.fail = lambda body: failures.pop(0) if failures else None
    assert uploader.add_sheet("ss-1", "users") == 1001
    assert clock.sleeps == [1.0]


def test_timeout_becomes_upload_error_after_retries(uploader, sheets_service, clock):
    sheets_service.fail = lambda body: TimeoutError("timed out")
    with pytest.raises(UploadError, match="TimeoutError"):
        uploader.upload_table("ss-1", "users", CELLS)
    assert clock.sleeps == [1.0, 2.0]


def test_create_spreadsheet_connection_error(uploader, sheets_service, clock):
    sheets_service.fail_create = ConnectionResetError("reset by peer")
    with pytest.raises(UploadError, match="create spreadsheet"):
        uploader.create_spreadsheet("appdb")
    assert sheets_service.created == []
