"""Google Sheets job store (gspread + service-account credentials)."""
from __future__ import annotations

from typing import Sequence

import gspread
import requests
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials

from jobsift.config import Settings
from jobsift.errors import ConfigError, RecordNotFoundError, StoreReadError, StoreWriteError
from jobsift.log import get_logger
from jobsift.models import JobIdentity, ProcessedJob
from jobsift.retry import is_client_error, retry
from jobsift.store import (
    HEADERS,
    INDEX,
    WIDTH,
    JobStore,
    check_status,
    job_to_row,
    row_matches,
    rows_to_jobs,
)

log = get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
_LAST_COL = chr(ord("A") + WIDTH - 1)
DATA_RANGE = f"A2:{_LAST_COL}"
HEADER_RANGE = f"A1:{_LAST_COL}1"
STATUS_COL = INDEX["status"] + 1

_BACKEND_ERRORS = (gspread.exceptions.GSpreadException, requests.RequestException, GoogleAuthError, OSError)

_read_retry = retry(max_attempts=3, base_delay=1.0, retryable=_BACKEND_ERRORS, give_up=is_client_error)


class GoogleSheetStore(JobStore):
    def __init__(self, worksheet: gspread.Worksheet) -> None:
        self.worksheet = worksheet

    def describe(self) -> str:
        return f"Google Sheets worksheet {self.worksheet.title!r}"

    @_read_retry
    def _data_rows(self) -> list[list[str]]:
        return self.worksheet.get_values(DATA_RANGE)

    @_read_retry
    def _header_row(self) -> list[str]:
        return self.worksheet.row_values(1)

    def read_all(self) -> list[ProcessedJob]:
        try:
            rows = self._data_rows()
        except _BACKEND_ERRORS as exc:
            log.error("Error reading jobs from Google Sheets: %s", exc)
            raise StoreReadError("Failed to read jobs from Google Sheets") from exc
        jobs = rows_to_jobs(rows)
        log.debug("Read %d jobs (%d rows) from %s", len(jobs), len(rows), self.worksheet.title)
        return jobs

    def append(self, jobs: Sequence[ProcessedJob]) -> None:
        if not jobs:
            return
        rows = [job_to_row(job) for job in jobs]
        try:
            self.worksheet.append_rows(rows, value_input_option="RAW", table_range="A1")
        except _BACKEND_ERRORS as exc:
            log.error("Error appending %d jobs to Google Sheets: %s", len(rows), exc)
            raise StoreWriteError("Failed to append jobs to Google Sheets") from exc
        log.info("Added %d jobs to Google Sheets", len(rows))

    def ensure_headers(self) -> None:
        try:
            headers = self._header_row()
            if any(h.strip() for h in headers):
                return
            self.worksheet.update(range_name=HEADER_RANGE, values=[HEADERS], value_input_option="RAW")
        except _BACKEND_ERRORS as exc:
            log.error("Error initializing sheet headers: %s", exc)
            raise StoreWriteError("Failed to initialize sheet headers") from exc
        log.info("Initialized Google Sheets headers")

    def update_status(self, identity: JobIdentity, new_status: str) -> None:
        check_status(new_status)
        try:
            rows = self._data_rows()
        except _BACKEND_ERRORS as exc:
            raise StoreReadError("Failed to read jobs from Google Sheets") from exc

        for offset, row in enumerate(rows):
            if row_matches(row, identity):
                # Data starts on sheet row 2 and gspread rows are 1-based.
                target = offset + 2
                break
        else:
            raise RecordNotFoundError(identity)

        try:
            self.worksheet.update_cell(target, STATUS_COL, new_status)
        except _BACKEND_ERRORS as exc:
            log.error("Error updating job status in Google Sheets: %s", exc)
            raise StoreWriteError("Failed to update job status in Google Sheets") from exc
        log.info("Updated job status to %r for %s at %s", new_status, identity.role, identity.company)

    def validate_connection(self) -> None:
        try:
            self.worksheet.spreadsheet.fetch_sheet_metadata()
        except _BACKEND_ERRORS as exc:
            log.error("Google Sheets connection validation failed: %s", exc)
            raise StoreReadError(
                "Failed to connect to Google Sheets. Check credentials and spreadsheet ID."
            ) from exc
        log.info("Google Sheets connection validated")


def open_sheet_store(settings: Settings) -> GoogleSheetStore:
    if not settings.spreadsheet_id:
        raise ConfigError("GOOGLE_SHEETS_SPREADSHEET_ID is not set")
    info = settings.service_account_info()
    try:
        creds = Credentials.from_service_account_info(info, scopes=SCOPES)
    except (ValueError, KeyError) as exc:
        raise ConfigError(f"Unusable service account credentials: {exc}") from exc

    try:
        gc = gspread.authorize(creds)
        sh = gc.open_by_key(settings.spreadsheet_id)
        try:
            ws = sh.worksheet(settings.worksheet)
        except gspread.WorksheetNotFound:
            log.info("Creating worksheet %r", settings.worksheet)
            ws = sh.add_worksheet(title=settings.worksheet, rows=1000, cols=WIDTH)
    except _BACKEND_ERRORS as exc:
        raise StoreReadError(f"Failed to open spreadsheet {settings.spreadsheet_id}: {exc}") from exc
    return GoogleSheetStore(ws)
