"""Job store kept in a local CSV file with advisory file locking."""
from __future__ import annotations

import csv
import fcntl
from pathlib import Path
from typing import IO, Sequence

from jobsift.errors import RecordNotFoundError, StoreReadError, StoreWriteError
from jobsift.log import get_logger
from jobsift.models import JobIdentity, ProcessedJob
from jobsift.store import HEADERS, INDEX, JobStore, check_status, job_to_row, row_matches, rows_to_jobs

log = get_logger(__name__)


def _lock(f: IO[str], exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    fcntl.flock(f.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)


def _unlock(f: IO[str]) -> None:
    fcntl.flock(f.fileno(), fcntl.LOCK_UN)


class CsvJobStore(JobStore):
    """Same twelve-column layout as the sheet, one CSV row per job."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def describe(self) -> str:
        return f"CSV file {self.path}"

    def _read_rows(self) -> list[list[str]]:
        if not self.path.exists():
            return []
        with open(self.path, "r", newline="", encoding="utf-8") as f:
            _lock(f, exclusive=False)
            try:
                return list(csv.reader(f))
            finally:
                _unlock(f)

    def read_all(self) -> list[ProcessedJob]:
        try:
            rows = self._read_rows()
        except OSError as exc:
            log.error("Error reading %s: %s", self.path, exc)
            raise StoreReadError(f"Failed to read jobs from {self.path}") from exc
        return rows_to_jobs(rows[1:])

    def ensure_headers(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # "a+" creates the file without truncating it; the size check happens under the lock.
            with open(self.path, "a+", newline="", encoding="utf-8") as f:
                _lock(f)
                try:
                    f.seek(0)
                    if f.read(1):
                        return
                    csv.writer(f).writerow(HEADERS)
                finally:
                    _unlock(f)
        except OSError as exc:
            log.error("Error initializing %s: %s", self.path, exc)
            raise StoreWriteError(f"Failed to initialize {self.path}") from exc
        log.info("Created job tracker → %s", self.path.name)

    def append(self, jobs: Sequence[ProcessedJob]) -> None:
        if not jobs:
            return
        rows = [job_to_row(job) for job in jobs]
        self.ensure_headers()
        try:
            with open(self.path, "a", newline="", encoding="utf-8") as f:
                _lock(f)
                try:
                    csv.writer(f).writerows(rows)
                finally:
                    _unlock(f)
        except OSError as exc:
            log.error("Error appending to %s: %s", self.path, exc)
            raise StoreWriteError(f"Failed to append jobs to {self.path}") from exc
        log.info("Added %d jobs to %s", len(rows), self.path.name)

    def update_status(self, identity: JobIdentity, new_status: str) -> None:
        check_status(new_status)
        try:
            with open(self.path, "r+", newline="", encoding="utf-8") as f:
                _lock(f)
                try:
                    rows = list(csv.reader(f))
                    for row in rows[1:]:
                        if row_matches(row, identity):
                            row[INDEX["status"]] = new_status
                            break
                    else:
                        raise RecordNotFoundError(identity)
                    f.seek(0)
                    f.truncate()
                    csv.writer(f).writerows(rows)
                finally:
                    _unlock(f)
        except FileNotFoundError as exc:
            raise RecordNotFoundError(identity) from exc
        except OSError as exc:
            log.error("Error updating %s: %s", self.path, exc)
            raise StoreWriteError(f"Failed to update job status in {self.path}") from exc
        log.debug("Updated %s @ %s → %s", identity.role, identity.company, new_status)

    def validate_connection(self) -> None:
        directory = self.path.parent
        if self.path.exists():
            ok = self.path.is_file()
        else:
            ok = not directory.exists() or directory.is_dir()
        if not ok:
            raise StoreReadError(f"{self.path} is not a usable file location")
