"""Job record store: the shared column layout and the backend interface.

Rows have twelve positional columns. ``COLUMNS`` is the only description of
that layout; the header row, the writer and the reader are all derived from
it so a written row always reads back into the same job.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Sequence

from jobsift.models import DEFAULT_STATUS, JOB_STATUSES, JobIdentity, ProcessedJob


@dataclass(frozen=True)
class Column:
    header: str
    attr: str | None = None
    constant: str = ""


COLUMNS: tuple[Column, ...] = (
    Column("Status", "status"),
    Column("Priority", constant="1"),
    Column("Fit", constant="1"),
    Column("Role", "role"),
    Column("Company", "company"),
    Column("Location", "location"),
    Column("Compensation"),
    Column("Company Website", "company_website"),
    Column("Job-Link", "job_link"),
    Column("Skills", "skills"),
    Column("Reason for match", "reason_for_match"),
    Column("Rating", "rating"),
)

HEADERS: list[str] = [c.header for c in COLUMNS]
WIDTH = len(COLUMNS)
INDEX: dict[str, int] = {c.attr: i for i, c in enumerate(COLUMNS) if c.attr}

# Rows the sheet template pre-fills with defaults but no job.
_PLACEHOLDER_PREFIX = ("", "6", "0")


def format_rating(rating: float) -> str:
    return str(int(rating)) if float(rating).is_integer() else repr(float(rating))


def parse_rating(text: str) -> float:
    try:
        return float(text)
    except (TypeError, ValueError):
        return 0.0


def job_to_row(job: ProcessedJob) -> list[str]:
    row: list[str] = []
    for column in COLUMNS:
        if column.attr is None:
            row.append(column.constant)
        elif column.attr == "rating":
            row.append(format_rating(job.rating))
        else:
            row.append(str(getattr(job, column.attr) or ""))
    return row


def _cell(row: Sequence[object], attr: str) -> str:
    idx = INDEX[attr]
    if idx >= len(row) or row[idx] is None:
        return ""
    return str(row[idx])


def row_to_job(row: Sequence[object]) -> ProcessedJob:
    return ProcessedJob(
        status=_cell(row, "status") or DEFAULT_STATUS,
        role=_cell(row, "role"),
        company=_cell(row, "company"),
        location=_cell(row, "location"),
        rating=parse_rating(_cell(row, "rating")),
        reason_for_match=_cell(row, "reason_for_match"),
        company_website=_cell(row, "company_website"),
        job_link=_cell(row, "job_link"),
        skills=_cell(row, "skills"),
    )


def _blank(cell: object) -> bool:
    return cell is None or str(cell).strip() == ""


def is_data_row(row: Sequence[object]) -> bool:
    if all(_blank(c) for c in row):
        return False
    if len(row) >= 3 and tuple(str(c) for c in row[:3]) == _PLACEHOLDER_PREFIX:
        return not all(_blank(c) for c in row[3:])
    return True


def rows_to_jobs(rows: Iterable[Sequence[object]]) -> list[ProcessedJob]:
    return [row_to_job(r) for r in rows if is_data_row(r)]


def row_matches(row: Sequence[object], identity: JobIdentity) -> bool:
    return (
        _cell(row, "company") == identity.company
        and _cell(row, "role") == identity.role
        and _cell(row, "job_link") == identity.job_link
    )


def is_duplicate(existing: Iterable[ProcessedJob], link: str | None) -> bool:
    """True if a stored job already has this application link.

    A posting without a link cannot be matched against anything and is never
    reported as a duplicate.
    """
    if not link:
        return False
    return any(job.job_link == link for job in existing)


def check_status(status: str) -> str:
    if status not in JOB_STATUSES:
        raise ValueError(f"Unknown job status {status!r}; expected one of {', '.join(JOB_STATUSES)}")
    return status


class JobStore(ABC):
    """Durable list of matched jobs, used for dedup and for the jobs table."""

    @abstractmethod
    def read_all(self) -> list[ProcessedJob]:
        """Every stored job in row order. Raises StoreReadError."""

    @abstractmethod
    def append(self, jobs: Sequence[ProcessedJob]) -> None:
        """Append all jobs in one batch. Raises StoreWriteError."""

    @abstractmethod
    def ensure_headers(self) -> None:
        """Write the header row if the store has none."""

    @abstractmethod
    def update_status(self, identity: JobIdentity, new_status: str) -> None:
        """Rewrite the status of the row matching identity. Raises RecordNotFoundError."""

    @abstractmethod
    def validate_connection(self) -> None:
        """Raise StoreReadError if the backend cannot be reached."""

    def describe(self) -> str:
        return self.__class__.__name__

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"{self.__class__.__name__}({self.describe()!r})"
