"""Tests for the shared column layout and the CSV job store."""
from __future__ import annotations

import csv

import pytest

from jobsift.csv_store import CsvJobStore
from jobsift.errors import RecordNotFoundError
from jobsift.models import JobIdentity
from jobsift.store import (
    HEADERS,
    WIDTH,
    format_rating,
    is_data_row,
    is_duplicate,
    job_to_row,
    row_to_job,
    rows_to_jobs,
)
from fakes import processed


def test_layout_has_twelve_columns_with_matching_headers() -> None:
    assert WIDTH == 12
    assert len(HEADERS) == 12
    assert len(job_to_row(processed(1))) == 12


def test_written_row_uses_documented_positions() -> None:
    row = job_to_row(processed(1, rating=8))
    assert row == [
        "To Review", "1", "1",
        "Engineer 1", "Company 1", "Remote", "",
        "https://company1.example", "https://jobs.example/1",
        "React, Java", "Good stack overlap.", "8",
    ]


@pytest.mark.parametrize("rating", [1, 8, 10, 7.5])
def test_row_round_trip_preserves_every_field(rating) -> None:
    job = processed(2, rating=rating, status="Interview")
    assert row_to_job(job_to_row(job)) == job


def test_rating_text_and_bad_cells() -> None:
    assert format_rating(9.0) == "9"
    assert format_rating(6.5) == "6.5"
    assert row_to_job(["", "1", "1", "Role", "Co", "NYC", "", "", "link", "", "", "n/a"]).rating == 0.0


def test_short_rows_are_padded_on_read() -> None:
    job = row_to_job(["Applied", "1", "1", "Role", "Co"])
    assert (job.status, job.role, job.company, job.job_link, job.rating) == ("Applied", "Role", "Co", "", 0.0)


def test_blank_and_placeholder_rows_are_skipped() -> None:
    rows = [
        [],
        ["", "", ""],
        ["", "6", "0"],
        ["", "6", "0", "", "  "],
        ["", "6", "0", "Role", "Co"],
        job_to_row(processed(1)),
    ]
    assert [is_data_row(r) for r in rows] == [False, False, False, False, True, True]
    assert [j.role for j in rows_to_jobs(rows)] == ["Role", "Engineer 1"]


def test_is_duplicate_is_exact_match_on_link() -> None:
    existing = [processed(1), processed(2)]

    assert is_duplicate(existing, "https://jobs.example/2")
    assert not is_duplicate(existing, "https://jobs.example/2/")
    assert not is_duplicate(existing, "HTTPS://JOBS.EXAMPLE/2")
    assert not is_duplicate([], "https://jobs.example/2")
    # pure: asking twice gives the same answer and leaves the input alone
    assert is_duplicate(existing, "https://jobs.example/1") == is_duplicate(existing, "https://jobs.example/1")
    assert [j.job_link for j in existing] == ["https://jobs.example/1", "https://jobs.example/2"]


def test_missing_link_is_never_a_duplicate() -> None:
    existing = [processed(1, job_link="")]
    assert not is_duplicate(existing, "")
    assert not is_duplicate(existing, None)


def test_csv_store_round_trip(tmp_path) -> None:
    store = CsvJobStore(tmp_path / "data" / "jobs.csv")
    jobs = [processed(1, rating=8), processed(2, rating=9.5), processed(3, rating=1)]

    assert store.read_all() == []
    store.ensure_headers()
    store.append(jobs)

    assert store.read_all() == jobs


def test_csv_headers_are_written_once(tmp_path) -> None:
    path = tmp_path / "jobs.csv"
    store = CsvJobStore(path)

    store.ensure_headers()
    store.append([processed(1)])
    store.ensure_headers()

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == HEADERS
    assert len(rows) == 2


def test_csv_existing_headers_are_not_overwritten(tmp_path) -> None:
    path = tmp_path / "jobs.csv"
    path.write_text("Custom,Header\n", encoding="utf-8")

    CsvJobStore(path).ensure_headers()

    assert path.read_text(encoding="utf-8") == "Custom,Header\n"


def test_csv_append_of_nothing_creates_nothing(tmp_path) -> None:
    path = tmp_path / "jobs.csv"
    CsvJobStore(path).append([])
    assert not path.exists()


def test_csv_update_status_rewrites_only_matching_row(tmp_path) -> None:
    store = CsvJobStore(tmp_path / "jobs.csv")
    store.append([processed(1), processed(2), processed(3)])

    store.update_status(JobIdentity("Company 2", "Engineer 2", "https://jobs.example/2"), "Applied")

    assert [j.status for j in store.read_all()] == ["To Review", "Applied", "To Review"]


def test_csv_update_status_unknown_identity_raises(tmp_path) -> None:
    store = CsvJobStore(tmp_path / "jobs.csv")
    store.append([processed(1)])
    before = (tmp_path / "jobs.csv").read_text(encoding="utf-8")

    with pytest.raises(RecordNotFoundError):
        # right company and link, wrong role
        store.update_status(JobIdentity("Company 1", "Engineer 9", "https://jobs.example/1"), "Applied")

    assert (tmp_path / "jobs.csv").read_text(encoding="utf-8") == before


def test_csv_update_status_without_file_raises_not_found(tmp_path) -> None:
    with pytest.raises(RecordNotFoundError):
        CsvJobStore(tmp_path / "missing.csv").update_status(JobIdentity("a", "b", "c"), "Applied")


def test_unknown_status_value_is_rejected(tmp_path) -> None:
    store = CsvJobStore(tmp_path / "jobs.csv")
    store.append([processed(1)])
    with pytest.raises(ValueError):
        store.update_status(processed(1).identity, "Ghosted")
