from __future__ import annotations

import pytest
import requests

from jobsift.errors import ConfigError, RecordNotFoundError, StoreReadError, StoreWriteError
from jobsift.models import JobIdentity
from jobsift.sheets import GoogleSheetStore, open_sheet_store
from jobsift.store import HEADERS, job_to_row
from fakes import FakeResponse, FakeWorksheet, make_settings, processed


def _sheet(*jobs) -> FakeWorksheet:
    return FakeWorksheet([HEADERS, *(job_to_row(j) for j in jobs)])


def test_read_all_skips_placeholder_rows() -> None:
    ws = _sheet(processed(1))
    ws.rows.append(["", "6", "0", "", "", "", "", "", "", "", "", ""])
    ws.rows.append(job_to_row(processed(2)))

    jobs = GoogleSheetStore(ws).read_all()

    assert [j.job_link for j in jobs] == ["https://jobs.example/1", "https://jobs.example/2"]


def test_read_error_is_retried_then_raised_as_store_read_error(no_sleep) -> None:
    ws = _sheet(processed(1))
    ws.read_error = requests.ConnectionError("unreachable")

    with pytest.raises(StoreReadError):
        GoogleSheetStore(ws).read_all()

    assert ws.reads == 3
    assert len(no_sleep) == 2


def test_permanent_read_error_is_not_retried() -> None:
    ws = _sheet()
    ws.read_error = requests.HTTPError("403", response=FakeResponse({}, status_code=403))

    with pytest.raises(StoreReadError):
        GoogleSheetStore(ws).read_all()

    assert ws.reads == 1


def test_append_writes_all_rows_in_one_call() -> None:
    ws = _sheet()
    store = GoogleSheetStore(ws)

    store.append([processed(1, rating=8), processed(2, rating=9)])

    assert len(ws.append_calls) == 1
    assert [row[-1] for row in ws.append_calls[0]] == ["8", "9"]
    assert [j.rating for j in store.read_all()] == [8.0, 9.0]


def test_append_of_nothing_makes_no_call() -> None:
    ws = _sheet()
    GoogleSheetStore(ws).append([])
    assert ws.append_calls == []


def test_append_failure_is_not_retried() -> None:
    ws = _sheet()
    ws.write_error = requests.ConnectionError("reset")

    with pytest.raises(StoreWriteError):
        GoogleSheetStore(ws).append([processed(1)])

    assert ws.append_calls == []


def test_ensure_headers_writes_header_row_only_when_missing() -> None:
    empty = FakeWorksheet()
    GoogleSheetStore(empty).ensure_headers()
    assert empty.update_calls == [("A1:L1", [HEADERS])]

    filled = _sheet()
    GoogleSheetStore(filled).ensure_headers()
    assert filled.update_calls == []


def test_update_status_targets_the_matching_sheet_row() -> None:
    ws = _sheet(processed(1), processed(2), processed(3))

    GoogleSheetStore(ws).update_status(processed(3).identity, "Interview")

    # header is row 1, so the third job sits on row 4; status is column A
    assert ws.cell_updates == [(4, 1, "Interview")]
    assert ws.rows[3][0] == "Interview"


def test_update_status_requires_all_three_identity_fields() -> None:
    ws = _sheet(processed(1))

    with pytest.raises(RecordNotFoundError) as info:
        GoogleSheetStore(ws).update_status(JobIdentity("Company 1", "Engineer 1", "https://jobs.example/9"), "Applied")

    assert info.value.identity.job_link == "https://jobs.example/9"
    assert ws.cell_updates == []


def test_update_status_rejects_unknown_status_before_touching_sheet() -> None:
    ws = _sheet(processed(1))
    with pytest.raises(ValueError):
        GoogleSheetStore(ws).update_status(processed(1).identity, "Maybe")
    assert ws.reads == 0


def test_validate_connection() -> None:
    ws = _sheet()
    GoogleSheetStore(ws).validate_connection()

    ws.read_error = requests.ConnectionError("down")
    with pytest.raises(StoreReadError):
        GoogleSheetStore(ws).validate_connection()


def test_open_sheet_store_requires_configuration() -> None:
    with pytest.raises(ConfigError):
        open_sheet_store(make_settings(spreadsheet_id=""))
    with pytest.raises(ConfigError):
        open_sheet_store(make_settings(spreadsheet_id="abc", sheets_service_account="not json"))
