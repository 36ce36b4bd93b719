from __future__ import annotations

import json

import pytest

from jobsift import cli
from jobsift.config import Settings
from jobsift.context import PipelineContext
from jobsift.csv_store import CsvJobStore
from fakes import StubEvaluator, evaluation, processed


@pytest.fixture
def csv_env(tmp_path, monkeypatch):
    path = tmp_path / "jobs.csv"
    monkeypatch.setenv("JOB_STORE", "csv")
    monkeypatch.setenv("JOB_STORE_CSV", str(path))
    return path


def test_jobs_lists_stored_rows_as_json(csv_env, capsys) -> None:
    CsvJobStore(csv_env).append([processed(1), processed(2)])

    assert cli.main(["jobs", "--json"]) == 0

    jobs = json.loads(capsys.readouterr().out)
    assert [j["jobLink"] for j in jobs] == ["https://jobs.example/1", "https://jobs.example/2"]


def test_set_status_updates_row(csv_env) -> None:
    CsvJobStore(csv_env).append([processed(1)])

    code = cli.main(["set-status", "Company 1", "Engineer 1", "https://jobs.example/1", "Interview"])

    assert code == 0
    assert CsvJobStore(csv_env).read_all()[0].status == "Interview"


def test_set_status_of_missing_job_exits_nonzero(csv_env) -> None:
    assert cli.main(["set-status", "Nobody", "Nothing", "https://x.example", "Applied"]) == 1


def test_run_with_fixture_source_saves_matches(csv_env, monkeypatch) -> None:
    def context(fixture: bool = False) -> PipelineContext:
        settings = Settings(store_backend="csv", csv_path=csv_env, eval_delay=0.0)
        return PipelineContext(settings, evaluator=StubEvaluator(default=evaluation("true", 6)), fixture=fixture)

    monkeypatch.setattr(cli, "PipelineContext", context)

    assert cli.main(["run", "--fixture", "--max-jobs", "2"]) == 0
    assert len(CsvJobStore(csv_env).read_all()) == 2


@pytest.mark.parametrize("value", ["0", "201"])
def test_max_jobs_out_of_range_is_a_usage_error(value) -> None:
    with pytest.raises(SystemExit):
        cli.parse_args(["run", "--max-jobs", value])
