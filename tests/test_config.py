from __future__ import annotations

import pytest

from jobsift.config import DEFAULT_PROFILE_CONTEXT, DEFAULT_SEARCH_URL, Settings, load_settings
from jobsift.context import PipelineContext, open_store
from jobsift.csv_store import CsvJobStore
from jobsift.errors import ConfigError

ENV_KEYS = (
    "APIFY_API_KEY", "APIFY_ACTOR_ID", "OPENAI_API_KEY", "OPENAI_BASE_URL", "OPENAI_MODEL",
    "GOOGLE_SHEETS_SERVICE_ACCOUNT", "GOOGLE_SHEETS_SPREADSHEET_ID", "GOOGLE_SHEETS_WORKSHEET",
    "JOB_STORE", "JOB_STORE_CSV", "SCRAPE_TIMEOUT", "REQUEST_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_profile(tmp_path) -> None:
    settings = load_settings(tmp_path / "absent.yaml")
    assert settings.store_backend == "sheets"
    assert settings.search_urls == [DEFAULT_SEARCH_URL]
    assert settings.profile_context == DEFAULT_PROFILE_CONTEXT
    assert settings.apify_token == ""


def test_profile_values_and_env_overrides(tmp_path, monkeypatch) -> None:
    profile = tmp_path / "profile.yaml"
    profile.write_text(
        "store: csv\n"
        "search:\n  urls: https://www.linkedin.com/jobs/search/?keywords=rust\n  country_code: 4\n"
        "evaluator:\n  model: from-profile\n  temperature: 0.4\n"
        "pipeline:\n  eval_delay_seconds: 0\n"
        "context: I like Rust.\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("OPENAI_MODEL", "from-env")
    monkeypatch.setenv("APIFY_API_KEY", "  tok  ")
    monkeypatch.setenv("REQUEST_TIMEOUT", "15")

    settings = load_settings(profile)

    assert settings.store_backend == "csv"
    assert settings.search_urls == ["https://www.linkedin.com/jobs/search/?keywords=rust"]
    assert settings.country_code == 4
    assert settings.openai_model == "from-env"
    assert settings.temperature == 0.4
    assert settings.eval_delay == 0.0
    assert settings.profile_context == "I like Rust."
    assert settings.apify_token == "tok"
    assert settings.request_timeout == 15.0


def test_bad_values_raise_config_error(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("JOB_STORE", "postgres")
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "absent.yaml")

    monkeypatch.setenv("JOB_STORE", "csv")
    monkeypatch.setenv("SCRAPE_TIMEOUT", "soon")
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "absent.yaml")


def test_profile_must_be_a_mapping(tmp_path) -> None:
    profile = tmp_path / "profile.yaml"
    profile.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(profile)


def test_service_account_info() -> None:
    assert Settings(sheets_service_account='{"type": "service_account"}').service_account_info() == {
        "type": "service_account"
    }
    for raw in ("", "{broken", "[1, 2]"):
        with pytest.raises(ConfigError):
            Settings(sheets_service_account=raw).service_account_info()


def test_csv_backend_and_lazy_context(tmp_path) -> None:
    settings = Settings(store_backend="csv", csv_path=tmp_path / "jobs.csv")
    assert isinstance(open_store(settings), CsvJobStore)

    ctx = PipelineContext(settings, fixture=True)
    assert ctx.store is ctx.store
    assert ctx.source.source_name == "fixture"
    with pytest.raises(ConfigError):
        ctx.evaluator
