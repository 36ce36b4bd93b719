"""Load profile and env configuration."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobsift.errors import ConfigError
from jobsift.log import get_logger
from jobsift.models import MAX_JOBS_PER_RUN

log = get_logger(__name__)

load_dotenv()

PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = PROJECT_ROOT / "config"
PROFILE_PATH: Path = CONFIG_DIR / "profile.yaml"
DATA_DIR: Path = PROJECT_ROOT / "data"

DEFAULT_ACTOR_ID = "hKByXkMQaC5Qt9UMN"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_WORKSHEET = "Job boards"
DEFAULT_SEARCH_URL = (
    "https://www.linkedin.com/jobs/search/?f_E=3%2C4&f_TPR=r86400&f_WT=1%2C2%2C3"
    "&geoId=105080838&keywords=software%20engineer&origin=JOB_SEARCH_PAGE_SEARCH_BUTTON&refresh=true"
)

DEFAULT_PROFILE_CONTEXT = """\
I'm looking for jobs. Your task is to filter them based on a list of attributes and skills that I have. \
Some jobs might not be relevant, which is why I want you to go through each of them and then let me know \
whether or not I'm an OK fit. Disregard my level of experience. Look more at the relevant technologies \
and if I have experience in them.

Below is a block of context about me and my skills:

## Professional Summary
Full-stack developer with 4+ years of professional experience building enterprise web applications.

## Core Technical Skills
- JavaScript/TypeScript, Java (Spring, Spring Boot), SQL, HTML/CSS
- React, Next.js, Tailwind CSS, server-side rendering
- Node.js, REST API design, third-party API integration, web scraping
- MongoDB, Supabase, cloud storage
- Git, Docker, CI/CD, agile delivery

## Ideal Job Fit
- Strong match: full-stack roles with TypeScript and Java, React/Next.js frontend roles,
  Spring or Node.js backend roles, REST API development, cloud-native applications.
- Consider: frontend-only React roles, backend-only Java roles, DevOps roles with Docker/CI-CD.
- Evaluate carefully: heavy native mobile work, data science/ML engineering, legacy stacks.

## Location & Work Preferences
- Based in New York, NY; open to remote and hybrid work.
"""


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _env_float(key: str, default: float) -> float:
    raw = get_env(key)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from exc


def load_profile(path: Path | None = None) -> dict[str, Any]:
    """Read the YAML profile; an absent file yields an empty mapping."""
    path = path or PROFILE_PATH
    if not path.exists():
        log.debug("No profile at %s, using built-in defaults", path)
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


@dataclass
class Settings:
    """Everything needed to build the store, scraper and evaluator.

    Nothing here talks to the network; collaborators are created from it on
    first use (see ``jobsift.context``).
    """

    apify_token: str = ""
    apify_actor_id: str = DEFAULT_ACTOR_ID
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_model: str = DEFAULT_MODEL
    temperature: float = 0.1
    sheets_service_account: str = ""
    spreadsheet_id: str = ""
    worksheet: str = DEFAULT_WORKSHEET
    store_backend: str = "sheets"
    csv_path: Path = field(default_factory=lambda: DATA_DIR / "jobs.csv")
    scrape_timeout: float = 900.0
    request_timeout: float = 60.0
    eval_delay: float = 0.1
    profile_context: str = DEFAULT_PROFILE_CONTEXT
    search_urls: list[str] = field(default_factory=lambda: [DEFAULT_SEARCH_URL])
    country_code: int = 10
    scrape_company: bool = True
    max_jobs_per_run: int = MAX_JOBS_PER_RUN

    def service_account_info(self) -> dict[str, Any]:
        if not self.sheets_service_account:
            raise ConfigError("GOOGLE_SHEETS_SERVICE_ACCOUNT is not set")
        try:
            info = json.loads(self.sheets_service_account)
        except json.JSONDecodeError as exc:
            raise ConfigError("Invalid GOOGLE_SHEETS_SERVICE_ACCOUNT JSON") from exc
        if not isinstance(info, dict):
            raise ConfigError("GOOGLE_SHEETS_SERVICE_ACCOUNT must be a JSON object")
        return info


def load_settings(profile_path: Path | None = None) -> Settings:
    profile = load_profile(profile_path)
    search = profile.get("search", {}) or {}
    evaluator = profile.get("evaluator", {}) or {}
    pipeline = profile.get("pipeline", {}) or {}

    backend = get_env("JOB_STORE", str(profile.get("store", "sheets"))).lower()
    if backend not in ("sheets", "csv"):
        raise ConfigError(f"JOB_STORE must be 'sheets' or 'csv', got {backend!r}")

    csv_path = get_env("JOB_STORE_CSV")
    urls = search.get("urls") or [DEFAULT_SEARCH_URL]
    if isinstance(urls, str):
        urls = [urls]

    return Settings(
        apify_token=get_env("APIFY_API_KEY"),
        apify_actor_id=get_env("APIFY_ACTOR_ID", search.get("actor_id", DEFAULT_ACTOR_ID)),
        openai_api_key=get_env("OPENAI_API_KEY"),
        openai_base_url=get_env("OPENAI_BASE_URL"),
        openai_model=get_env("OPENAI_MODEL", evaluator.get("model", DEFAULT_MODEL)),
        temperature=float(evaluator.get("temperature", 0.1)),
        sheets_service_account=get_env("GOOGLE_SHEETS_SERVICE_ACCOUNT"),
        spreadsheet_id=get_env("GOOGLE_SHEETS_SPREADSHEET_ID"),
        worksheet=get_env("GOOGLE_SHEETS_WORKSHEET", DEFAULT_WORKSHEET),
        store_backend=backend,
        csv_path=Path(csv_path) if csv_path else DATA_DIR / "jobs.csv",
        scrape_timeout=_env_float("SCRAPE_TIMEOUT", 900.0),
        request_timeout=_env_float("REQUEST_TIMEOUT", 60.0),
        eval_delay=float(pipeline.get("eval_delay_seconds", 0.1)),
        profile_context=str(profile.get("context") or DEFAULT_PROFILE_CONTEXT),
        search_urls=list(urls),
        country_code=int(search.get("country_code", 10)),
        scrape_company=bool(search.get("scrape_company", True)),
    )
