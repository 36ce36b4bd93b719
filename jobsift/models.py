"""Data models for scraped postings, evaluations, stored jobs and run status."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_STATUS = "To Review"
JOB_STATUSES: tuple[str, ...] = ("To Review", "Applied", "Interview", "Rejected", "Not Relevant")
MAX_JOBS_PER_RUN = 200


class RawJob(BaseModel):
    """One posting as returned by the scraping actor."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    title: str
    company_name: str = Field(alias="companyName")
    location: str
    company_website: Optional[str] = Field(default=None, alias="companyWebsite")
    apply_url: Optional[str] = Field(default=None, alias="applyUrl")
    description: Optional[str] = None
    posted_date: Optional[str] = Field(default=None, alias="postedDate")

    def to_json(self) -> str:
        """Serialise with the actor's field names, as shown to the evaluator."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


class JobEvaluation(BaseModel):
    """The evaluator's judgement of one posting.

    The model is asked for ``"verdict": "true" | "false"`` as strings; the
    verdict is turned into ``is_fit`` here so nothing downstream compares
    against string literals.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    is_fit: bool = Field(alias="verdict")
    reason: str
    company_name: str = Field(alias="companyName")
    rating: int = Field(ge=1, le=10)
    skills: str

    @field_validator("is_fit", mode="before")
    @classmethod
    def _parse_verdict(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            text = value.strip().lower()
            if text in ("true", "false"):
                return text == "true"
        raise ValueError(f"verdict must be 'true' or 'false', got {value!r}")


@dataclass(frozen=True)
class JobIdentity:
    """Identifies a stored row for status updates."""

    company: str
    role: str
    job_link: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobIdentity":
        return cls(
            company=str(data.get("company", "")),
            role=str(data.get("role", "")),
            job_link=str(data.get("jobLink", data.get("job_link", ""))),
        )


@dataclass
class ProcessedJob:
    role: str
    company: str
    location: str
    rating: float
    reason_for_match: str
    company_website: str
    job_link: str
    skills: str
    status: str = DEFAULT_STATUS

    @classmethod
    def from_evaluation(cls, raw: RawJob, evaluation: JobEvaluation) -> "ProcessedJob":
        return cls(
            role=raw.title,
            company=raw.company_name,
            location=raw.location,
            rating=float(evaluation.rating),
            reason_for_match=evaluation.reason,
            company_website=raw.company_website or "",
            job_link=raw.apply_url or "",
            skills=evaluation.skills,
        )

    @property
    def identity(self) -> JobIdentity:
        return JobIdentity(company=self.company, role=self.role, job_link=self.job_link)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "role": self.role,
            "company": self.company,
            "location": self.location,
            "rating": self.rating,
            "reasonForMatch": self.reason_for_match,
            "companyWebsite": self.company_website,
            "jobLink": self.job_link,
            "skills": self.skills,
        }


class Stage(str, Enum):
    SCRAPING = "scraping"
    EVALUATING = "evaluating"
    SAVING = "saving"
    COMPLETED = "completed"
    ERROR = "error"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class JobStatus:
    """Progress snapshot of one pipeline run. Replaced, never mutated."""

    is_running: bool
    progress: float
    stage: Stage
    message: str
    jobs_found: int | None = None
    jobs_matched: int | None = None
    error: str | None = None
    run_id: str | None = None
    updated_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        self.progress = max(0.0, min(100.0, float(self.progress)))
        self.stage = Stage(self.stage)

    @property
    def is_terminal(self) -> bool:
        return self.stage in (Stage.COMPLETED, Stage.ERROR) and not self.is_running

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "isRunning": self.is_running,
            "progress": round(self.progress, 1),
            "stage": self.stage.value,
            "message": self.message,
        }
        if self.jobs_found is not None:
            data["jobsFound"] = self.jobs_found
        if self.jobs_matched is not None:
            data["jobsMatched"] = self.jobs_matched
        if self.error is not None:
            data["error"] = self.error
        if self.run_id is not None:
            data["runId"] = self.run_id
        data["updatedAt"] = self.updated_at.isoformat()
        return data


class ScrapeConfig(BaseModel):
    """Input of the LinkedIn scraping actor."""

    model_config = ConfigDict(populate_by_name=True)

    count: int = Field(default=100, ge=1)
    country_code: int = Field(default=10, alias="countryCode")
    scrape_company: bool = Field(default=True, alias="scrapeCompany")
    urls: list[str] = Field(min_length=1)

    @field_validator("urls")
    @classmethod
    def _check_urls(cls, urls: list[str]) -> list[str]:
        for url in urls:
            parsed = urlparse(url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ValueError(f"not an http(s) URL: {url!r}")
        return urls

    def to_actor_input(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass
class PipelineOptions:
    max_jobs: int = 100
    skip_duplicates: bool = True
    workers: int = 1

    def __post_init__(self) -> None:
        if not 1 <= self.max_jobs <= MAX_JOBS_PER_RUN:
            raise ValueError(f"max_jobs must be between 1 and {MAX_JOBS_PER_RUN}, got {self.max_jobs}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
