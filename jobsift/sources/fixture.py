"""Offline job source for dry runs and demos."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from jobsift.log import get_logger
from jobsift.models import RawJob, ScrapeConfig
from jobsift.sources.base import JobSource, parse_raw_jobs

log = get_logger(__name__)

SAMPLE_ITEMS: list[dict[str, Any]] = [
    {
        "title": "Full Stack Engineer (React / Spring Boot)",
        "companyName": "Harbor Analytics",
        "location": "New York, NY (Hybrid)",
        "companyWebsite": "https://harbor-analytics.example",
        "applyUrl": "https://www.linkedin.com/jobs/view/100000001",
        "description": "Build customer dashboards in React and TypeScript backed by Java Spring Boot services.",
        "postedDate": "2025-06-30",
    },
    {
        "title": "Senior iOS Engineer",
        "companyName": "Pocketwise",
        "location": "Remote (US)",
        "companyWebsite": "https://pocketwise.example",
        "applyUrl": "https://www.linkedin.com/jobs/view/100000002",
        "description": "Swift, SwiftUI, Core Data. 6+ years of native iOS development required.",
        "postedDate": "2025-06-29",
    },
    {
        "title": "Frontend Developer, Next.js",
        "companyName": "Lumen Health",
        "location": "Brooklyn, NY",
        "applyUrl": "https://www.linkedin.com/jobs/view/100000003",
        "description": "Next.js, Tailwind CSS and REST integrations for a patient scheduling product.",
    },
    {
        "title": "Backend Engineer (Node.js)",
        "companyName": "Freightline",
        "location": "Remote",
        "companyWebsite": "https://freightline.example",
        "applyUrl": "https://www.linkedin.com/jobs/view/100000004",
        "description": "Node.js microservices, MongoDB, Docker and CI/CD pipelines.",
        "postedDate": "2025-06-28",
    },
]


class FixtureSource(JobSource):
    """Serves canned LinkedIn-shaped items through the same validation as the real actor."""

    source_name = "fixture"

    def __init__(self, items: Sequence[Any] | None = None) -> None:
        self.items = list(SAMPLE_ITEMS if items is None else items)

    @classmethod
    def from_file(cls, path: str | Path) -> "FixtureSource":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, list):
            raise ValueError(f"{path} must contain a JSON list of job items")
        return cls(data)

    def scrape(self, config: ScrapeConfig) -> list[RawJob]:
        log.info("FixtureSource serving %d sample item(s)", min(len(self.items), config.count))
        return parse_raw_jobs(self.items[: config.count])
