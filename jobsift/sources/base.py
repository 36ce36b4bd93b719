from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable

from pydantic import ValidationError

from jobsift.log import get_logger
from jobsift.models import RawJob, ScrapeConfig

log = get_logger(__name__)


class JobSource(ABC):
    source_name: str = "generic"

    @abstractmethod
    def scrape(self, config: ScrapeConfig) -> list[RawJob]:
        """Run the scrape and return the well-formed postings in source order."""


def parse_raw_jobs(items: Iterable[Any]) -> list[RawJob]:
    """Validate each scraped item on its own; malformed ones are logged and dropped."""
    jobs: list[RawJob] = []
    dropped = 0
    for position, item in enumerate(items):
        try:
            jobs.append(RawJob.model_validate(item))
        except ValidationError as exc:
            dropped += 1
            log.warning(
                "Skipping invalid job data at position %d (%d error(s)): %s",
                position,
                exc.error_count(),
                "; ".join(f"{'.'.join(map(str, e['loc'])) or 'item'}: {e['msg']}" for e in exc.errors()),
            )
    if dropped:
        log.info("Dropped %d malformed item(s), kept %d", dropped, len(jobs))
    return jobs
