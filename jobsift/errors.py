"""Exception taxonomy shared by the store, scraper and pipeline."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from jobsift.models import JobIdentity


class JobSiftError(Exception):
    """Base class for every error raised on purpose by this package."""


class ConfigError(JobSiftError):
    """A collaborator cannot be built from the current configuration."""


class StoreError(JobSiftError):
    pass


class StoreReadError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass


class RecordNotFoundError(StoreError):
    """No stored row matches a (company, role, job link) identity."""

    def __init__(self, identity: "JobIdentity") -> None:
        self.identity = identity
        super().__init__(
            f"Job not found: {identity.role!r} at {identity.company!r} ({identity.job_link or 'no link'})"
        )


class ScrapeError(JobSiftError):
    """The scraping actor could not be run or its dataset fetched."""


class RunConflictError(JobSiftError):
    """A pipeline run is already in progress."""


class UnknownRunError(JobSiftError):
    pass
