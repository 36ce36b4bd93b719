"""LinkedIn jobs via an Apify scraping actor.

The actor is started through the Apify REST API, waited on until its run
finishes, and its default dataset is downloaded. Docs:
https://docs.apify.com/api/v2
"""
from __future__ import annotations

import time
from typing import Any, Callable

import requests

from jobsift.errors import ScrapeError
from jobsift.log import get_logger
from jobsift.models import RawJob, ScrapeConfig
from jobsift.retry import is_client_error, retry
from jobsift.sources.base import JobSource, parse_raw_jobs

log = get_logger(__name__)

API_BASE = "https://api.apify.com/v2"
# Longest wait the API honours for one waitForFinish request.
MAX_WAIT_SECONDS = 60
SUCCEEDED = "SUCCEEDED"
FAILED_STATUSES = frozenset({"FAILED", "ABORTED", "TIMED-OUT"})

_http_retry = retry(
    max_attempts=3,
    base_delay=2.0,
    retryable=(requests.RequestException, OSError),
    give_up=is_client_error,
)


class ApifyLinkedInSource(JobSource):
    source_name = "linkedin"

    def __init__(
        self,
        token: str,
        actor_id: str,
        *,
        session: requests.Session | None = None,
        request_timeout: float = 60.0,
        run_timeout: float = 900.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.token = token
        self.actor_id = actor_id
        self.session = session or requests.Session()
        self.request_timeout = request_timeout
        self.run_timeout = run_timeout
        self.clock = clock

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    @_http_retry
    def _post(self, path: str, payload: dict[str, Any], params: dict[str, Any]) -> Any:
        r = self.session.post(
            f"{API_BASE}{path}",
            json=payload,
            params=params,
            headers=self._headers(),
            # waitForFinish holds the connection open on the server side.
            timeout=self.request_timeout + MAX_WAIT_SECONDS,
        )
        r.raise_for_status()
        return r.json()

    @_http_retry
    def _get(self, path: str, params: dict[str, Any]) -> Any:
        r = self.session.get(
            f"{API_BASE}{path}",
            params=params,
            headers=self._headers(),
            timeout=self.request_timeout + MAX_WAIT_SECONDS,
        )
        r.raise_for_status()
        return r.json()

    def _wait_for_run(self, run: dict[str, Any]) -> dict[str, Any]:
        deadline = self.clock() + self.run_timeout
        while run.get("status") not in FAILED_STATUSES | {SUCCEEDED}:
            remaining = deadline - self.clock()
            if remaining <= 0:
                raise ScrapeError(
                    f"Apify run {run.get('id')} still {run.get('status')} after {self.run_timeout:.0f}s"
                )
            wait = max(1, min(MAX_WAIT_SECONDS, int(remaining)))
            log.debug("Apify run %s is %s, waiting up to %ds", run.get("id"), run.get("status"), wait)
            run = self._get(f"/actor-runs/{run['id']}", {"waitForFinish": wait})["data"]
        return run

    def run_actor(self, config: ScrapeConfig) -> list[Any]:
        """Start the actor, block until its run ends, return the raw dataset items."""
        run = self._post(
            f"/acts/{self.actor_id}/runs",
            config.to_actor_input(),
            {"waitForFinish": MAX_WAIT_SECONDS},
        )["data"]
        log.info("Started Apify actor %s (run %s)", self.actor_id, run.get("id"))

        run = self._wait_for_run(run)
        if run.get("status") != SUCCEEDED:
            raise ScrapeError(f"Apify run {run.get('id')} ended with status {run.get('status')}")

        items = self._get(
            f"/datasets/{run['defaultDatasetId']}/items",
            {"clean": "true", "format": "json"},
        )
        if not isinstance(items, list):
            raise ScrapeError(f"Unexpected Apify dataset payload: {type(items).__name__}")
        return items

    def scrape(self, config: ScrapeConfig) -> list[RawJob]:
        log.info("Starting job scraping with Apify (%d job(s), %d search URL(s))", config.count, len(config.urls))
        try:
            items = self.run_actor(config)
        except ScrapeError:
            raise
        except (requests.RequestException, OSError, KeyError, TypeError, ValueError) as exc:
            log.error("Error scraping jobs with Apify: %s", exc)
            raise ScrapeError(f"Failed to scrape jobs from LinkedIn: {exc}") from exc

        log.info("Scraped %d jobs from LinkedIn", len(items))
        return parse_raw_jobs(items)
