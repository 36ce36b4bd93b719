"""Operations the UI and CLI call: start a run, poll it, read and update jobs."""
from __future__ import annotations

from typing import Any, Callable, Mapping

from jobsift.context import PipelineContext
from jobsift.errors import JobSiftError
from jobsift.log import get_logger
from jobsift.models import JobIdentity, JobStatus, PipelineOptions
from jobsift.pipeline import run_pipeline
from jobsift.runs import RunRegistry

log = get_logger(__name__)


class JobService:
    def __init__(
        self,
        context_factory: Callable[[], PipelineContext] = PipelineContext,
        registry: RunRegistry | None = None,
    ) -> None:
        self.context_factory = context_factory
        self.registry = registry or RunRegistry()
        self._context: PipelineContext | None = None

    @property
    def context(self) -> PipelineContext:
        if self._context is None:
            self._context = self.context_factory()
        return self._context

    def start_scrape(self, max_jobs: int = 100, skip_duplicates: bool = True, workers: int = 1) -> dict[str, Any]:
        """Start a run in the background; poll ``get_job_status`` for its outcome."""
        options = PipelineOptions(max_jobs=max_jobs, skip_duplicates=skip_duplicates, workers=workers)
        # A fresh context per run so a failed client build is retried next time.
        ctx = self.context_factory()

        def target(on_progress: Callable[[JobStatus], None]) -> None:
            run_pipeline(ctx, options, on_progress=on_progress)

        run_id = self.registry.start(target)
        return {"success": True, "jobId": run_id, "message": "Job scraping started successfully"}

    def get_jobs(self) -> dict[str, Any]:
        jobs = self.context.store.read_all()
        return {"success": True, "jobs": [job.to_dict() for job in jobs], "count": len(jobs)}

    def get_job_status(self, run_id: str | None = None) -> dict[str, Any]:
        status = self.registry.get(run_id) if run_id else self.registry.latest()
        return {"success": True, "status": status.to_dict()}

    def update_job_status(self, job_identifier: JobIdentity | Mapping[str, Any], new_status: str) -> dict[str, Any]:
        identity = job_identifier if isinstance(job_identifier, JobIdentity) else JobIdentity.from_dict(job_identifier)
        self.context.store.update_status(identity, new_status)
        return {"success": True, "message": f"Job status updated to {new_status}"}

    def validate_connections(self, fixture: bool | None = None) -> dict[str, Any]:
        """Check the store and the credentials a run started with ``fixture`` would need."""
        if fixture is None:
            fixture = self.context.fixture
        results: dict[str, Any] = {"store": False, "sheetsInitialized": False, "errors": []}
        try:
            store = self.context.store
            store.validate_connection()
            results["store"] = True
            store.ensure_headers()
            results["sheetsInitialized"] = True
        except JobSiftError as exc:
            log.warning("Store validation failed: %s", exc)
            results["errors"].append(f"Job store: {exc}")

        settings = self.context.settings
        if not fixture and not settings.apify_token:
            results["errors"].append("Apify: APIFY_API_KEY is not set")
        if not settings.openai_api_key:
            results["errors"].append("OpenAI: OPENAI_API_KEY is not set")

        return {"success": not results["errors"], "validationResults": results}

    def get_config(self) -> dict[str, Any]:
        settings = self.context.settings
        return {
            "success": True,
            "config": {
                "defaultSearchUrl": settings.search_urls[0] if settings.search_urls else "",
                "maxJobsPerRun": settings.max_jobs_per_run,
                "supportedSources": ["LinkedIn"],
                "store": settings.store_backend,
            },
        }

    def clear_job_status(self) -> dict[str, Any]:
        self.registry.clear()
        return {"success": True, "message": "Job status cleared"}
