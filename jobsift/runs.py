"""In-memory registry of pipeline runs, polled by the UI.

Each run executes in its own daemon thread and publishes ``JobStatus``
snapshots under a run id. Only one run may be in flight at a time; a second
``start`` while one is running raises ``RunConflictError``.
"""
from __future__ import annotations

import threading
import time
import uuid
from collections import OrderedDict
from typing import Any, Callable

from jobsift.errors import RunConflictError, UnknownRunError
from jobsift.log import get_logger
from jobsift.models import JobStatus, Stage

log = get_logger(__name__)

RunTarget = Callable[[Callable[[JobStatus], None]], Any]

DEFAULT_TTL_SECONDS = 60 * 60
_MISSING = object()


def idle_status() -> JobStatus:
    return JobStatus(is_running=False, progress=0, stage=Stage.COMPLETED, message="No jobs running")


class RunRegistry:
    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._lock = threading.Lock()
        self._statuses: "OrderedDict[str, JobStatus]" = OrderedDict()
        self._finished_at: dict[str, float] = {}
        self._threads: dict[str, threading.Thread] = {}

    def _prune(self) -> None:
        now = self.clock()
        for run_id, finished in list(self._finished_at.items()):
            if now - finished >= self.ttl_seconds:
                self._statuses.pop(run_id, None)
                self._threads.pop(run_id, None)
                del self._finished_at[run_id]

    def _publish(self, run_id: str, status: JobStatus) -> None:
        status.run_id = run_id
        with self._lock:
            if run_id not in self._statuses:
                # Cleared while running; drop late updates.
                return
            self._statuses[run_id] = status
            if not status.is_running:
                self._finished_at.setdefault(run_id, self.clock())

    def _in_flight(self) -> str | None:
        # Caller holds the lock. A live thread counts even if its status was cleared.
        for run_id, status in self._statuses.items():
            if status.is_running:
                return run_id
        for run_id, thread in self._threads.items():
            if thread.is_alive():
                return run_id
        return None

    def running(self) -> str | None:
        with self._lock:
            return self._in_flight()

    def start(self, target: RunTarget, *, name: str = "pipeline") -> str:
        run_id = f"job_{uuid.uuid4().hex[:12]}"
        with self._lock:
            self._prune()
            if self._in_flight() is not None:
                raise RunConflictError("Job scraping is already in progress")
            self._statuses[run_id] = JobStatus(
                is_running=True,
                progress=0,
                stage=Stage.SCRAPING,
                message="Initializing job scraping...",
                jobs_found=0,
                jobs_matched=0,
                run_id=run_id,
            )

        thread = threading.Thread(target=self._execute, args=(run_id, target), name=f"{name}-{run_id}", daemon=True)
        with self._lock:
            self._threads[run_id] = thread
        thread.start()
        log.info("Started run %s", run_id)
        return run_id

    def _execute(self, run_id: str, target: RunTarget) -> None:
        try:
            target(lambda status: self._publish(run_id, status))
        except Exception as exc:  # noqa: BLE001 - surfaced through the status channel
            log.error("Run %s failed: %s", run_id, exc)
            current = self.get(run_id, default=None)
            if current is None or current.stage is not Stage.ERROR:
                self._publish(
                    run_id,
                    JobStatus(
                        is_running=False,
                        progress=0,
                        stage=Stage.ERROR,
                        message="Job processing failed",
                        error=str(exc) or exc.__class__.__name__,
                    ),
                )
            return

        current = self.get(run_id, default=None)
        if current is not None and current.is_running:
            # The target returned without a terminal snapshot.
            self._publish(
                run_id,
                JobStatus(
                    is_running=False,
                    progress=100,
                    stage=Stage.COMPLETED,
                    message="Completed!",
                    jobs_found=current.jobs_found,
                    jobs_matched=current.jobs_matched,
                ),
            )
        log.info("Run %s finished", run_id)

    def get(self, run_id: str, default: Any = _MISSING) -> JobStatus:
        with self._lock:
            self._prune()
            status = self._statuses.get(run_id)
        if status is None:
            if default is not _MISSING:
                return default
            raise UnknownRunError(f"No run with id {run_id!r}")
        return status

    def latest(self) -> JobStatus:
        with self._lock:
            self._prune()
            if not self._statuses:
                return idle_status()
            return next(reversed(self._statuses.values()))

    def wait(self, run_id: str, timeout: float | None = None) -> JobStatus:
        """Block until the run's thread ends; mainly for the CLI and tests."""
        with self._lock:
            thread = self._threads.get(run_id)
        if thread is not None:
            thread.join(timeout)
        return self.get(run_id)

    def clear(self) -> None:
        """Forget finished runs. A run still in flight keeps its status and thread."""
        with self._lock:
            active = self._in_flight()
            for run_id in list(self._statuses):
                if run_id != active:
                    del self._statuses[run_id]
            self._threads = {k: t for k, t in self._threads.items() if k == active}
            self._finished_at.clear()
        log.info("Cleared finished run statuses")
