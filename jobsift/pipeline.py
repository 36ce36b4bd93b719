"""
Job pipeline.

Runs: ensure headers → load existing links → scrape → evaluate each posting →
save matches → report completion. Progress snapshots are pushed to an
optional callback at every stage boundary.
"""
from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Sequence

from jobsift.context import PipelineContext
from jobsift.log import get_logger
from jobsift.models import JobEvaluation, JobStatus, PipelineOptions, ProcessedJob, RawJob, Stage
from jobsift.sources import default_scrape_config
from jobsift.store import is_duplicate

log = get_logger(__name__)

ProgressCallback = Callable[[JobStatus], None]

SCRAPE_PROGRESS = 10
EVAL_START = 30
EVAL_END = 80
SAVE_PROGRESS = 85


@dataclass
class PipelineResult:
    matches: list[ProcessedJob] = field(default_factory=list)
    jobs_found: int = 0
    evaluated: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def jobs_matched(self) -> int:
        return len(self.matches)


def _safe_evaluate(ctx: PipelineContext, job: RawJob) -> JobEvaluation | None:
    try:
        return ctx.evaluator.evaluate(job)
    except Exception as exc:  # noqa: BLE001 - one posting must not sink the batch
        log.error("Evaluator raised for %s at %s: %s", job.title, job.company_name, exc)
        return None


def _select_candidates(
    raw_jobs: Sequence[RawJob], existing: Sequence[ProcessedJob], skip_duplicates: bool
) -> tuple[list[tuple[int, RawJob]], int]:
    """Postings that need an evaluation, with their scrape positions, and the skip count.

    A posting is skipped when its link is already stored or appeared earlier
    in the same batch.
    """
    if not skip_duplicates:
        return list(enumerate(raw_jobs)), 0

    seen: set[str] = set()
    candidates: list[tuple[int, RawJob]] = []
    skipped = 0
    for index, job in enumerate(raw_jobs):
        link = job.apply_url
        if is_duplicate(existing, link) or (link and link in seen):
            log.info("Skipping duplicate job: %s at %s", job.title, job.company_name)
            skipped += 1
            continue
        if link:
            seen.add(link)
        candidates.append((index, job))
    return candidates, skipped


def run_pipeline(
    ctx: PipelineContext,
    options: PipelineOptions | None = None,
    on_progress: ProgressCallback | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> PipelineResult:
    options = options or PipelineOptions()
    result = PipelineResult()

    def emit(stage: Stage, progress: float, message: str, *, running: bool = True, **extra) -> None:
        if on_progress is None:
            return
        on_progress(
            JobStatus(
                is_running=running,
                progress=progress,
                stage=stage,
                message=message,
                jobs_found=extra.get("jobs_found", result.jobs_found),
                jobs_matched=extra.get("jobs_matched", result.jobs_matched),
                error=extra.get("error"),
            )
        )

    try:
        store = ctx.store
        store.ensure_headers()
        existing = store.read_all() if options.skip_duplicates else []
        log.info("Loaded %d existing job(s) for duplicate checks", len(existing))

        emit(Stage.SCRAPING, SCRAPE_PROGRESS, "Scraping jobs from LinkedIn...")
        raw_jobs = ctx.source.scrape(default_scrape_config(ctx.settings, options.max_jobs))
        result.jobs_found = len(raw_jobs)

        emit(Stage.EVALUATING, EVAL_START, "Evaluating job matches with AI...")
        candidates, result.skipped = _select_candidates(raw_jobs, existing, options.skip_duplicates)
        delay = ctx.settings.eval_delay

        if options.workers > 1 and len(candidates) > 1:
            evaluations = _evaluate_parallel(ctx, candidates, options.workers, delay, sleep, result, emit)
        else:
            evaluations = _evaluate_sequential(ctx, candidates, len(raw_jobs), delay, sleep, result, emit)

        for index, job in candidates:
            evaluation = evaluations.get(index)
            if evaluation is not None and evaluation.is_fit:
                result.matches.append(ProcessedJob.from_evaluation(job, evaluation))

        emit(Stage.SAVING, SAVE_PROGRESS, "Saving matching jobs...")
        if result.matches:
            store.append(result.matches)

        emit(
            Stage.COMPLETED,
            100,
            f"Completed! Found {result.jobs_matched} matching jobs.",
            running=False,
        )
    except Exception as exc:
        log.error("Error in job processing pipeline: %s", exc)
        emit(Stage.ERROR, 0, "Job processing failed", running=False, error=str(exc))
        raise

    log.info(
        "Run complete: found=%d, skipped=%d, evaluated=%d, failed=%d, matched=%d",
        result.jobs_found, result.skipped, result.evaluated, result.failed, result.jobs_matched,
    )
    return result


def _evaluate_sequential(ctx, candidates, total, delay, sleep, result, emit) -> dict[int, JobEvaluation | None]:
    evaluations: dict[int, JobEvaluation | None] = {}
    matched = 0
    for index, job in candidates:
        if result.evaluated and delay > 0:
            sleep(delay)
        evaluation = _safe_evaluate(ctx, job)
        result.evaluated += 1
        evaluations[index] = evaluation
        if evaluation is None:
            result.failed += 1
        elif evaluation.is_fit:
            matched += 1

        emit(
            Stage.EVALUATING,
            EVAL_START + (index + 1) / total * (EVAL_END - EVAL_START),
            f"Evaluated {index + 1}/{total} jobs...",
            jobs_matched=matched,
        )
    return evaluations


def _evaluate_parallel(ctx, candidates, workers, delay, sleep, result, emit) -> dict[int, JobEvaluation | None]:
    """Bounded fan-out; results are keyed by scrape position so match order is unchanged."""

    def paced(job: RawJob) -> JobEvaluation | None:
        evaluation = _safe_evaluate(ctx, job)
        if delay > 0:
            sleep(delay)
        return evaluation

    evaluations: dict[int, JobEvaluation | None] = {}
    matched = 0
    log.info("Evaluating %d job(s) with %d workers", len(candidates), workers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {pool.submit(paced, job): index for index, job in candidates}
        for done, future in enumerate(as_completed(futures), 1):
            evaluation = future.result()
            evaluations[futures[future]] = evaluation
            result.evaluated += 1
            if evaluation is None:
                result.failed += 1
            elif evaluation.is_fit:
                matched += 1
            emit(
                Stage.EVALUATING,
                EVAL_START + done / len(candidates) * (EVAL_END - EVAL_START),
                f"Evaluated {done}/{len(candidates)} jobs...",
                jobs_matched=matched,
            )
    return evaluations
