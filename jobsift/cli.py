"""Command line interface for jobsift."""
from __future__ import annotations

import argparse
import json
import logging
import sys

from jobsift.context import PipelineContext
from jobsift.errors import JobSiftError
from jobsift.log import get_logger, set_level
from jobsift.models import JOB_STATUSES, MAX_JOBS_PER_RUN, JobIdentity, JobStatus, PipelineOptions
from jobsift.pipeline import run_pipeline
from jobsift.service import JobService

log = get_logger("jobsift.cli")


def _print_progress(status: JobStatus) -> None:
    counts = ""
    if status.jobs_found is not None:
        counts = f"  found={status.jobs_found} matched={status.jobs_matched or 0}"
    log.info("[%5.1f%%] %-10s %s%s", status.progress, status.stage.value, status.message, counts)


def cmd_run(args: argparse.Namespace) -> int:
    ctx = PipelineContext(fixture=args.fixture)
    options = PipelineOptions(max_jobs=args.max_jobs, skip_duplicates=args.skip_duplicates, workers=args.workers)
    result = run_pipeline(ctx, options, on_progress=_print_progress)
    for job in result.matches:
        log.info("  %s at %s (%s) rating=%g  %s", job.role, job.company, job.location, job.rating, job.job_link)
    return 0


def cmd_jobs(args: argparse.Namespace) -> int:
    data = JobService().get_jobs()
    if args.json:
        print(json.dumps(data["jobs"], indent=2))
        return 0
    for job in data["jobs"]:
        print(f"{job['status']:<13} {job['rating']:>4g}  {job['role']} @ {job['company']}  {job['jobLink']}")
    log.info("%d job(s) stored", data["count"])
    return 0


def cmd_set_status(args: argparse.Namespace) -> int:
    JobService().update_job_status(JobIdentity(args.company, args.role, args.link), args.status)
    log.info("Updated %s @ %s → %s", args.role, args.company, args.status)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    data = JobService(lambda: PipelineContext(fixture=args.fixture)).validate_connections()
    for error in data["validationResults"]["errors"]:
        log.error("%s", error)
    if data["success"]:
        log.info("All connections OK")
    return 0 if data["success"] else 1


def _max_jobs(value: str) -> int:
    n = int(value)
    if not 1 <= n <= MAX_JOBS_PER_RUN:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_JOBS_PER_RUN}")
    return n


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scrape LinkedIn jobs, filter them with an LLM and track matches.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging output")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run the scrape → evaluate → save pipeline in the foreground")
    run.add_argument("--max-jobs", type=_max_jobs, default=100, help="Maximum number of jobs to scrape")
    run.add_argument(
        "--no-skip-duplicates", dest="skip_duplicates", action="store_false",
        help="Evaluate postings even if their link is already stored",
    )
    run.add_argument("--workers", type=int, default=1, help="Concurrent evaluator calls")
    run.add_argument("--fixture", action="store_true", help="Use bundled sample postings instead of Apify")
    run.set_defaults(func=cmd_run)

    jobs = sub.add_parser("jobs", help="List stored jobs")
    jobs.add_argument("--json", action="store_true", help="Print jobs as JSON")
    jobs.set_defaults(func=cmd_jobs)

    status = sub.add_parser("set-status", help="Change the workflow status of a stored job")
    status.add_argument("company")
    status.add_argument("role")
    status.add_argument("link")
    status.add_argument("status", choices=JOB_STATUSES)
    status.set_defaults(func=cmd_set_status)

    validate = sub.add_parser("validate", help="Check credentials and store connectivity")
    validate.add_argument("--fixture", action="store_true", help="Do not require Apify credentials")
    validate.set_defaults(func=cmd_validate)

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.verbose:
        set_level(logging.DEBUG)
    try:
        return args.func(args)
    except (JobSiftError, ValueError) as exc:
        log.error("%s", exc)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
