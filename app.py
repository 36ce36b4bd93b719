"""Streamlit UI for jobsift: start runs, watch their progress, triage matches."""
from __future__ import annotations

import time

import pandas as pd
import streamlit as st
from dotenv import dotenv_values, set_key

from jobsift.config import PROJECT_ROOT
from jobsift.context import PipelineContext
from jobsift.errors import JobSiftError, RecordNotFoundError, RunConflictError
from jobsift.log import get_logger
from jobsift.models import JOB_STATUSES, MAX_JOBS_PER_RUN, JobIdentity
from jobsift.service import JobService

log = get_logger(__name__)

POLL_SECONDS = 2

ENV_KEYS: list[tuple[str, str, bool]] = [
    ("APIFY_API_KEY", "Apify API token", True),
    ("APIFY_ACTOR_ID", "Apify actor ID", False),
    ("OPENAI_API_KEY", "OpenAI API key", True),
    ("OPENAI_BASE_URL", "OpenAI-compatible base URL (optional)", False),
    ("OPENAI_MODEL", "Model", False),
    ("GOOGLE_SHEETS_SPREADSHEET_ID", "Spreadsheet ID", False),
    ("GOOGLE_SHEETS_WORKSHEET", "Worksheet name", False),
    ("JOB_STORE", "Store backend (sheets or csv)", False),
]

_STAGE_ICONS = {
    "scraping": "🔎",
    "evaluating": "🤖",
    "saving": "💾",
    "completed": "✅",
    "error": "❌",
}

# ── Helpers ──────────────────────────────────────────────────────────────


@st.cache_resource
def _service() -> JobService:
    """One service (and run registry) per server process, shared by every session."""
    return JobService(lambda: PipelineContext(fixture=st.session_state.get("fixture", False)))


ENV_PATH = PROJECT_ROOT / ".env"


def _load_env() -> dict[str, str]:
    return {k: v or "" for k, v in dotenv_values(ENV_PATH).items()}


def _save_env(values: dict[str, str]) -> None:
    ENV_PATH.touch(exist_ok=True)
    for key, value in values.items():
        set_key(ENV_PATH, key, value, quote_mode="never")


# ── Page: Dashboard ──────────────────────────────────────────────────────


def _connection_banner(service: JobService) -> None:
    try:
        check = service.validate_connections(fixture=st.session_state.get("fixture", False))
    except JobSiftError as exc:
        st.error(f"Configuration problem: {exc}")
        return
    if not check["success"]:
        st.error("Some connections are not ready:\n\n" + "\n".join(f"- {e}" for e in check["validationResults"]["errors"]))


def _status_panel(service: JobService) -> bool:
    """Render the latest run status; return True while a run is in flight."""
    status = service.get_job_status()["status"]
    stage = status["stage"]

    st.subheader(f"{_STAGE_ICONS.get(stage, '')} {stage.capitalize()}")
    st.progress(min(int(status["progress"]), 100), text=status["message"])

    c1, c2 = st.columns(2)
    c1.metric("Jobs Found", status.get("jobsFound", 0))
    c2.metric("Jobs Matched", status.get("jobsMatched", 0))

    if stage == "error" and status.get("error"):
        st.error(status["error"])
    return bool(status["isRunning"])


def page_dashboard() -> None:
    st.header("Job Automation")
    service = _service()
    _connection_banner(service)

    with st.form("run"):
        c1, c2, c3 = st.columns(3)
        with c1:
            max_jobs = st.number_input("Max jobs", 1, MAX_JOBS_PER_RUN, 100)
        with c2:
            skip_duplicates = st.checkbox("Skip duplicates", value=True)
        with c3:
            st.checkbox("Use sample jobs", key="fixture", help="Offline sample postings instead of Apify")
        start = st.form_submit_button("Scrape Jobs", type="primary", use_container_width=True)

    if start:
        try:
            service.start_scrape(max_jobs=int(max_jobs), skip_duplicates=skip_duplicates)
            st.toast("Job scraping started")
        except RunConflictError as exc:
            st.toast(str(exc), icon="⚠️")
        except (JobSiftError, ValueError) as exc:
            st.toast(f"Could not start: {exc}", icon="❌")

    st.divider()
    if _status_panel(service):
        time.sleep(POLL_SECONDS)
        st.rerun()


# ── Page: Jobs ───────────────────────────────────────────────────────────


def page_jobs() -> None:
    st.header("Matched Jobs")
    service = _service()
    try:
        jobs = service.get_jobs()["jobs"]
    except JobSiftError as exc:
        st.error(f"Failed to load jobs: {exc}")
        return

    if not jobs:
        st.info("No jobs yet. Start a scrape from the **Dashboard**.")
        return

    df = pd.DataFrame(jobs)
    c1, c2, c3 = st.columns(3)
    c1.metric("Total", len(df))
    c2.metric("To Review", int((df["status"] == "To Review").sum()))
    c3.metric("Applied", int((df["status"] == "Applied").sum()))

    cols = ["status", "rating", "role", "company", "location", "skills", "reasonForMatch", "jobLink", "companyWebsite"]
    edited = st.data_editor(
        df[cols],
        key="jobs_table",
        use_container_width=True,
        hide_index=True,
        disabled=[c for c in cols if c != "status"],
        column_config={
            "status": st.column_config.SelectboxColumn("Status", options=list(JOB_STATUSES), required=True),
            "rating": st.column_config.ProgressColumn("Rating", min_value=0, max_value=10, format="%.0f"),
            "jobLink": st.column_config.LinkColumn("Apply Link"),
            "companyWebsite": st.column_config.LinkColumn("Website"),
            "reasonForMatch": "Reason for match",
        },
    )

    changed = edited["status"] != df["status"]
    for idx in edited.index[changed]:
        row = df.loc[idx]
        identity = JobIdentity(company=row["company"], role=row["role"], job_link=row["jobLink"])
        new_status = edited.loc[idx, "status"]
        try:
            service.update_job_status(identity, new_status)
            st.toast(f"{row['role']} → {new_status}")
        except RecordNotFoundError:
            st.toast("Job not found in the store; refresh the table.", icon="❌")
        except (JobSiftError, ValueError) as exc:
            st.toast(f"Failed to update status: {exc}", icon="❌")


# ── Page: Settings ───────────────────────────────────────────────────────


def page_settings() -> None:
    st.header("Settings")
    env = _load_env()
    service = _service()

    with st.form("creds"):
        values: dict[str, str] = {}
        for key, label, secret in ENV_KEYS:
            values[key] = st.text_input(label, value=env.get(key, ""), type="password" if secret else "default")
        account = st.text_area(
            "Google service account JSON",
            value=env.get("GOOGLE_SHEETS_SERVICE_ACCOUNT", ""),
            help="Paste the key file of a service account with edit access to the sheet.",
        )
        if st.form_submit_button("Save", type="primary", use_container_width=True):
            values["GOOGLE_SHEETS_SERVICE_ACCOUNT"] = " ".join(account.split())
            _save_env(values)
            st.success("Settings saved. Restart the app to apply them.")

    st.subheader("Run Status")
    st.json(service.get_job_status()["status"])
    if st.button("Clear run status"):
        service.clear_job_status()
        st.rerun()


pages = [
    st.Page(page_dashboard, title="Dashboard", icon="🚀", url_path="dashboard", default=True),
    st.Page(page_jobs, title="Jobs", icon="📋", url_path="jobs"),
    st.Page(page_settings, title="Settings", icon="⚙️", url_path="settings"),
]

nav = st.navigation(pages)
nav.run()
