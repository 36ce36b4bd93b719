"""Collaborators of a pipeline run, built on first use.

Tests and the UI hand in ready-made doubles; anything not supplied is created
from ``Settings`` the first time it is needed, so importing the package never
requires credentials.
"""
from __future__ import annotations

import threading
from typing import Any

from jobsift.config import Settings, load_settings
from jobsift.csv_store import CsvJobStore
from jobsift.evaluator import JobEvaluator, build_evaluator
from jobsift.log import get_logger
from jobsift.sources import JobSource, get_source
from jobsift.store import JobStore

log = get_logger(__name__)


def open_store(settings: Settings) -> JobStore:
    if settings.store_backend == "csv":
        return CsvJobStore(settings.csv_path)

    from jobsift.sheets import open_sheet_store

    return open_sheet_store(settings)


class PipelineContext:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        store: JobStore | None = None,
        source: JobSource | None = None,
        evaluator: JobEvaluator | Any | None = None,
        fixture: bool = False,
    ) -> None:
        self._settings = settings
        self._store = store
        self._source = source
        self._evaluator = evaluator
        self.fixture = fixture
        self._lock = threading.Lock()

    @property
    def settings(self) -> Settings:
        with self._lock:
            if self._settings is None:
                self._settings = load_settings()
            return self._settings

    @property
    def store(self) -> JobStore:
        settings = self.settings
        with self._lock:
            if self._store is None:
                self._store = open_store(settings)
                log.debug("Opened job store: %s", self._store.describe())
            return self._store

    @property
    def source(self) -> JobSource:
        settings = self.settings
        with self._lock:
            if self._source is None:
                self._source = get_source(settings, fixture=self.fixture)
            return self._source

    @property
    def evaluator(self) -> JobEvaluator:
        settings = self.settings
        with self._lock:
            if self._evaluator is None:
                self._evaluator = build_evaluator(settings)
            return self._evaluator
