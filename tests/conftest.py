from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Retry backoff must not slow the suite down."""
    delays: list[float] = []
    monkeypatch.setattr("jobsift.retry.time.sleep", delays.append)
    return delays
