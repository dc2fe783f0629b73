from __future__ import annotations

from datetime import date

import pytest

from src.device_sync.device_sync.common.retry import RetryPolicy


@pytest.fixture
def no_retry() -> RetryPolicy:
    return RetryPolicy(attempts=1, base_delay=0, max_delay=0)


@pytest.fixture
def fixed_today() -> date:
    return date(2026, 2, 2)


@pytest.fixture
def testing_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
