"""Shared fixtures for Task Watch tests."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from taskwatch.models import TaskRecord
from taskwatch.services.timezone import TimezoneService, reset_timezone_service

TZ_NAME = "Asia/Jakarta"


@pytest.fixture(autouse=True)
def _fresh_timezone_singleton():
    reset_timezone_service()
    yield
    reset_timezone_service()


@pytest.fixture
def tz() -> TimezoneService:
    """Configured zone used across tests (UTC+7, no DST)."""
    return TimezoneService(TZ_NAME)


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation instant: 18 Oct 2026, 09:00 in Jakarta."""
    return datetime(2026, 10, 18, 9, 0, tzinfo=ZoneInfo(TZ_NAME))


@pytest.fixture
def make_task(now):
    """Build a TaskRecord due `days` from `now` (None for no due date)."""

    def _make(task_id: str, title: str | None = None, days: float | None = None) -> TaskRecord:
        due = None if days is None else now + timedelta(days=days)
        return TaskRecord(id=task_id, title=title or f"Task {task_id.upper()}", due=due)

    return _make
