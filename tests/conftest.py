"""Shared test fixtures for all tests."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from typer.testing import CliRunner

from daybrief.clock import FixedClock
from daybrief.models import ContentItem, ContentType
from daybrief.observability import EventLog
from daybrief.profile import UserBehaviorProfile

# Wednesday mid-morning: a weekday "standard" hour
NOW = datetime(2024, 1, 17, 10, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Keep config, database and event logs inside the test's temp dir."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    yield tmp_path


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def event_log(tmp_path, clock) -> EventLog:
    return EventLog(tmp_path / "events", clock=clock)


@pytest.fixture
def profile() -> UserBehaviorProfile:
    return UserBehaviorProfile()


@pytest.fixture
def make_item():
    """Factory for content items published ``hours_ago`` before NOW."""

    def _make(
        source_id: str = "source-a",
        content_type: ContentType = ContentType.ARTICLE,
        hours_ago: float = 1,
        title: str = "Test item",
        description: str = "A short description of the item.",
        **kwargs,
    ) -> ContentItem:
        return ContentItem(
            source_id=source_id,
            content_type=content_type,
            published_at=NOW - timedelta(hours=hours_ago),
            title=title,
            description=description,
            **kwargs,
        )

    return _make


@pytest.fixture
def test_db(tmp_path) -> Path:
    """Path for a throwaway database inside the test's temp dir."""
    return tmp_path / "data" / "test.db"


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()
