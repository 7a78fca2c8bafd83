"""
Shared fixtures.

Every test that touches the database gets its own SQLite file under
pytest's tmp_path and a clock frozen at a known instant.
"""

from datetime import datetime, timezone

import pytest

from word_review_mcp.config import SchedulerConfig
from word_review_mcp.database.connection import get_db_path, init_database, set_db_path
from word_review_mcp.models.review_state import ReviewState
from word_review_mcp.services.clock import FixedClock
from word_review_mcp.services.reminders import ReminderService
from word_review_mcp.services.review_service import ReviewService

NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def db_path(tmp_path):
    previous = get_db_path()
    path = tmp_path / "reviews.db"
    init_database(path)
    yield path
    set_db_path(previous)


@pytest.fixture
def config(db_path):
    return SchedulerConfig(db_path=db_path)


@pytest.fixture
def service(config, clock):
    return ReviewService(clock=clock, config=config)


@pytest.fixture
def reminders(config, clock):
    return ReminderService(clock=clock, config=config)


@pytest.fixture
def make_state():
    """Build an in-memory ReviewState with sensible defaults."""

    def _make(**overrides) -> ReviewState:
        data = {
            "word_id": "w1",
            "user_id": "u1",
            "next_review_at": NOW,
        }
        data.update(overrides)
        return ReviewState(**data)

    return _make
