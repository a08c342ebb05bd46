"""Shared test fixtures for all test groups."""

from datetime import UTC, datetime, timedelta

import pytest

from pivot_workflow.core.config import Settings
from pivot_workflow.db.record_store_fake import InMemoryDecisionRecordStore
from pivot_workflow.schemas.decision_record import DecisionMode, DecisionRecord
from pivot_workflow.services.decision_store import DecisionStore

START = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock; every read returns the same instant until advanced."""

    def __init__(self, start: datetime = START):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1.0) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    """Empty DecisionStore on the fake clock."""
    return DecisionStore(clock=clock)


@pytest.fixture
def easy_store(store):
    """DecisionStore holding a fresh easy-mode record."""
    store.start_decision("project-001", DecisionMode.EASY, record_id="decision-001")
    return store


@pytest.fixture
def detailed_store(store):
    """DecisionStore holding a fresh detailed-mode record."""
    store.start_decision("project-001", DecisionMode.DETAILED, record_id="decision-001")
    return store


@pytest.fixture
def record_store():
    return InMemoryDecisionRecordStore()


@pytest.fixture
def fast_settings():
    """Settings with a short autosave window so debounce tests run quickly."""
    return Settings(autosave_debounce_seconds=0.02, default_confidence_level=50)


@pytest.fixture
def open_record():
    return DecisionRecord.new(
        project_id="project-001",
        mode=DecisionMode.DETAILED,
        record_id="decision-open",
        now=START - timedelta(days=1),
    )
