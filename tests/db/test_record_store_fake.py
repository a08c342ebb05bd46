"""Tests for the in-memory DecisionRecordStore test double."""

from datetime import timedelta

import pytest

from pivot_workflow.core.exceptions import RecordStoreError
from pivot_workflow.db import DecisionRecordStore, InMemoryDecisionRecordStore
from pivot_workflow.schemas.decision_record import DecisionMode, DecisionRecord

pytestmark = pytest.mark.unit


def _record(record_id: str, offset_minutes: int) -> DecisionRecord:
    record = DecisionRecord.new("project-001", DecisionMode.DETAILED, record_id=record_id)
    return record.model_copy(update={"created_at": record.created_at + timedelta(minutes=offset_minutes)})


def test_satisfies_protocol():
    assert isinstance(InMemoryDecisionRecordStore(), DecisionRecordStore)


async def test_seeded_records_are_fetchable():
    store = InMemoryDecisionRecordStore([_record("a", 0), _record("b", 5)])

    fetched = await store.fetch_latest_open_decision("project-001")

    assert fetched.id == "b"
    assert store.fetch_calls == 1


async def test_upsert_merges_and_records_call():
    store = InMemoryDecisionRecordStore([_record("a", 0)])

    result = await store.upsert_decision("a", {"decision_rationale": "narrow scope"})

    assert result.ok is True
    assert store.upserts == [("a", {"decision_rationale": "narrow scope"})]
    assert store.get("a").decision_rationale == "narrow scope"
    assert store.get("a").mode == DecisionMode.DETAILED


async def test_failure_switches():
    store = InMemoryDecisionRecordStore()
    store.fail_loads = True
    store.fail_saves = True

    with pytest.raises(RecordStoreError):
        await store.fetch_latest_open_decision("project-001")

    result = await store.upsert_decision("a", {"project_id": "project-001"})
    assert result.ok is False
    assert result.reason == "simulated save failure"
    assert store.upserts == []


def test_get_unknown_is_none():
    assert InMemoryDecisionRecordStore().get("missing") is None
