"""InMemoryDecisionRecordStore: dict-backed test double for DecisionRecordStore.

Records are kept as plain field dicts, exactly as a remote store would hold
them, so every fetch round-trips through DecisionRecord.from_store().
Loads and saves can be made to fail to exercise the synchronizer's error paths.
"""

from typing import Any

from pivot_workflow.core.exceptions import RecordStoreError
from pivot_workflow.db.record_store import UpsertResult
from pivot_workflow.schemas.decision_record import DecisionRecord


class InMemoryDecisionRecordStore:
    """Deterministic DecisionRecordStore for tests and local development."""

    def __init__(self, records: list[DecisionRecord] | None = None):
        self.documents: dict[str, dict[str, Any]] = {}
        self.upserts: list[tuple[str, dict[str, Any]]] = []
        self.fetch_calls = 0
        self.fail_loads = False
        self.fail_saves = False
        for record in records or []:
            self.documents[record.id] = record.to_store_fields()

    async def fetch_latest_open_decision(self, project_id: str) -> DecisionRecord | None:
        self.fetch_calls += 1
        if self.fail_loads:
            raise RecordStoreError("fetch", "simulated load failure")

        candidates = [
            doc
            for doc in self.documents.values()
            if doc.get("project_id") == project_id and doc.get("completed_at") is None
        ]
        if not candidates:
            return None
        latest = max(candidates, key=lambda doc: DecisionRecord.from_store(doc).created_at)
        return DecisionRecord.from_store(latest)

    async def upsert_decision(self, record_id: str, fields: dict[str, Any]) -> UpsertResult:
        if self.fail_saves:
            return UpsertResult.failure("simulated save failure")

        self.upserts.append((record_id, dict(fields)))
        merged = {**self.documents.get(record_id, {}), **fields, "id": record_id}
        self.documents[record_id] = merged
        return UpsertResult.success()

    def get(self, record_id: str) -> DecisionRecord | None:
        doc = self.documents.get(record_id)
        return DecisionRecord.from_store(doc) if doc is not None else None
