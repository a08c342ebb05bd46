"""DecisionRecordStore Protocol: the abstraction over remote decision persistence.

The workflow engine only ever needs two operations from the backing store:
- fetch_latest_open_decision: newest record for a project with no completed_at
- upsert_decision: persist a record's fields keyed by its id

Implementations:
- InMemoryDecisionRecordStore (record_store_fake.py): deterministic test double
- RedisDecisionRecordStore (redis_store.py): JSON documents in Redis
"""

from dataclasses import dataclass
from typing import Any, Protocol, Self, runtime_checkable

from pivot_workflow.schemas.decision_record import DecisionRecord


@dataclass(frozen=True)
class UpsertResult:
    """Outcome of a write. Failures carry a reason instead of raising."""

    ok: bool
    reason: str | None = None

    @classmethod
    def success(cls) -> Self:
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: str) -> Self:
        return cls(ok=False, reason=reason)


@runtime_checkable
class DecisionRecordStore(Protocol):
    """Protocol for the opaque key-value store holding decision records."""

    async def fetch_latest_open_decision(self, project_id: str) -> DecisionRecord | None:
        """Return the most recently created record for the project with no completion timestamp.

        Args:
            project_id: Project the decision cycle belongs to

        Returns:
            The open record, or None when the project has no open decision

        Raises:
            RecordStoreError: If the store cannot be read
        """
        ...

    async def upsert_decision(self, record_id: str, fields: dict[str, Any]) -> UpsertResult:
        """Persist the given fields for a record, creating it if needed.

        Args:
            record_id: Record identity key
            fields: JSON-safe field mapping (DecisionRecord.to_store_fields())

        Returns:
            UpsertResult.success() or UpsertResult.failure(reason)
        """
        ...
