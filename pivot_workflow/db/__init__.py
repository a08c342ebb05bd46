"""Decision record persistence: store protocol, in-memory fake and Redis backend."""

from pivot_workflow.db.record_store import DecisionRecordStore, UpsertResult
from pivot_workflow.db.record_store_fake import InMemoryDecisionRecordStore
from pivot_workflow.db.redis_store import RedisDecisionRecordStore, create_redis_client

__all__ = [
    "DecisionRecordStore",
    "InMemoryDecisionRecordStore",
    "RedisDecisionRecordStore",
    "UpsertResult",
    "create_redis_client",
]
