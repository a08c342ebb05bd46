"""RedisDecisionRecordStore: decision records as JSON documents in Redis.

Key layout (prefix from settings.redis_key_prefix):
    {prefix}:decision:{id}                    JSON document with every record field
    {prefix}:project:{project_id}:decisions   sorted set of record ids scored by created_at

Fetch walks a project's set newest-first and returns the first document
without completed_at. Upsert merges the supplied fields into the stored
document; there is no version check, so the last writer wins.
"""

import json
from datetime import datetime
from typing import Any

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

from pivot_workflow.core.config import get_settings
from pivot_workflow.core.exceptions import RecordStoreError
from pivot_workflow.db.record_store import UpsertResult
from pivot_workflow.schemas.decision_record import DecisionRecord

logger = structlog.get_logger(__name__)


def create_redis_client(url: str | None = None) -> redis.Redis:
    """Build a decode_responses Redis client from settings (or an explicit URL)."""
    settings = get_settings()
    return redis.from_url(
        url or settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )


class RedisDecisionRecordStore:
    """DecisionRecordStore backed by a redis.asyncio client."""

    def __init__(self, redis_client: redis.Redis, key_prefix: str | None = None):
        self.redis = redis_client
        self.key_prefix = key_prefix or get_settings().redis_key_prefix

    def _record_key(self, record_id: str) -> str:
        return f"{self.key_prefix}:decision:{record_id}"

    def _project_key(self, project_id: str) -> str:
        return f"{self.key_prefix}:project:{project_id}:decisions"

    async def fetch_latest_open_decision(self, project_id: str) -> DecisionRecord | None:
        try:
            record_ids = await self.redis.zrevrange(self._project_key(project_id), 0, -1)
            for record_id in record_ids:
                raw = await self.redis.get(self._record_key(record_id))
                if raw is None:
                    continue
                data = json.loads(raw)
                if data.get("completed_at") is None:
                    return DecisionRecord.from_store(data)
        except RedisError as exc:
            logger.warning("decision_fetch_failed", project_id=project_id, error=str(exc))
            raise RecordStoreError("fetch", str(exc)) from exc
        return None

    async def upsert_decision(self, record_id: str, fields: dict[str, Any]) -> UpsertResult:
        record_key = self._record_key(record_id)
        try:
            raw = await self.redis.get(record_key)
            document = json.loads(raw) if raw is not None else {}
            document.update(fields)
            document["id"] = record_id

            project_id = document.get("project_id")
            if not project_id:
                return UpsertResult.failure("project_id is required to index a decision")

            created_at = document.get("created_at")
            score = datetime.fromisoformat(created_at).timestamp() if created_at else 0.0

            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.set(record_key, json.dumps(document))
                pipe.zadd(self._project_key(project_id), {record_id: score}, nx=True)
                await pipe.execute()
        except RedisError as exc:
            logger.warning("decision_upsert_failed", record_id=record_id, error=str(exc))
            return UpsertResult.failure(str(exc))

        return UpsertResult.success()
