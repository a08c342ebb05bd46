"""Pivot Workflow Engine: process entry point.

Hosts call setup_logging() once at startup, then open one
redis_workflow_session() per founder session.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog

from pivot_workflow.core.config import Settings, get_settings
from pivot_workflow.core.logging import configure_structlog, workflow_log_context
from pivot_workflow.db.redis_store import RedisDecisionRecordStore, create_redis_client
from pivot_workflow.services.workflow import PivotWorkflowSession

logger = structlog.get_logger(__name__)


def setup_logging(settings: Settings | None = None) -> None:
    """Configure structlog from settings. Debug mode switches to console output."""
    settings = settings or get_settings()
    configure_structlog(
        log_level="DEBUG" if settings.debug else settings.log_level,
        json_logs=settings.json_logs and not settings.debug,
        service=settings.app_name,
    )


@asynccontextmanager
async def redis_workflow_session(
    project_id: str | None = None,
    settings: Settings | None = None,
) -> AsyncIterator[PivotWorkflowSession]:
    """Session backed by Redis, with the client closed on exit.

    When project_id is given the session is opened before it is yielded;
    check session.view().load_error for the outcome.
    """
    settings = settings or get_settings()
    client = create_redis_client(settings.redis_url)
    await client.ping()
    logger.info("redis_initialized", key_prefix=settings.redis_key_prefix)

    try:
        record_store = RedisDecisionRecordStore(client, key_prefix=settings.redis_key_prefix)
        async with PivotWorkflowSession(record_store, settings=settings) as session:
            with workflow_log_context(session.session_id, project_id):
                if project_id is not None:
                    await session.open(project_id)
                yield session
    finally:
        await client.aclose()
