"""structlog setup for the workflow engine.

Every entry carries the service name, and anything bound through
workflow_log_context() (workflow_session_id, project_id) is merged in from
contextvars. Stdlib records from redis and asyncio go through the same
renderer, capped at WARNING.
"""

import logging
import logging.config
from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from structlog.types import Processor

QUIET_LOGGERS = ("asyncio", "redis")


def _service_name_adder(service: str) -> Processor:
    def add_service(logger, method_name, event_dict):
        event_dict.setdefault("service", service)
        return event_dict

    return add_service


def configure_structlog(
    log_level: str = "INFO",
    json_logs: bool = True,
    service: str = "pivot-workflow",
) -> None:
    """Route structlog and stdlib logging through one renderer.

    Must run before the first log call; loggers cache their processor chain.

    Args:
        log_level: Root log level
        json_logs: JSON lines when True, ConsoleRenderer otherwise
        service: Value of the "service" key on every entry
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        _service_name_adder(service),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
                "foreign_pre_chain": shared_processors,
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["stdout"], "level": log_level},
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    })

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def workflow_log_context(workflow_session_id: str, project_id: str | None = None) -> Iterator[None]:
    """Bind session identifiers to every log entry emitted inside the block."""
    bound = {"workflow_session_id": workflow_session_id}
    if project_id is not None:
        bound["project_id"] = project_id
    with structlog.contextvars.bound_contextvars(**bound):
        yield
