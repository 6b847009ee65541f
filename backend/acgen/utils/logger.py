# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Structured Logging
JSON-formatted logs via structlog.

Context helpers bind fields for every entry logged inside them:
    job_context(job_id)         a background batch job
    variant_context(index, ...) one variant of a batch (worker thread)
asyncio.to_thread copies the caller's context, so a variant rendered in a
worker still carries the job_id bound by its job.
"""

import logging
import sys
from contextlib import AbstractContextManager
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from acgen.config import get_settings


def _add_app_info(
    logger: Any, method: str, event_dict: EventDict
) -> EventDict:
    """Inject application name into every log entry."""
    event_dict["app"] = "ac-gen"
    return event_dict


def _drop_color_message_key(
    logger: Any, method: str, event_dict: EventDict
) -> EventDict:
    """Remove uvicorn's color_message to keep logs clean."""
    event_dict.pop("color_message", None)
    return event_dict


def configure_logging() -> None:
    """
    Configure structlog for JSON output in production and
    human-readable console output in development (DEBUG level).
    Called once at application startup.
    """
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_app_info,
        _drop_color_message_key,
    ]

    if settings.log_level == "DEBUG":
        processors: list[Processor] = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True)
        ]
    else:
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stdout),
        cache_logger_on_first_use=True,
    )

    # stdlib passthrough for uvicorn/fastapi
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def get_logger(name: str = "ac-gen") -> structlog.BoundLogger:
    """
    Return a structlog bound logger.

    Usage:
        log = get_logger(__name__)
        log.info("variant_rendered", file_name=name, layers=len(layers))
    """
    return structlog.get_logger(name)


def job_context(job_id: str) -> AbstractContextManager:
    """Bind job_id for the duration of a batch job."""
    return structlog.contextvars.bound_contextvars(job_id=job_id)


def variant_context(
    index: int,
    product_id: str,
    energy_level: Optional[str] = None,
    capacity_code: Optional[str] = None,
) -> AbstractContextManager:
    """Bind the variant's 1-based batch index and its key fields."""
    return structlog.contextvars.bound_contextvars(
        variant_index=index,
        product_id=product_id,
        energy_level=energy_level,
        capacity_code=capacity_code,
    )
