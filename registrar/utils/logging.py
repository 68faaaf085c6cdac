# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Structured logging configuration using structlog.

The domain services log through the standard library (logging.getLogger),
while the API layer and the log notification channel use structlog loggers.
setup_logging() routes both through the same structlog processor chain, so
every line carries the bound request and enrollment-key context and is
rendered as JSON in production or as colored console output in development.

Example:
    >>> import logging
    >>> from registrar.utils.logging import setup_logging, bound_enrollment_key
    >>> from registrar.core.config import get_settings
    >>> setup_logging(get_settings())
    >>> with bound_enrollment_key("course-1", "semester-1"):
    ...     logging.getLogger("registrar.domains").info("Released seat")
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from registrar.core.config.settings import Settings

ENROLLMENT_KEY_FIELD = "enrollment_key"


def add_enrollment_key(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Collapse a bound course and semester into one enrollment_key field.

    Log lines from the same capacity hold can then be grouped by a single
    value. Events that name only one of the two ids are left as they are.
    """
    course_id = event_dict.get("course_id")
    semester_id = event_dict.get("semester_id")
    if course_id and semester_id and ENROLLMENT_KEY_FIELD not in event_dict:
        event_dict[ENROLLMENT_KEY_FIELD] = f"{course_id}/{semester_id}"
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        add_enrollment_key,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def setup_logging(settings: "Settings") -> None:
    """Configure structured logging for the application.

    Development gets colored console output, everything else JSON with
    rendered tracebacks. Standard library records pass through the same
    processors via structlog's ProcessorFormatter.

    Args:
        settings: Application settings containing log_level and debug flag.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    shared_processors = _shared_processors()

    renderer: Processor
    if settings.is_development or settings.debug:
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for logger_name in [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "sqlalchemy",
        "aiosqlite",
        "asyncio",
    ]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger("registrar").setLevel(log_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for the given module name."""
    return structlog.get_logger(name)


def bind_context(**kwargs: object) -> None:
    """Bind context variables to all subsequent log calls in this context.

    Used for request-scoped information like request_id and path.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables.

    Called at the end of request processing so context does not leak
    between requests.
    """
    structlog.contextvars.clear_contextvars()


@contextmanager
def bound_enrollment_key(course_id: str, semester_id: str) -> Iterator[None]:
    """Bind a (course, semester) key for the duration of the block.

    Values bound before the block are restored on exit, so nested holds on
    different keys log the right key.
    """
    with structlog.contextvars.bound_contextvars(
        course_id=course_id,
        semester_id=semester_id,
    ):
        yield
