"""Structured logging configuration using structlog.

pixelfit's library modules log through the standard ``logging`` module;
the CLI logs through structlog. Both end up on one handler whose
ProcessorFormatter runs the same processor chain, so every line carries
the bound operation context (operation_id, image_name and, inside the
size-targeting loop, attempt) in either console or JSON form.
"""

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import cast

import structlog
from structlog.contextvars import bound_contextvars
from structlog.types import Processor

from pixelfit.config import settings

_SHARED_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def build_formatter(log_format: str) -> structlog.stdlib.ProcessorFormatter:
    """Create the formatter that renders both stdlib and structlog records.

    Args:
        log_format: "json" for one JSON object per line, anything else for
            the colored console renderer.
    """
    if log_format == "json":
        renderers: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=True)]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *renderers,
        ],
    )


def configure_logging(
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """Configure structlog and the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to settings.LOG_LEVEL.
        log_format: Output format ("console" or "json").
                    Defaults to settings.LOG_FORMAT.
    """
    level = level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(log_format))

    # No-op when the root logger already has handlers
    logging.basicConfig(handlers=[handler], level=getattr(logging, level.upper()))
    logging.getLogger().setLevel(getattr(logging, level.upper()))


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name. If None, uses the calling module's name.

    Returns:
        A bound structlog logger instance.
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


@contextmanager
def operation_context(
    image_name: str | None = None,
    operation_id: str | None = None,
) -> Iterator[str]:
    """Bind an operation ID (and image name) for one resize or crop call.

    Previously bound values are restored on exit, including when the
    operation raises.

    Args:
        image_name: Optional name of the image being processed.
        operation_id: Explicit operation ID. A short random ID is generated
            when omitted.

    Yields:
        The operation ID in effect for the scope.
    """
    op_id = operation_id or uuid.uuid4().hex[:12]
    context = {"operation_id": op_id}
    if image_name is not None:
        context["image_name"] = image_name
    with bound_contextvars(**context):
        yield op_id
