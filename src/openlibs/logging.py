"""openlibs: structured logging configuration.

Uses structlog on top of stdlib logging. Library code only calls
``get_logger(__name__)``; the embedding host calls ``configure_logging`` once
if it wants output. Until then events are routed through stdlib logging, so
they follow the host's logging setup (by default only warnings and above
reach stderr) and never land on stdout.

Script-visible text (``print``, ``io.write``) never goes through here; it
uses the interpreter state's output sink.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def _route_to_stdlib() -> None:
    """Send events to stdlib logging unless the host already configured structlog."""
    if structlog.is_configured():
        return
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        # configure_logging may replace this later; loggers must pick that up
        cache_logger_on_first_use=False,
    )


def configure_logging(level: str = "info", format: str = "console") -> None:
    """Configure structlog and stdlib logging.

    Args:
        level:  One of debug, info, warning, error, critical.
        format: ``"console"`` for human-readable output, ``"json"`` for
                machine-readable structured logs.
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level.upper())


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger for *name*.

    Usage::

        log = get_logger(__name__)
        log.debug("library_installed", module="table", position=3)
    """
    return structlog.stdlib.get_logger(name)


_route_to_stdlib()
