"""
structlog configuration.

orderkit only calls structlog.get_logger(); host applications that already
configure structlog need nothing from here.
"""

from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(*, json: bool = False, level: str = "INFO") -> None:
    """Route orderkit's structlog events through stdlib logging."""
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level.upper())

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.contextvars.merge_contextvars,
    ]

    if json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


__all__ = ("setup_logging",)
