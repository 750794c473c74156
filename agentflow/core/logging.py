"""
Logging Configuration

Structured logging setup shared by the library and the CLI.
Supports JSON logging for production and human-readable console output
for development.
"""

import logging
import sys
from typing import Union

import structlog

from agentflow.config import LogFormat


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def configure_logging(
    level: Union[str, int] = "info",
    fmt: Union[LogFormat, str] = LogFormat.PRETTY,
) -> None:
    """
    Configure structlog on top of the standard library logger.

    Args:
        level: Minimum level name or number
        fmt: ``json`` for one JSON object per line, ``pretty`` for the
            console renderer
    """
    log_level = _resolve_level(level)
    fmt = LogFormat(fmt)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    if fmt == LogFormat.JSON:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
