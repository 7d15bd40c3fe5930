"""
Structured logging configuration.

The client logs through structlog everywhere. Host applications that already
configure structlog can skip ``configure_logging``; everyone else calls it
once at startup.
"""

import logging
import sys
from typing import List

import structlog

from restclient.infrastructure.logging.sanitization import StructlogSanitizer

_configured = False


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    sanitize: bool = True,
    force: bool = False,
) -> None:
    """
    Configure structlog and the stdlib root handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        json_format: Render JSON lines instead of console output
        sanitize: Redact credentials from every event
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    processors: List = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if sanitize:
        processors.append(StructlogSanitizer())

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True
