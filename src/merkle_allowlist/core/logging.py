"""
Merkle Allowlist Generator - Logging Configuration
"""

import logging
import sys

import structlog

from merkle_allowlist.core.config import settings


def setup_logging(level: str | None = None) -> None:
    """
    Configure structured logging.

    Log output goes to stderr so that stdout stays reserved for the
    progress messages printed by the CLI.
    """
    use_json = settings.ENV == "production"
    level_name = (level or settings.LOG_LEVEL).upper()

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level_name),
        force=True,
    )
