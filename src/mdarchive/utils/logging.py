"""Structured logging setup for mdarchive."""

import os
from pathlib import Path
from typing import Any, Optional

import structlog

VALID_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure structlog for JSON logging to ~/.cache/mdarchive/logs/mdarchive.log.

    Log level can be passed explicitly (the CLI does for --verbose) or
    controlled via the MDARCHIVE_LOG_LEVEL environment variable:
    - Set to "DEBUG" to see every parsed/rewritten target and resolved date label
    - Defaults to "INFO" if not set

    Log levels:
    - DEBUG: Line counts, resolved archive sections, date tree paths
    - INFO: Archived/deleted task counts, sorted and converted lists
    - WARNING: Skipped operations (nothing under cursor, unparsable front matter)
    - ERROR: Failed writes, invalid configuration

    Example:
        MDARCHIVE_LOG_LEVEL=DEBUG mdarchive archive notes.md

        # View logs with jq for readability:
        tail -f ~/.cache/mdarchive/logs/mdarchive.log | jq .
    """
    log_dir = Path.home() / ".cache" / "mdarchive" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "mdarchive.log"

    log_level = (level or os.environ.get("MDARCHIVE_LOG_LEVEL", "INFO")).upper()
    if log_level not in VALID_LEVELS:
        log_level = "INFO"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=open(log_file, "a")),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Returns:
        Structured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("tasks_archived", count=3, target="notes.md")
    """
    return structlog.get_logger(name)
