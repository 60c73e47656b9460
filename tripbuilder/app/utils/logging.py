"""Structured logging helpers."""

import logging
from typing import Any


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the service."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def log_event(
    logger: logging.Logger,
    event: str,
    message: str,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Log a domain event with structured data.

    Args:
        logger: Module logger
        event: Stable event name (e.g. "version_created")
        message: Human-readable message
        level: Logging level
        **fields: Structured context (ids, statuses, amounts)
    """
    log_data: dict[str, Any] = {"event": event}
    log_data.update({k: v for k, v in fields.items() if v is not None})
    logger.log(level, message, extra={"structured": log_data})
