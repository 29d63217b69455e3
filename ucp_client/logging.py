from __future__ import annotations

"""Structured logging helpers built on ``structlog``."""

import logging
import sys

import structlog

logger = structlog.get_logger("ucp_client")


def configure_logging(level: int | str = logging.INFO) -> None:
    """Render client events to stderr as JSON lines with ISO UTC timestamps.

    Raises ``ValueError`` for an unknown level name.
    """
    if isinstance(level, str):
        name = level.upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name}")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(key="timestamp", fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        # resolve stderr per logger so redirected streams are honoured
        logger_factory=lambda *args: structlog.PrintLogger(sys.stderr),
        cache_logger_on_first_use=False,
    )


__all__ = ["logger", "configure_logging"]
