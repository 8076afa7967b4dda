"""Logging setup for hosts that embed the totals engine."""

import logging
from typing import Union

import structlog


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure structlog with JSON rendering and ISO timestamps.

    Args:
        level: Minimum level, as a stdlib level number or name ("DEBUG").
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )
