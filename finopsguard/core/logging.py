"""Structured logging setup."""

import logging

import structlog

from finopsguard.core.config import Settings


def configure_logging(settings: Settings) -> None:
    """
    Configure stdlib logging and structlog processors.

    JSON output is used when LOG_JSON is enabled (production log shipping),
    a colored console renderer otherwise.
    """
    level = getattr(logging, settings.LOG_LEVEL, logging.INFO)
    logging.basicConfig(level=level, format="%(message)s")

    renderer: structlog.types.Processor
    if settings.LOG_JSON:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
