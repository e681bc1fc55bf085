"""Logging configuration for runpod_media."""

from __future__ import annotations

import logging

import structlog


def configure_logging(level: int | str = "INFO", *, json: bool = True) -> None:
    """Configure stdlib logging and structlog.

    Library modules log through ``logging.getLogger(__name__)``; this is only
    needed by applications that want structured output.
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


__all__ = ["configure_logging"]
