"""Shared structlog/stdlib logging bootstrap for the API process."""

import logging
import logging.config
import os

import structlog
from structlog.dev import ConsoleRenderer

_CONFIGURED = False

# Shared processors used by both structlog and the stdlib logging bridge.
SHARED_PROCESSORS: list = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _is_local_environment() -> bool:
    """Check if running in local development environment."""
    env = os.environ.get("ENVIRONMENT", "").lower()
    return env in ("", "local", "development", "dev")


def configure_logging(log_level: str) -> None:
    """Configure structured logging with environment-appropriate format.

    - Local/development: Human-readable console output with colors
    - Production: JSON output for log aggregation
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    structlog.configure(
        processors=[
            *SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if _is_local_environment():
        renderer = ConsoleRenderer(colors=True, pad_event=40)
    else:
        renderer = structlog.processors.JSONRenderer()

    # Route ALL stdlib loggers (uvicorn, httpx, openai, ...) through structlog
    # so every log line has the same shape.
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                    "foreign_pre_chain": SHARED_PROCESSORS,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "structured",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {
                "handlers": ["default"],
                "level": log_level,
            },
            "loggers": {
                "uvicorn.access": {"level": "INFO"},
                "uvicorn.error": {"level": "INFO"},
                "httpx": {"level": "WARNING"},
                "httpcore": {"level": "WARNING"},
            },
        }
    )

    _CONFIGURED = True
