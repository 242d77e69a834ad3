"""Structured logging configuration: structlog on top of stdlib logging."""

from __future__ import annotations

import logging
import logging.config

import structlog

from ninja_to_soong.core.config import get_settings


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog and stdlib logging.

    Defaults come from the environment:
        N2S_LOG_LEVEL  - log level (default: INFO)
        N2S_LOG_FORMAT - console | json (default: console)

    Logs go to stderr so generated output written to stdout stays clean.
    """
    settings = get_settings()
    log_level = (level or settings.log_level).upper()
    log_format = (fmt or settings.log_format).lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared_processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "structlog",
                },
            },
            "root": {
                "handlers": ["default"],
                "level": "WARNING",
            },
            "loggers": {
                "ninja_to_soong": {"level": log_level},
            },
        }
    )
