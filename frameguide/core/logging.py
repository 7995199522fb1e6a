"""Structured logging for frameguide — structlog rendered through stdlib handlers."""

from __future__ import annotations

import logging
import logging.config
import os
import sys

import structlog

# Libraries that are chatty at INFO and say nothing useful about a run.
_QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(fmt: str) -> structlog.types.Processor:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Arguments win over the environment:
        FRAMEGUIDE_LOG_LEVEL  — log level (default: INFO)
        FRAMEGUIDE_LOG_FORMAT — console | json (default: console)

    Records go to stderr; stdout is left for the guidance text itself.
    Call once from the host process before running any engine.
    """
    log_level = (level or os.environ.get("FRAMEGUIDE_LOG_LEVEL", "INFO")).upper()
    log_format = (fmt or os.environ.get("FRAMEGUIDE_LOG_FORMAT", "console")).lower()
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    loggers: dict[str, dict[str, str]] = {"frameguide": {"level": log_level}}
    for name in _QUIET_LOGGERS:
        loggers[name] = {"level": "WARNING"}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "frameguide": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        _renderer(log_format),
                    ],
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "frameguide",
                },
            },
            "root": {"handlers": ["stderr"], "level": log_level},
            "loggers": loggers,
        }
    )
