"""Structured logging: structlog events rendered through stdlib logging on stderr.

``configure_default_logging`` runs at package import, so library callers get
stdlib routing (and stdlib's WARNING last-resort handler on stderr) even when
they never call ``setup_logging``. The CLI calls ``setup_logging``.
"""

from __future__ import annotations

import logging
import logging.config
import os

import structlog

LOG_LEVEL_ENV = "GEIGER_REPORT_LOG_LEVEL"
LOG_FORMAT_ENV = "GEIGER_REPORT_LOG_FORMAT"


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def configure_default_logging() -> None:
    """Route structlog through stdlib logging unless the host app configured it."""
    if structlog.is_configured():
        return
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_pre_chain(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog and stdlib logging for the CLI.

    Explicit arguments win over the environment:
        GEIGER_REPORT_LOG_LEVEL: log level (default WARNING)
        GEIGER_REPORT_LOG_FORMAT: console or json (default console)

    Everything goes to stderr; stdout is reserved for the report document.
    """
    log_level = (level or os.environ.get(LOG_LEVEL_ENV, "WARNING")).upper()
    log_format = (fmt or os.environ.get(LOG_FORMAT_ENV, "console")).lower()

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    pre_chain = _pre_chain()
    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
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
                    "foreign_pre_chain": pre_chain,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "structlog",
                },
            },
            "root": {"handlers": ["stderr"], "level": log_level},
            "loggers": {"geiger_report": {"level": log_level}},
        }
    )
