"""Structured logging for a scan run — structlog events rendered through stdlib handlers."""

from __future__ import annotations

import logging
import logging.config

import structlog

# Third-party loggers that are chatty at INFO.
_QUIET_LOGGERS = ("httpx", "httpcore")

_RENDERERS: dict[str, structlog.types.Processor] = {
    "console": structlog.dev.ConsoleRenderer(colors=False),
    "json": structlog.processors.JSONRenderer(),
}


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]


def setup_logging(level: str = "INFO", fmt: str = "console", *, verbose: bool = False) -> None:
    """Route structlog and stdlib logging to stderr.

    *level* and *fmt* normally come from :class:`~graphrisk_scan.core.config.Settings`;
    *verbose* forces DEBUG. stdout is left to the reporter, which owns the
    run's user-facing messages and any workflow commands.
    """
    if fmt not in _RENDERERS:
        raise ValueError(f"unknown log format {fmt!r}")
    log_level = "DEBUG" if verbose else level.upper()
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    loggers = {name: {"level": "WARNING"} for name in _QUIET_LOGGERS}
    loggers["graphrisk_scan"] = {"level": log_level}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        _RENDERERS[fmt],
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
            "loggers": loggers,
        }
    )
