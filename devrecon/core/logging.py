"""Logging for the devrecon CLI — structlog rendered through stdlib logging."""

from __future__ import annotations

import logging
import logging.config
import os
import sys

import structlog


def _level(verbose: bool) -> str:
    if verbose:
        return "DEBUG"
    return os.environ.get("DEVRECON_LOG_LEVEL", "WARNING").upper()


def setup_logging(verbose: bool = False) -> None:
    """Configure structlog and stdlib logging for one CLI run.

    Environment:
        DEVRECON_LOG_LEVEL  — level name (default WARNING; ``-v`` forces DEBUG)
        DEVRECON_LOG_FORMAT — console | json (default console)

    Records go to stderr so ``--json`` output on stdout stays parseable.
    """
    log_level = _level(verbose)
    if os.environ.get("DEVRECON_LOG_FORMAT", "console").lower() == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    pre_chain: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "devrecon": {
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
                    "formatter": "devrecon",
                },
            },
            "loggers": {
                "devrecon": {
                    "handlers": ["stderr"],
                    "level": log_level,
                    "propagate": False,
                },
            },
        }
    )
