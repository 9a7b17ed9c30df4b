"""
Structured Logging

structlog renders every record, including those emitted through the standard
library by uvicorn and SQLAlchemy, so the service writes one consistent
stream of key/value events.
"""

import logging
import sys
from typing import List, Optional

import structlog
from structlog.stdlib import ProcessorFormatter

from retail_stats.config.settings import get_settings

# Their own handlers would print a second, unstructured copy
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _handlers(log_format: str, log_file: Optional[str], pre_chain: list) -> List[logging.Handler]:
    if log_format == "json":
        console_renderer = structlog.processors.JSONRenderer()
    else:
        console_renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(ProcessorFormatter(processor=console_renderer, foreign_pre_chain=pre_chain))
    handlers: List[logging.Handler] = [console]

    if log_file:
        to_file = logging.FileHandler(log_file, encoding="utf-8")
        to_file.setFormatter(
            ProcessorFormatter(processor=structlog.processors.JSONRenderer(), foreign_pre_chain=pre_chain)
        )
        handlers.append(to_file)
    return handlers


def configure_logging(log_level: Optional[str] = None) -> None:
    """
    Route structlog and standard-library logging through the same handlers.

    Args:
        log_level: Overrides LOG_LEVEL when given
    """
    monitoring = get_settings().monitoring
    level_name = (log_level or monitoring.level).upper()
    level = getattr(logging, level_name, logging.INFO)

    pre_chain = _shared_processors()
    structlog.configure(
        processors=pre_chain + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in _handlers(monitoring.format, monitoring.file, pre_chain):
        root.addHandler(handler)

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=level_name,
        format=monitoring.format,
        log_file=monitoring.file,
    )
