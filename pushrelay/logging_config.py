"""pushrelay logging configuration.

pushrelay logs through structlog. Modules get a logger with
``structlog.get_logger(__name__)`` and log events with key/value context;
``%s`` positional arguments are formatted as well.

Output goes to stderr as console lines by default. Set
``PUSHRELAY_LOG_FORMAT=json`` for one JSON object per line.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

import structlog
from structlog.typing import Processor

from pushrelay.constants import DEFAULT_LOG_LEVEL, ENV_LOG_FORMAT, ENV_LOG_LEVEL


def _resolve_level(level: Optional[str]) -> int:
    level_name = (level or os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL)).upper()
    return getattr(logging, level_name, logging.INFO)


def setup_logging(level: Optional[str] = None) -> None:
    """Configure pushrelay logging.

    Args:
        level: Optional override for `PUSHRELAY_LOG_LEVEL`.
    """
    log_level = _resolve_level(level)
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if os.getenv(ENV_LOG_FORMAT, "").lower() == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
