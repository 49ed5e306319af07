"""structlog configuration.

Learn: Modules log with structlog.get_logger() and dotted event names
("auth.registered", "task.toggled") plus keyword fields. This module
wires the processor chain once at startup:

- contextvars merge → request_id / user_id bound by middleware show up
  on every event of that request
- level + ISO timestamp
- ConsoleRenderer for humans, JSONRenderer for log shippers

Stdlib logging (uvicorn, SQLAlchemy) goes to stderr at the same level.
"""

import logging
import sys

import structlog

from tasktrack.config import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structlog + stdlib logging. Safe to call more than once."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.log_json:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # ConsoleRenderer pretty-prints exc_info itself
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
