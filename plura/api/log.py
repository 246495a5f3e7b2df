"""loguru setup for the API process.

Every record carries ``extra[service]``.  stdlib loggers (uvicorn,
sqlalchemy, redis, alembic) are routed into loguru so one sink sees
everything.  ``json=True`` switches the sink to loguru's serialized
one-object-per-line output.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

SERVICE_NAME = "plura-api"

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "{extra[service]} | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Library loggers that only matter at WARNING and above.
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "sqlalchemy.pool", "redis")


class StdlibToLoguru(logging.Handler):
    """Forward stdlib ``LogRecord``s to loguru at the caller's frame."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO", *, json: bool = False) -> None:
    """Install the single loguru sink and capture stdlib logging.

    Safe to call more than once; each call replaces the previous sink.
    """
    level = level.upper()

    logger.remove()
    logger.configure(extra={"service": SERVICE_NAME})
    if json:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=TEXT_FORMAT)

    logging.basicConfig(handlers=[StdlibToLoguru()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging ready (level={}, json={})", level, json)
