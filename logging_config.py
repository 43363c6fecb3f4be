"""Centralized logging configuration."""

import logging

from config import settings

# Chatty libraries clamped to WARNING whatever the root level is.
NOISY_LOGGERS = ("sqlalchemy.pool", "httpx", "httpcore", "uvicorn.access")


def setup_logging() -> None:
    """Configure logging for the application.

    The root level follows settings.LOG_LEVEL. SQL statements are echoed
    through ``sqlalchemy.engine`` only when settings.LOG_SQL is on.
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)-8s %(name)s  %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=getattr(logging, settings.LOG_LEVEL),
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.LOG_SQL else logging.WARNING
    )
