"""Standard library logging for scripts and third-party libraries.

Application code logs through logfire; this only sets levels and format for
whatever still uses ``logging`` (uvicorn, alembic, asyncpg).
"""

import logging
import sys

from taigi.config import Settings

QUIET_LOGGERS = ("sqlalchemy.engine", "asyncpg")


def _level_for(settings: Settings) -> int:
    if settings.debug:
        return logging.DEBUG
    if settings.environment == "production":
        return logging.WARNING
    return logging.INFO


def setup_logging(settings: Settings) -> None:
    level = _level_for(settings)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stdout,
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured at %s for %s",
        logging.getLevelName(level),
        settings.environment,
    )
