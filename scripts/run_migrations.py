#!/usr/bin/env python3
"""Upgrade the community schema to the latest alembic revision."""

import sys

import logfire
from alembic import command
from alembic.config import Config

from taigi.config import Settings
from taigi.util.logging import setup_logging
from taigi.util.observability import configure_logfire


def main() -> int:
    settings = Settings()
    setup_logging(settings)
    configure_logfire(settings)

    config = Config("alembic.ini")
    config.set_main_option("sqlalchemy.url", settings.database_url)

    with logfire.span("run_migrations", target="head"):
        try:
            command.upgrade(config, "head")
        except Exception:
            # The deploy must stop before serving against a half-migrated schema
            logfire.exception("Database migration failed")
            raise

    logfire.info("Database migrations applied")
    return 0


if __name__ == "__main__":
    sys.exit(main())
