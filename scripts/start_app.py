#!/usr/bin/env python3
"""Serve the community voting API with uvicorn."""

import sys

import logfire
import uvicorn

from taigi.config import Settings
from taigi.util.logging import setup_logging
from taigi.util.observability import configure_logfire


def main() -> int:
    settings = Settings()
    setup_logging(settings)
    # Before uvicorn imports the app, so startup failures are traced
    configure_logfire(settings)

    logfire.info("Starting API", environment=settings.environment, port=settings.port)
    try:
        uvicorn.run(
            "taigi.interface.api.app:app",
            host="0.0.0.0",
            port=settings.port,
            log_level="debug" if settings.debug else "info",
        )
    except Exception:
        logfire.exception("API startup failed")
        raise
    return 0


if __name__ == "__main__":
    sys.exit(main())
