"""Logfire setup.

Services log with the module-level API, for example::

    logfire.info("Vote submitted", definition_id=str(definition_id))

    with logfire.span("vote_coordinator.submit_vote", definition_id=...):
        ...
"""

import logfire
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from taigi.config import Settings


def _should_send(settings: Settings) -> bool:
    """An explicit setting wins, otherwise send only when a token is set."""
    explicit = settings.observability.send_to_logfire
    if explicit is not None:
        return explicit
    return bool(settings.observability.logfire_token)


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire once per process, before the app is imported."""
    send_to_logfire = _should_send(settings)

    logfire.configure(
        service_name="taigi-community",
        service_version="0.1.0",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        token=settings.observability.logfire_token,
        console=logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    )

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
    )


def instrument_fastapi(app: FastAPI) -> None:
    """Trace every HTTP request handled by ``app``."""
    logfire.instrument_fastapi(app, capture_headers=False)


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Trace every statement run on ``engine``, tagging SQL with span context."""
    logfire.instrument_sqlalchemy(engine=engine.sync_engine, enable_commenter=True)
