"""Dependency injection container."""

import logfire
from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI

from taigi.util.di import PROVIDERS, get_provider


def create_container() -> AsyncContainer:
    """Build the production container.

    Persistence uses PostgreSQL, the realtime channel is shared by all
    requests. Settings are loaded from environment variables.
    """
    providers = [get_provider(base, use_mock=False)() for base in PROVIDERS]
    logfire.debug(
        "Building DI container", providers=[type(p).__name__ for p in providers]
    )
    return make_async_container(*providers, FastapiProvider())


def setup_di(app: FastAPI, container: AsyncContainer) -> None:
    """Attach a container to the FastAPI app (replacing any previous one)."""
    setup_dishka(container, app)
