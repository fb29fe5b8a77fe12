"""FastAPI application."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taigi.config import Settings
from taigi.interface.api.routes import health, votes
from taigi.util.di.container import create_container, setup_di
from taigi.util.observability import instrument_fastapi


def create_app() -> FastAPI:
    """Build the API application.

    Logfire is configured by ``scripts/start_app.py`` before this runs.
    """
    settings = Settings()

    app_instance = FastAPI(
        title="Taigi Community API",
        description="Community definitions and voting for the Taiwanese/Mandarin dictionary",
        version="0.1.0",
    )
    instrument_fastapi(app_instance)

    # Session cookies are sent cross-origin by the web client
    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Origin"],
        max_age=600,
    )

    setup_di(app_instance, create_container())

    app_instance.include_router(health.router)
    app_instance.include_router(votes.router)

    return app_instance


app = create_app()
