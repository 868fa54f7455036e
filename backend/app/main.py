"""Ghibli Favorites API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery — ExMA anti-pattern)
    - Global error handlers map GhibliFavoritesError → structured JSON responses
    - CORS configured from settings (not hardcoded), credentials allowed for the session cookie
    - /dev-login exists only when deployment_mode != production
    - Persistence backend chosen once per app by BackendSelector (app.state)

Design Decisions:
    - create_app(settings) factory + module-level app: tests build isolated apps
      with their own settings, selector and token service
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
      (ADR: FastAPI 0.128)
    - Backend selection warmed in lifespan but also lazy on first request, so
      ASGI transports that skip lifespan still get a backend
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.error_handlers import register_error_handlers
from app.api.routes import auth, favorites, health
from app.config import Settings, get_settings
from app.infrastructure.backend_selection import BackendSelector
from app.infrastructure.identity import SessionTokenService
from app.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    selector: BackendSelector = app.state.backend_selector
    await selector.get()
    logger.info(
        f"Ghibli Favorites API started (backend: {selector.state.value})",
    )
    yield
    await selector.dispose()
    logger.info("Ghibli Favorites API shutting down")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Ghibli Favorites API", version="1.0.0", lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.backend_selector = BackendSelector(
        settings.database_url,
        settings.dev_db_path,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    app.state.token_service = SessionTokenService(settings.jwt_secret)

    # CORS from settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routes: explicit registration (ExMA: no convention-over-config)
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(favorites.router)
    if settings.dev_login_enabled:
        app.include_router(auth.dev_router)

    register_error_handlers(app)

    # Static files: the built frontend, when present
    # ADR: mounted AFTER API routes so /api/v1/* takes precedence
    # html=True enables SPA fallback (serves index.html for unknown routes)
    if os.path.isdir("static"):
        app.mount("/", StaticFiles(directory="static", html=True), name="static")

    return app


app = create_app()
