"""FastAPI application factory."""

from __future__ import annotations

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gmail_http_api import __version__
from gmail_http_api.api.dependencies import require_api_key
from gmail_http_api.api.errors import setup_error_handlers
from gmail_http_api.api.middleware import RequestLoggingMiddleware
from gmail_http_api.api.routes import drafts, emails, health, labels, threads, tools
from gmail_http_api.api.routes import settings as settings_routes
from gmail_http_api.auth import TokenHolder
from gmail_http_api.config import Settings, get_settings
from gmail_http_api.gmail.client import GmailClient
from gmail_http_api.gmail.service import GmailService

logger = structlog.get_logger()


def build_service(settings: Settings) -> GmailService:
    """Wire the token holder, Gmail client and service from settings."""
    tokens = TokenHolder.from_settings(settings)
    client = GmailClient(tokens, user_id=settings.gmail_user_id)
    return GmailService(client)


def create_app(settings: Settings | None = None, service: GmailService | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Application settings; loaded from the environment if None.
        service: Gmail service to serve; built from ``settings`` if None.

    Returns:
        The configured application.
    """
    settings = settings or get_settings()
    service = service or build_service(settings)

    app = FastAPI(title="Gmail HTTP API", version=__version__, debug=settings.debug)
    app.state.settings = settings
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    setup_error_handlers(app)

    app.include_router(health.router)
    protected = [Depends(require_api_key)]
    for module in (tools, emails, threads, drafts, labels, settings_routes):
        app.include_router(module.router, dependencies=protected)

    logger.info("app_created", auth_enabled=settings.auth_enabled, user_id=settings.gmail_user_id)
    return app
