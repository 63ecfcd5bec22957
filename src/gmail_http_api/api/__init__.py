"""HTTP surface: FastAPI app, auth gate and routes."""

from gmail_http_api.api.app import build_service, create_app

__all__ = ["build_service", "create_app"]
