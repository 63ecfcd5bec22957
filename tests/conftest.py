"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from gmail_http_api.api import create_app
from gmail_http_api.config import Settings, get_settings
from gmail_http_api.gmail.client import GmailClient
from gmail_http_api.gmail.service import GmailService

ENV_VARS = (
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "GOOGLE_REFRESH_TOKEN",
    "GOOGLE_ACCESS_TOKEN",
    "API_KEY",
    "PORT",
    "LOG_LEVEL",
    "DEBUG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Isolate tests from the developer's environment and settings cache."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings with dummy OAuth credentials and auth disabled."""
    return Settings(
        _env_file=None,
        google_client_id="client-id",
        google_client_secret="client-secret",
        google_refresh_token="refresh-token",
        log_level="DEBUG",
    )


@pytest.fixture
def mock_client() -> AsyncMock:
    """Gmail client double; every API method is an AsyncMock."""
    return AsyncMock(spec=GmailClient)


@pytest.fixture
def service(mock_client: AsyncMock) -> GmailService:
    return GmailService(mock_client)


@pytest.fixture
def client(settings: Settings, service: GmailService) -> TestClient:
    """HTTP client for an app with auth disabled."""
    return TestClient(create_app(settings=settings, service=service))


@pytest.fixture
def secured_client(settings: Settings, service: GmailService) -> TestClient:
    """HTTP client for an app that requires ``x-api-key: secret-key``."""
    secured = settings.model_copy(update={"api_key": "secret-key"})
    return TestClient(create_app(settings=secured, service=service))
