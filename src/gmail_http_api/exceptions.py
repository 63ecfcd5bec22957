"""Custom exceptions for the Gmail HTTP API."""

from __future__ import annotations

from typing import Any


class GmailHttpApiError(Exception):
    """Base exception for all Gmail HTTP API errors."""


class ConfigurationError(GmailHttpApiError):
    """Exception raised for configuration related errors."""


class AuthenticationError(GmailHttpApiError):
    """Exception raised for OAuth credential failures."""


class GmailAPIError(GmailHttpApiError):
    """Exception raised for Gmail API related errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(GmailAPIError):
    """Exception raised when Gmail reports that an entity does not exist."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=404)


class ToolArgumentError(GmailHttpApiError):
    """Exception raised when tool arguments fail validation."""

    def __init__(self, message: str, details: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class UnknownToolError(GmailHttpApiError):
    """Exception raised for a tool name outside the catalogue."""

    def __init__(self, tool: str) -> None:
        super().__init__(f"Unknown tool: {tool}")
        self.tool = tool
