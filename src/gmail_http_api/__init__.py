"""Gmail HTTP API - REST gateway for a single Gmail account.

Every operation is reachable as a REST endpoint and, for bot integrations,
as a named tool through the generic ``/api/call`` endpoint.
"""

__version__ = "0.1.0"

from gmail_http_api.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
