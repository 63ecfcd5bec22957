"""API route modules."""

from gmail_http_api.api.routes import drafts, emails, health, labels, settings, threads, tools

__all__ = ["drafts", "emails", "health", "labels", "settings", "threads", "tools"]
