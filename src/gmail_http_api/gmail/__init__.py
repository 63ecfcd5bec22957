"""Gmail API integration: client, message parsing and composition."""

from gmail_http_api.gmail.client import GmailClient
from gmail_http_api.gmail.service import GmailService

__all__ = ["GmailClient", "GmailService"]
