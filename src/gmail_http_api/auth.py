"""OAuth2 token ownership for Gmail API calls.

The service runs with a single set of user credentials supplied through the
environment. ``TokenHolder`` owns the current access token; every update
replaces the whole immutable ``TokenRecord`` in one assignment, so concurrent
readers see either the old or the new token, never a mix of the two.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import structlog
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from gmail_http_api.config import Settings
from gmail_http_api.exceptions import AuthenticationError

logger = structlog.get_logger()

GMAIL_SCOPES: tuple[str, ...] = (
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/gmail.labels",
)

# Refresh slightly before Google's expiry so in-flight calls do not race it.
EXPIRY_SKEW = timedelta(seconds=60)


@dataclass(frozen=True)
class TokenRecord:
    access_token: str | None
    refresh_token: str
    # Naive UTC, matching google.oauth2.credentials.Credentials.expiry.
    expiry: datetime | None = None

    def is_usable(self, now: datetime | None = None) -> bool:
        if not self.access_token:
            return False
        if self.expiry is None:
            return True
        now = now or datetime.now(timezone.utc).replace(tzinfo=None)
        return now < self.expiry - EXPIRY_SKEW


class TokenHolder:
    """Thread-safe owner of the process-wide OAuth token."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        access_token: str | None = None,
        token_uri: str = "https://oauth2.googleapis.com/token",
        scopes: tuple[str, ...] = GMAIL_SCOPES,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_uri = token_uri
        self._scopes = scopes
        self._lock = threading.Lock()
        self._record = TokenRecord(access_token=access_token, refresh_token=refresh_token)

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenHolder:
        return cls(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            refresh_token=settings.google_refresh_token,
            access_token=settings.google_access_token,
            token_uri=settings.google_token_uri,
        )

    def current(self) -> TokenRecord:
        return self._record

    def credentials(self) -> Credentials:
        """Build Credentials from the current record, refreshing first if needed.

        Each caller gets its own Credentials object; the transport may refresh
        it in-flight, after which the caller hands it back via publish().
        """
        record = self._record
        if not record.is_usable():
            record = self.refresh(stale=record)
        return self._build_credentials(record)

    def refresh(self, stale: TokenRecord | None = None) -> TokenRecord:
        """Exchange the refresh token for a new access token.

        Args:
            stale: The record the caller found unusable. If another thread has
                already replaced it, the newer record is returned without a
                second round-trip.

        Raises:
            AuthenticationError: If Google rejects the refresh.
        """
        with self._lock:
            if stale is not None and self._record is not stale and self._record.is_usable():
                return self._record

            creds = self._build_credentials(self._record)
            logger.info("oauth_token_refresh_started")
            try:
                creds.refresh(Request())
            except RefreshError as exc:
                logger.exception("oauth_token_refresh_failed", error=str(exc))
                raise AuthenticationError(str(exc)) from exc

            self._record = self._record_from(creds)
            logger.info("oauth_token_refreshed", expiry=str(self._record.expiry))
            return self._record

    def publish(self, creds: Credentials) -> None:
        """Adopt a token the transport refreshed while executing a request."""
        if not creds.token or creds.token == self._record.access_token:
            return
        with self._lock:
            self._record = self._record_from(creds)
        logger.info("oauth_token_refreshed", source="transport")

    def _record_from(self, creds: Credentials) -> TokenRecord:
        return TokenRecord(
            access_token=creds.token,
            refresh_token=creds.refresh_token or self._record.refresh_token,
            expiry=creds.expiry,
        )

    def _build_credentials(self, record: TokenRecord) -> Credentials:
        return Credentials(
            token=record.access_token,
            refresh_token=record.refresh_token,
            token_uri=self._token_uri,
            client_id=self._client_id,
            client_secret=self._client_secret,
            scopes=list(self._scopes),
            expiry=record.expiry,
        )
