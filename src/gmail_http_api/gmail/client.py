"""Gmail API client implementation.

This module provides a thin async client over the Gmail REST API.

Notes:
    The Google API client is synchronous. Calls are wrapped with
    `asyncio.to_thread` so request handlers stay async-friendly. httplib2 is
    not thread-safe, so every call executes over its own authorised transport
    built from the shared ``TokenHolder``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

import httplib2
import structlog
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from gmail_http_api.auth import TokenHolder
from gmail_http_api.exceptions import GmailAPIError, GmailHttpApiError, NotFoundError

logger = structlog.get_logger()

# Gmail caps messages.list page size at 500.
MAX_PAGE_SIZE = 500


class GmailClient:
    """Gmail API client for the operations the HTTP API exposes.

    Every method returns the decoded Gmail JSON resource. Failures are raised
    as ``NotFoundError`` (HTTP 404 from Gmail) or ``GmailAPIError``.
    """

    def __init__(
        self,
        tokens: TokenHolder,
        user_id: str = "me",
        service: Any | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize Gmail client.

        Args:
            tokens: Owner of the OAuth token used for every call.
            user_id: Gmail user ID ("me" for the authorised account).
            service: Pre-built discovery service (tests); built lazily otherwise.
            timeout: Socket timeout in seconds for each call.
        """
        self.tokens = tokens
        self.user_id = user_id
        self.timeout = timeout
        self._service = service
        logger.info("gmail_client_initialized", user_id=user_id)

    # Messages

    async def list_message_ids(self, query: str | None = None, max_results: int = 10) -> list[str]:
        """List message IDs matching a Gmail search query, newest first."""

        logger.info("listing_messages", max_results=max_results, query=query)
        ids: list[str] = []
        page_token: str | None = None
        while len(ids) < max_results:
            per_page = min(MAX_PAGE_SIZE, max_results - len(ids))
            token = page_token
            response = await self._execute(
                "gmail_list_messages",
                lambda users: users.messages().list(
                    userId=self.user_id, q=query, maxResults=per_page, pageToken=token
                ),
            )
            for msg in response.get("messages", []) or []:
                msg_id = msg.get("id")
                if msg_id:
                    ids.append(msg_id)
            page_token = response.get("nextPageToken")
            if not page_token:
                break
        return ids[:max_results]

    async def estimate_messages(self, query: str) -> int:
        """Return Gmail's result size estimate for a query."""

        response = await self._execute(
            "gmail_estimate_messages",
            lambda users: users.messages().list(userId=self.user_id, q=query, maxResults=1),
            query=query,
        )
        return int(response.get("resultSizeEstimate") or 0)

    async def get_message(
        self,
        message_id: str,
        *,
        format: str = "full",
        metadata_headers: list[str] | None = None,
    ) -> dict[str, Any]:
        return await self._execute(
            "gmail_get_message",
            lambda users: users.messages().get(
                userId=self.user_id,
                id=message_id,
                format=format,
                metadataHeaders=metadata_headers,
            ),
            message_id=message_id,
            format=format,
        )

    async def send_message(self, raw: str, thread_id: str | None = None) -> dict[str, Any]:
        body: dict[str, Any] = {"raw": raw}
        if thread_id:
            body["threadId"] = thread_id
        return await self._execute(
            "gmail_send_message",
            lambda users: users.messages().send(userId=self.user_id, body=body),
            thread_id=thread_id,
        )

    async def modify_message(
        self,
        message_id: str,
        add_label_ids: list[str] | None = None,
        remove_label_ids: list[str] | None = None,
    ) -> dict[str, Any]:
        body = {"addLabelIds": add_label_ids or [], "removeLabelIds": remove_label_ids or []}
        return await self._execute(
            "gmail_modify_message",
            lambda users: users.messages().modify(userId=self.user_id, id=message_id, body=body),
            message_id=message_id,
            add=add_label_ids,
            remove=remove_label_ids,
        )

    async def batch_modify(
        self,
        message_ids: list[str],
        add_label_ids: list[str] | None = None,
        remove_label_ids: list[str] | None = None,
    ) -> None:
        body = {
            "ids": list(message_ids),
            "addLabelIds": add_label_ids or [],
            "removeLabelIds": remove_label_ids or [],
        }
        await self._execute(
            "gmail_batch_modify",
            lambda users: users.messages().batchModify(userId=self.user_id, body=body),
            message_count=len(message_ids),
        )

    async def trash_message(self, message_id: str) -> dict[str, Any]:
        return await self._execute(
            "gmail_trash_message",
            lambda users: users.messages().trash(userId=self.user_id, id=message_id),
            message_id=message_id,
        )

    async def untrash_message(self, message_id: str) -> dict[str, Any]:
        return await self._execute(
            "gmail_untrash_message",
            lambda users: users.messages().untrash(userId=self.user_id, id=message_id),
            message_id=message_id,
        )

    async def delete_message(self, message_id: str) -> None:
        await self._execute(
            "gmail_delete_message",
            lambda users: users.messages().delete(userId=self.user_id, id=message_id),
            message_id=message_id,
        )

    async def get_attachment(self, message_id: str, attachment_id: str) -> dict[str, Any]:
        return await self._execute(
            "gmail_get_attachment",
            lambda users: users.messages()
            .attachments()
            .get(userId=self.user_id, messageId=message_id, id=attachment_id),
            message_id=message_id,
            attachment_id=attachment_id,
        )

    # Threads

    async def get_thread(self, thread_id: str) -> dict[str, Any]:
        return await self._execute(
            "gmail_get_thread",
            lambda users: users.threads().get(userId=self.user_id, id=thread_id, format="full"),
            thread_id=thread_id,
        )

    # Drafts

    async def list_drafts(self, max_results: int = 10) -> list[dict[str, Any]]:
        response = await self._execute(
            "gmail_list_drafts",
            lambda users: users.drafts().list(userId=self.user_id, maxResults=max_results),
            max_results=max_results,
        )
        return list(response.get("drafts", []) or [])

    async def get_draft(self, draft_id: str, *, format: str = "full") -> dict[str, Any]:
        return await self._execute(
            "gmail_get_draft",
            lambda users: users.drafts().get(userId=self.user_id, id=draft_id, format=format),
            draft_id=draft_id,
        )

    async def create_draft(self, raw: str) -> dict[str, Any]:
        return await self._execute(
            "gmail_create_draft",
            lambda users: users.drafts().create(userId=self.user_id, body={"message": {"raw": raw}}),
        )

    async def update_draft(self, draft_id: str, raw: str) -> dict[str, Any]:
        body = {"id": draft_id, "message": {"raw": raw}}
        return await self._execute(
            "gmail_update_draft",
            lambda users: users.drafts().update(userId=self.user_id, id=draft_id, body=body),
            draft_id=draft_id,
        )

    async def delete_draft(self, draft_id: str) -> None:
        await self._execute(
            "gmail_delete_draft",
            lambda users: users.drafts().delete(userId=self.user_id, id=draft_id),
            draft_id=draft_id,
        )

    async def send_draft(self, draft_id: str) -> dict[str, Any]:
        return await self._execute(
            "gmail_send_draft",
            lambda users: users.drafts().send(userId=self.user_id, body={"id": draft_id}),
            draft_id=draft_id,
        )

    # Labels

    async def list_labels(self) -> list[dict[str, Any]]:
        response = await self._execute(
            "gmail_list_labels",
            lambda users: users.labels().list(userId=self.user_id),
        )
        return list(response.get("labels", []) or [])

    async def create_label(self, body: dict[str, Any]) -> dict[str, Any]:
        return await self._execute(
            "gmail_create_label",
            lambda users: users.labels().create(userId=self.user_id, body=body),
            name=body.get("name"),
        )

    async def patch_label(self, label_id: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self._execute(
            "gmail_patch_label",
            lambda users: users.labels().patch(userId=self.user_id, id=label_id, body=body),
            label_id=label_id,
        )

    async def delete_label(self, label_id: str) -> None:
        await self._execute(
            "gmail_delete_label",
            lambda users: users.labels().delete(userId=self.user_id, id=label_id),
            label_id=label_id,
        )

    # Settings

    async def get_vacation(self) -> dict[str, Any]:
        return await self._execute(
            "gmail_get_vacation",
            lambda users: users.settings().getVacation(userId=self.user_id),
        )

    async def update_vacation(self, body: dict[str, Any]) -> dict[str, Any]:
        return await self._execute(
            "gmail_update_vacation",
            lambda users: users.settings().updateVacation(userId=self.user_id, body=body),
            enabled=body.get("enableAutoReply"),
        )

    # Plumbing

    async def _execute(
        self,
        operation: str,
        build_request: Callable[[Any], Any],
        **context: Any,
    ) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(self._execute_sync, build_request)
        except HttpError as exc:
            status = getattr(getattr(exc, "resp", None), "status", None)
            status = int(status) if status is not None else None
            logger.warning(f"{operation}_failed", status=status, error=str(exc), **context)
            if status == 404:
                raise NotFoundError(str(exc)) from exc
            raise GmailAPIError(str(exc), status_code=status) from exc
        except GmailHttpApiError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception(f"{operation}_failed", error=str(exc), **context)
            raise GmailAPIError(str(exc)) from exc

    def _execute_sync(self, build_request: Callable[[Any], Any]) -> dict[str, Any]:
        creds = self.tokens.credentials()
        http = AuthorizedHttp(creds, http=httplib2.Http(timeout=self.timeout))
        request = build_request(self._get_service().users())
        try:
            # Delete-style calls return an empty body.
            return request.execute(http=http) or {}
        finally:
            self.tokens.publish(creds)

    def _get_service(self) -> Any:
        if self._service is None:
            # Credentials are supplied per request; the bare Http here is only
            # used to satisfy build(). cache_discovery=False prevents writing
            # discovery docs to disk.
            self._service = build(
                "gmail",
                "v1",
                http=httplib2.Http(timeout=self.timeout),
                cache_discovery=False,
            )
        return self._service
