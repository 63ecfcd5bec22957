"""Gmail operations exposed by the HTTP API.

Each ``GmailService`` method maps one API operation onto one Gmail call or a
small fixed sequence of calls (reply = fetch original, compose, send) and
reshapes the result into the models in ``gmail_http_api.models``.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from email.utils import getaddresses
from typing import Any, Callable

import structlog

from gmail_http_api.exceptions import GmailAPIError, GmailHttpApiError, NotFoundError
from gmail_http_api.gmail.client import GmailClient
from gmail_http_api.gmail.mime import ComposeParams, build_raw_message
from gmail_http_api.gmail.parsing import (
    HeaderMap,
    collect_attachments,
    message_body,
    message_to_email,
    parse_part,
)
from gmail_http_api.gmail.subject import forward_subject, reply_subject
from gmail_http_api.gmail.unsubscribe import (
    find_unsubscribe_links,
    merge_links,
    parse_list_unsubscribe,
)
from gmail_http_api.models import (
    AttachmentData,
    Draft,
    DraftMessage,
    DraftResult,
    EmailListResult,
    EmailMessage,
    EmailSummary,
    EmailWithAttachments,
    ItemError,
    Label,
    MarketingEmail,
    SendResult,
    Thread,
    UnsubscribeInfo,
    VacationSettings,
)

logger = structlog.get_logger()

# Heuristic queries; a message may match several of them.
MARKETING_QUERIES: tuple[str, ...] = (
    "category:promotions",
    "subject:(newsletter OR unsubscribe OR sale OR offer OR discount OR deal OR promo)",
    "from:(newsletter OR marketing OR promo OR deals OR offers OR noreply OR no-reply)",
)

REPLY_HEADERS: list[str] = ["From", "To", "Cc", "Subject", "Message-ID", "References"]

LABEL_UNREAD = "UNREAD"
LABEL_STARRED = "STARRED"
LABEL_INBOX = "INBOX"


def reply_recipients(headers: HeaderMap, reply_all: bool) -> list[str]:
    """Addresses a reply goes to.

    Plain replies go to the original sender only. Reply-all adds every To and
    Cc address, de-duplicated case-insensitively in first-seen order.
    """
    sources = [headers.get("From")]
    if reply_all:
        sources += [headers.get("To"), headers.get("Cc")]

    seen: set[str] = set()
    recipients: list[str] = []
    for _, addr in getaddresses([s for s in sources if s]):
        key = addr.lower()
        if not addr or key in seen:
            continue
        seen.add(key)
        recipients.append(addr)
        if not reply_all:
            break
    return recipients


def forward_body(original: EmailMessage, note: str | None) -> str:
    lines = []
    if note:
        lines += [note, ""]
    lines += [
        "---------- Forwarded message ---------",
        f"From: {original.sender}",
        f"Date: {original.date}",
        f"Subject: {original.subject}",
        f"To: {original.to}",
        "",
        original.body or "",
    ]
    return "\n".join(lines)


def unsubscribe_info(message: dict[str, Any]) -> UnsubscribeInfo:
    """Collect unsubscribe links from the List-Unsubscribe header and body."""
    headers = HeaderMap.from_message(message)
    header_links, mailto = parse_list_unsubscribe(headers.get("List-Unsubscribe"))
    body_links = find_unsubscribe_links(message_body(message))
    return UnsubscribeInfo(
        email=EmailSummary(
            id=str(message.get("id") or ""),
            subject=headers.get("Subject"),
            sender=headers.get("From"),
        ),
        unsubscribe_links=merge_links(header_links, body_links),
        unsubscribe_email=mailto,
    )


def marketing_email(message: dict[str, Any]) -> MarketingEmail:
    info = unsubscribe_info(message)
    return MarketingEmail(
        **message_to_email(message).model_dump(),
        unsubscribe_links=info.unsubscribe_links,
        unsubscribe_email=info.unsubscribe_email,
        has_unsubscribe=info.has_unsubscribe,
    )


def _ms_to_datetime(value: Any) -> datetime | None:
    if value in (None, ""):
        return None
    return datetime.fromtimestamp(int(value) / 1000.0, tz=timezone.utc)


def _datetime_to_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def _label(raw: dict[str, Any]) -> Label:
    return Label(
        id=raw.get("id") or "",
        name=raw.get("name") or "",
        type=raw.get("type") or "",
        messages_total=raw.get("messagesTotal"),
        messages_unread=raw.get("messagesUnread"),
    )


def _draft(raw: dict[str, Any]) -> Draft:
    message = raw.get("message") or {}
    headers = HeaderMap.from_message(message)
    return Draft(
        id=raw.get("id") or "",
        message=DraftMessage(
            id=message.get("id") or "",
            thread_id=message.get("threadId") or "",
            subject=headers.get("Subject"),
            to=headers.get("To"),
            snippet=message.get("snippet") or "",
        ),
    )


def _draft_result(raw: dict[str, Any]) -> DraftResult:
    message = raw.get("message") or {}
    return DraftResult(
        id=raw.get("id") or "",
        message_id=message.get("id") or "",
        thread_id=message.get("threadId") or "",
    )


def _send_result(raw: dict[str, Any]) -> SendResult:
    return SendResult(id=raw.get("id") or "", thread_id=raw.get("threadId") or "")


class GmailService:
    """Gmail operations for the REST and tool surfaces."""

    def __init__(self, client: GmailClient) -> None:
        self.client = client

    # Reading

    async def list_emails(self, query: str | None = None, max_results: int = 10) -> EmailListResult:
        """List messages matching a query, one full fetch per message.

        Fetches run concurrently; results keep the order Gmail returned the
        IDs in. A message that fails to fetch is reported in ``errors`` and
        the rest of the list is still returned.
        """
        ids = await self.client.list_message_ids(query, max_results)
        return await self._fetch_many(ids, message_to_email)

    async def search_emails(self, query: str, max_results: int = 10) -> EmailListResult:
        return await self.list_emails(query, max_results)

    async def get_email(self, message_id: str) -> EmailMessage | None:
        """Fetch one message; returns None if Gmail cannot return it."""
        try:
            raw = await self.client.get_message(message_id, format="full")
        except GmailAPIError as exc:
            logger.warning("email_fetch_failed", message_id=message_id, error=str(exc))
            return None
        return message_to_email(raw)

    async def get_thread(self, thread_id: str) -> Thread | None:
        try:
            raw = await self.client.get_thread(thread_id)
        except GmailAPIError as exc:
            logger.warning("thread_fetch_failed", thread_id=thread_id, error=str(exc))
            return None
        return Thread(
            id=raw.get("id") or thread_id,
            history_id=str(raw.get("historyId") or ""),
            messages=[message_to_email(m) for m in raw.get("messages", []) or []],
        )

    async def get_unread_count(self, query: str | None = None) -> int:
        q = "is:unread" if not query else f"is:unread {query}"
        return await self.client.estimate_messages(q)

    async def find_marketing_emails(
        self, max_results: int = 10, include_unsubscribe: bool = False
    ) -> EmailListResult:
        """Find promotional messages with a few fixed heuristic queries.

        The queries run concurrently. A failing query contributes nothing.
        IDs are de-duplicated across queries, first seen wins, and the result
        is cut to ``max_results`` before any message is fetched.
        """

        async def run(query: str) -> list[str]:
            try:
                return await self.client.list_message_ids(query, max_results)
            except GmailHttpApiError as exc:
                logger.warning("marketing_query_failed", query=query, error=str(exc))
                return []

        batches = await asyncio.gather(*(run(q) for q in MARKETING_QUERIES))

        seen: set[str] = set()
        ids: list[str] = []
        for batch in batches:
            for message_id in batch:
                if message_id not in seen:
                    seen.add(message_id)
                    ids.append(message_id)

        convert: Callable[[dict[str, Any]], EmailMessage]
        convert = marketing_email if include_unsubscribe else message_to_email
        return await self._fetch_many(ids[:max_results], convert)

    async def get_email_with_unsubscribe(self, message_id: str) -> UnsubscribeInfo:
        try:
            raw = await self.client.get_message(message_id, format="full")
        except GmailAPIError as exc:
            logger.warning("email_fetch_failed", message_id=message_id, error=str(exc))
            return UnsubscribeInfo(email=None)
        return unsubscribe_info(raw)

    async def get_email_with_attachments(self, message_id: str) -> EmailWithAttachments | None:
        try:
            raw = await self.client.get_message(message_id, format="full")
        except GmailAPIError as exc:
            logger.warning("email_fetch_failed", message_id=message_id, error=str(exc))
            return None
        headers = HeaderMap.from_message(raw)
        return EmailWithAttachments(
            id=raw.get("id") or message_id,
            subject=headers.get("Subject"),
            sender=headers.get("From"),
            attachments=collect_attachments(parse_part(raw.get("payload"))),
        )

    async def get_attachment(self, message_id: str, attachment_id: str) -> AttachmentData | None:
        try:
            raw = await self.client.get_attachment(message_id, attachment_id)
        except NotFoundError:
            return None
        return AttachmentData(size=int(raw.get("size") or 0), data=raw.get("data") or "")

    # Sending

    async def send_email(self, params: ComposeParams) -> SendResult:
        raw = await self.client.send_message(build_raw_message(params))
        logger.info("email_sent", message_id=raw.get("id"), recipients=len(params.to))
        return _send_result(raw)

    async def reply_to_email(
        self,
        message_id: str,
        body: str,
        html_body: str | None = None,
        reply_all: bool = False,
    ) -> SendResult:
        """Reply in the original thread with In-Reply-To/References set."""
        original = await self.client.get_message(
            message_id, format="metadata", metadata_headers=REPLY_HEADERS
        )
        headers = HeaderMap.from_message(original)

        recipients = reply_recipients(headers, reply_all)
        if not recipients:
            raise GmailAPIError(f"Message {message_id} has no sender address to reply to")

        original_id = headers.get("Message-ID") or None
        references = " ".join(r for r in (headers.get("References"), original_id) if r) or None
        params = ComposeParams(
            to=recipients,
            subject=reply_subject(headers.get("Subject")),
            body=body,
            html_body=html_body,
            in_reply_to=original_id,
            references=references,
        )
        raw = await self.client.send_message(
            build_raw_message(params), thread_id=original.get("threadId") or None
        )
        logger.info("email_replied", message_id=message_id, reply_all=reply_all)
        return _send_result(raw)

    async def forward_email(
        self,
        message_id: str,
        to: list[str],
        body: str | None = None,
        cc: list[str] | None = None,
        bcc: list[str] | None = None,
    ) -> SendResult:
        """Forward the text of a message as a new thread (attachments are not carried)."""
        original = message_to_email(await self.client.get_message(message_id, format="full"))
        params = ComposeParams(
            to=list(to),
            cc=list(cc or []),
            bcc=list(bcc or []),
            subject=forward_subject(original.subject),
            body=forward_body(original, body),
        )
        raw = await self.client.send_message(build_raw_message(params))
        logger.info("email_forwarded", message_id=message_id, recipients=len(to))
        return _send_result(raw)

    # Labels on messages

    async def modify_email(
        self,
        message_id: str,
        add_label_ids: list[str] | None = None,
        remove_label_ids: list[str] | None = None,
    ) -> None:
        await self.client.modify_message(message_id, add_label_ids, remove_label_ids)

    async def mark_as_read(self, message_id: str) -> None:
        await self.modify_email(message_id, remove_label_ids=[LABEL_UNREAD])

    async def mark_as_unread(self, message_id: str) -> None:
        await self.modify_email(message_id, add_label_ids=[LABEL_UNREAD])

    async def star_email(self, message_id: str) -> None:
        await self.modify_email(message_id, add_label_ids=[LABEL_STARRED])

    async def unstar_email(self, message_id: str) -> None:
        await self.modify_email(message_id, remove_label_ids=[LABEL_STARRED])

    async def archive_email(self, message_id: str) -> None:
        await self.modify_email(message_id, remove_label_ids=[LABEL_INBOX])

    async def batch_modify_emails(
        self,
        message_ids: list[str],
        add_label_ids: list[str] | None = None,
        remove_label_ids: list[str] | None = None,
    ) -> None:
        await self.client.batch_modify(message_ids, add_label_ids, remove_label_ids)

    async def trash_email(self, message_id: str) -> None:
        await self.client.trash_message(message_id)

    async def untrash_email(self, message_id: str) -> None:
        await self.client.untrash_message(message_id)

    async def delete_email(self, message_id: str) -> None:
        """Permanently delete a message. This cannot be undone."""
        await self.client.delete_message(message_id)

    # Drafts

    async def list_drafts(self, max_results: int = 10) -> list[Draft]:
        refs = await self.client.list_drafts(max_results)

        async def fetch(draft_id: str) -> Draft | None:
            try:
                return _draft(await self.client.get_draft(draft_id, format="metadata"))
            except GmailAPIError as exc:
                logger.warning("draft_fetch_failed", draft_id=draft_id, error=str(exc))
                return None

        drafts = await asyncio.gather(*(fetch(r["id"]) for r in refs if r.get("id")))
        return [d for d in drafts if d is not None]

    async def get_draft(self, draft_id: str) -> Draft | None:
        try:
            raw = await self.client.get_draft(draft_id)
        except GmailAPIError as exc:
            logger.warning("draft_fetch_failed", draft_id=draft_id, error=str(exc))
            return None
        return _draft(raw)

    async def create_draft(self, params: ComposeParams) -> DraftResult:
        return _draft_result(await self.client.create_draft(build_raw_message(params)))

    async def update_draft(self, draft_id: str, params: ComposeParams) -> DraftResult:
        return _draft_result(await self.client.update_draft(draft_id, build_raw_message(params)))

    async def delete_draft(self, draft_id: str) -> None:
        await self.client.delete_draft(draft_id)

    async def send_draft(self, draft_id: str) -> SendResult:
        """Send a draft; its draft ID is no longer valid afterwards."""
        return _send_result(await self.client.send_draft(draft_id))

    # Labels

    async def get_labels(self) -> list[Label]:
        return [_label(raw) for raw in await self.client.list_labels()]

    async def create_label(
        self,
        name: str,
        background_color: str | None = None,
        text_color: str | None = None,
        label_list_visibility: str | None = None,
        message_list_visibility: str | None = None,
    ) -> Label:
        body: dict[str, Any] = {"name": name}
        if label_list_visibility:
            body["labelListVisibility"] = label_list_visibility
        if message_list_visibility:
            body["messageListVisibility"] = message_list_visibility
        if background_color or text_color:
            color = {}
            if background_color:
                color["backgroundColor"] = background_color
            if text_color:
                color["textColor"] = text_color
            body["color"] = color
        return _label(await self.client.create_label(body))

    async def update_label(self, label_id: str, name: str) -> Label:
        return _label(await self.client.patch_label(label_id, {"name": name}))

    async def delete_label(self, label_id: str) -> None:
        await self.client.delete_label(label_id)

    # Settings

    async def get_vacation_settings(self) -> VacationSettings:
        raw = await self.client.get_vacation()
        return VacationSettings(
            enable_auto_reply=bool(raw.get("enableAutoReply")),
            response_subject=raw.get("responseSubject"),
            response_body_plain_text=raw.get("responseBodyPlainText"),
            response_body_html=raw.get("responseBodyHtml"),
            restrict_to_contacts=raw.get("restrictToContacts"),
            restrict_to_domain=raw.get("restrictToDomain"),
            start_time=_ms_to_datetime(raw.get("startTime")),
            end_time=_ms_to_datetime(raw.get("endTime")),
        )

    async def set_vacation_settings(self, settings: VacationSettings) -> None:
        body: dict[str, Any] = {"enableAutoReply": settings.enable_auto_reply}
        optional = {
            "responseSubject": settings.response_subject,
            "responseBodyPlainText": settings.response_body_plain_text,
            "responseBodyHtml": settings.response_body_html,
            "restrictToContacts": settings.restrict_to_contacts,
            "restrictToDomain": settings.restrict_to_domain,
        }
        body.update({k: v for k, v in optional.items() if v is not None})
        if settings.start_time is not None:
            body["startTime"] = _datetime_to_ms(settings.start_time)
        if settings.end_time is not None:
            body["endTime"] = _datetime_to_ms(settings.end_time)
        await self.client.update_vacation(body)

    # Helpers

    async def _fetch_many(
        self,
        message_ids: list[str],
        convert: Callable[[dict[str, Any]], EmailMessage],
    ) -> EmailListResult:
        results = await asyncio.gather(
            *(self.client.get_message(i, format="full") for i in message_ids),
            return_exceptions=True,
        )

        emails = []
        errors = []
        for message_id, result in zip(message_ids, results):
            if isinstance(result, GmailHttpApiError):
                logger.warning("email_fetch_failed", message_id=message_id, error=str(result))
                errors.append(ItemError(id=message_id, error=str(result)))
            elif isinstance(result, BaseException):
                raise result
            else:
                try:
                    emails.append(convert(result))
                except (ValueError, TypeError) as exc:
                    logger.warning("email_parse_failed", message_id=message_id, error=str(exc))
                    errors.append(ItemError(id=message_id, error=f"Could not parse message: {exc}"))

        if errors:
            logger.info("email_list_partial", fetched=len(emails), failed=len(errors))
        return EmailListResult(emails=emails, errors=errors)
