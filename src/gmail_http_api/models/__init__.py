"""Data models for the Gmail HTTP API.

These are transient request/response shapes; nothing here is persisted. All
models serialise with camelCase aliases (``threadId``, ``from``) so the JSON
surface matches what Gmail clients expect.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model with camelCase aliases that also accepts field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict[str, Any]:
        """Dump using wire aliases and JSON-compatible values."""
        return self.model_dump(by_alias=True, mode="json", serialize_as_any=True)


class EmailMessage(ApiModel):
    """A Gmail message reduced to the fields the API exposes."""

    id: str = Field(description="Gmail message ID")
    thread_id: str = Field(default="", description="Gmail thread ID")
    subject: str = Field(default="", description="Subject header")
    sender: str = Field(default="", alias="from", description="Raw From header")
    to: str = Field(default="", description="Raw To header")
    date: str = Field(default="", description="Raw Date header")
    snippet: str = Field(default="", description="Short preview text")
    body: str | None = Field(default=None, description="Decoded text body")
    labels: list[str] = Field(default_factory=list, description="Gmail label IDs")


class ItemError(ApiModel):
    """A single message that could not be fetched during a list."""

    id: str
    error: str


class EmailListResult(ApiModel):
    """Result of a list/search: messages in id order plus per-item failures."""

    emails: list[EmailMessage] = Field(default_factory=list)
    errors: list[ItemError] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.emails)


class Thread(ApiModel):
    id: str
    history_id: str = ""
    messages: list[EmailMessage] = Field(default_factory=list)


class DraftMessage(ApiModel):
    id: str = ""
    thread_id: str = ""
    subject: str = ""
    to: str = ""
    snippet: str = ""


class Draft(ApiModel):
    id: str
    message: DraftMessage


class DraftResult(ApiModel):
    id: str
    message_id: str = ""
    thread_id: str = ""


class SendResult(ApiModel):
    id: str
    thread_id: str = ""


class Label(ApiModel):
    id: str
    name: str
    type: str = ""
    messages_total: int | None = None
    messages_unread: int | None = None


class AttachmentInfo(ApiModel):
    """Attachment descriptor; only addressable together with its message ID."""

    filename: str
    mime_type: str
    size: int = 0
    attachment_id: str


class AttachmentData(ApiModel):
    size: int = 0
    data: str = Field(default="", description="URL-safe base64 payload as returned by Gmail")


class EmailSummary(ApiModel):
    id: str
    subject: str = ""
    sender: str = Field(default="", alias="from")


class EmailWithAttachments(EmailSummary):
    attachments: list[AttachmentInfo] = Field(default_factory=list)


class UnsubscribeInfo(ApiModel):
    email: EmailSummary | None = None
    unsubscribe_links: list[str] = Field(default_factory=list)
    unsubscribe_email: str | None = None

    @property
    def has_unsubscribe(self) -> bool:
        return bool(self.unsubscribe_links) or self.unsubscribe_email is not None

    def to_json(self) -> dict[str, Any]:
        data = super().to_json()
        data["hasUnsubscribe"] = self.has_unsubscribe
        return data


class MarketingEmail(EmailMessage):
    unsubscribe_links: list[str] = Field(default_factory=list)
    unsubscribe_email: str | None = None
    has_unsubscribe: bool = False


class VacationSettings(ApiModel):
    """Vacation responder settings; times are ISO-8601 at this boundary."""

    enable_auto_reply: bool = False
    response_subject: str | None = None
    response_body_plain_text: str | None = None
    response_body_html: str | None = None
    restrict_to_contacts: bool | None = None
    restrict_to_domain: bool | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None


class ActionResult(ApiModel):
    """Confirmation for operations that return no entity."""

    message: str


class UnreadCount(ApiModel):
    count: int


__all__ = [
    "ActionResult",
    "ApiModel",
    "AttachmentData",
    "AttachmentInfo",
    "Draft",
    "DraftMessage",
    "DraftResult",
    "EmailListResult",
    "EmailMessage",
    "EmailSummary",
    "EmailWithAttachments",
    "ItemError",
    "Label",
    "MarketingEmail",
    "SendResult",
    "Thread",
    "UnreadCount",
    "UnsubscribeInfo",
    "VacationSettings",
]
