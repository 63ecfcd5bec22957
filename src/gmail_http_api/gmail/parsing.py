"""Helpers for turning Gmail API message resources into internal models.

Gmail returns a message as a flat header list plus a tree of MIME parts. The
tree is converted into ``LeafPart`` / ``MultiPart`` nodes and walked
iteratively, so body resolution and attachment discovery do not depend on
nesting depth.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any, Iterator, Union

from gmail_http_api.models import AttachmentInfo, EmailMessage


class HeaderMap:
    """Case-insensitive header lookup; the first occurrence of a name wins."""

    def __init__(self, headers: list[dict[str, Any]] | None) -> None:
        self._values: dict[str, str] = {}
        for h in headers or []:
            name = h.get("name")
            value = h.get("value")
            if isinstance(name, str) and isinstance(value, str):
                self._values.setdefault(name.lower(), value)

    @classmethod
    def from_message(cls, message: dict[str, Any]) -> HeaderMap:
        payload = message.get("payload") or {}
        return cls(payload.get("headers"))

    def get(self, name: str, default: str = "") -> str:
        return self._values.get(name.lower(), default)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._values


@dataclass(frozen=True)
class LeafPart:
    """A MIME part carrying content (inline data or an attachment reference)."""

    mime_type: str
    filename: str = ""
    data: str | None = None
    attachment_id: str | None = None
    size: int = 0


@dataclass(frozen=True)
class MultiPart:
    """A container part (multipart/*) holding child parts."""

    mime_type: str
    parts: tuple[PartNode, ...] = ()
    data: str | None = None


PartNode = Union[LeafPart, MultiPart]


def parse_part(part: dict[str, Any] | None) -> PartNode:
    """Convert a Gmail ``MessagePart`` dict into a part tree.

    Built iteratively: deeply nested messages do not recurse.
    """
    root_raw = part or {}
    order: list[dict[str, Any]] = []
    stack = [root_raw]
    while stack:
        raw = stack.pop()
        order.append(raw)
        stack.extend(raw.get("parts") or [])

    # Children were appended after their parent, so converting in reverse
    # visit order guarantees every child is converted before its parent.
    nodes: dict[int, PartNode] = {}
    for raw in reversed(order):
        mime_type = (raw.get("mimeType") or "").lower()
        children = raw.get("parts") or []
        body = raw.get("body") or {}
        if children:
            nodes[id(raw)] = MultiPart(
                mime_type=mime_type,
                parts=tuple(nodes[id(c)] for c in children),
                data=body.get("data"),
            )
        else:
            nodes[id(raw)] = LeafPart(
                mime_type=mime_type,
                filename=raw.get("filename") or "",
                data=body.get("data"),
                attachment_id=body.get("attachmentId"),
                size=int(body.get("size") or 0),
            )
    return nodes[id(root_raw)]


def iter_leaves(root: PartNode) -> Iterator[LeafPart]:
    """Yield leaf parts in document (pre-order) order."""
    stack: list[PartNode] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, LeafPart):
            yield node
        else:
            stack.extend(reversed(node.parts))


def decode_body_data(data: str) -> str:
    """Decode Gmail's URL-safe base64 body data into text.

    Data that is not valid base64 decodes to an empty string.
    """
    padded = data + "=" * (-len(data) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
    except (binascii.Error, UnicodeError):
        return ""
    return raw.decode("utf-8", errors="replace")


def find_body(root: PartNode) -> str:
    """Resolve the readable body of a message.

    A body carried directly on the top-level payload wins. Otherwise the first
    text/plain part is used, falling back to the first text/html part. Parts
    with a filename are attachments and never count as the body.
    """
    if root.data:
        return decode_body_data(root.data)

    first_html: LeafPart | None = None
    for leaf in iter_leaves(root):
        if leaf.filename or not leaf.data:
            continue
        if leaf.mime_type == "text/plain":
            return decode_body_data(leaf.data)
        if leaf.mime_type == "text/html" and first_html is None:
            first_html = leaf

    if first_html is not None and first_html.data:
        return decode_body_data(first_html.data)
    return ""


def collect_attachments(root: PartNode) -> list[AttachmentInfo]:
    """Every part with both a filename and an attachment ID, at any depth."""
    return [
        AttachmentInfo(
            filename=leaf.filename,
            mime_type=leaf.mime_type,
            size=leaf.size,
            attachment_id=leaf.attachment_id,
        )
        for leaf in iter_leaves(root)
        if leaf.filename and leaf.attachment_id
    ]


def message_body(message: dict[str, Any]) -> str:
    return find_body(parse_part(message.get("payload")))


def message_to_email(message: dict[str, Any], include_body: bool = True) -> EmailMessage:
    """Convert a Gmail API message (format=full) to EmailMessage.

    Args:
        message: Gmail API message dict.
        include_body: Whether to decode the text body.

    Returns:
        EmailMessage: Parsed message.
    """

    headers = HeaderMap.from_message(message)

    label_ids = message.get("labelIds") or []
    if not isinstance(label_ids, list):
        label_ids = []

    return EmailMessage(
        id=str(message.get("id") or ""),
        thread_id=str(message.get("threadId") or ""),
        subject=headers.get("Subject"),
        sender=headers.get("From"),
        to=headers.get("To"),
        date=headers.get("Date"),
        snippet=message.get("snippet") or "",
        body=message_body(message) if include_body else None,
        labels=[str(x) for x in label_ids if isinstance(x, str)],
    )
