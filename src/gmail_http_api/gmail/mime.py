"""Raw RFC 2822 message composition for Gmail's send/draft endpoints.

Gmail accepts a complete raw message encoded as URL-safe base64. Messages are
assembled line by line: headers, then either a single text/plain body or a
multipart/alternative body with the plain part first and the HTML part second.
Header and body lines are not folded.
"""

from __future__ import annotations

import base64
import re
import uuid
from dataclasses import dataclass, field

_NON_ASCII = re.compile(r"[^\x00-\x7f]")

CRLF = "\r\n"


@dataclass(frozen=True)
class ComposeParams:
    to: list[str]
    subject: str
    body: str
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    html_body: str | None = None
    in_reply_to: str | None = None
    references: str | None = None


def encode_header(value: str) -> str:
    """Encode a header value as a MIME encoded-word when it is not pure ASCII.

    ASCII-only values are returned unchanged.
    """
    if not _NON_ASCII.search(value):
        return value
    encoded = base64.b64encode(value.encode("utf-8")).decode("ascii")
    return f"=?UTF-8?B?{encoded}?="


def new_boundary() -> str:
    return f"----=_Part_{uuid.uuid4().hex}"


def compose_message(params: ComposeParams, boundary: str | None = None) -> str:
    """Build the raw message text for the given parameters.

    Args:
        params: Recipients, subject, bodies and optional threading headers.
        boundary: Multipart boundary override; a random token is used if None.

    Returns:
        The raw message with CRLF line endings.
    """
    lines: list[str] = [f"To: {', '.join(params.to)}"]
    if params.cc:
        lines.append(f"Cc: {', '.join(params.cc)}")
    if params.bcc:
        lines.append(f"Bcc: {', '.join(params.bcc)}")
    lines.append(f"Subject: {encode_header(params.subject)}")
    if params.in_reply_to:
        lines.append(f"In-Reply-To: {params.in_reply_to}")
    if params.references:
        lines.append(f"References: {params.references}")
    lines.append("MIME-Version: 1.0")

    if params.html_body:
        boundary = boundary or new_boundary()
        lines.extend(
            [
                f'Content-Type: multipart/alternative; boundary="{boundary}"',
                "",
                f"--{boundary}",
                "Content-Type: text/plain; charset=UTF-8",
                "",
                params.body,
                "",
                f"--{boundary}",
                "Content-Type: text/html; charset=UTF-8",
                "",
                params.html_body,
                "",
                f"--{boundary}--",
            ]
        )
    else:
        lines.extend(["Content-Type: text/plain; charset=UTF-8", "", params.body])

    return CRLF.join(lines)


def encode_raw(message: str) -> str:
    """URL-safe base64 of the raw message with trailing padding stripped."""
    encoded = base64.urlsafe_b64encode(message.encode("utf-8")).decode("ascii")
    return encoded.rstrip("=")


def build_raw_message(params: ComposeParams) -> str:
    return encode_raw(compose_message(params))
