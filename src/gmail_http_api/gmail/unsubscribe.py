"""Best-effort unsubscribe link discovery.

Sources, in order:
- The List-Unsubscribe header (RFC 2369): bracketed ``<mailto:...>`` and
  ``<https://...>`` entries.
- URLs in the body text whose path or query mentions unsubscribing.

These are text heuristics; a message can carry links this misses.
"""

from __future__ import annotations

import re
from urllib.parse import unquote

RE_BRACKETED = re.compile(r"<([^>]+)>")
RE_URL = re.compile(r"https?://[^\s<>\"')\]]+", re.IGNORECASE)
RE_UNSUBSCRIBE_HINT = re.compile(
    r"unsubscribe|unsub|opt[-_]?out|email[-_]?preferences|manage[-_]?preferences|remove[-_]?me",
    re.IGNORECASE,
)

# Punctuation that commonly trails a URL in prose.
_TRAILING = ".,;:!?"


def parse_list_unsubscribe(value: str | None) -> tuple[list[str], str | None]:
    """Split a List-Unsubscribe header into http(s) links and a mailto address.

    Returns:
        (links, email): the http(s) entries in header order and the address
        of the first mailto entry, or None.
    """
    links: list[str] = []
    email: str | None = None
    for entry in RE_BRACKETED.findall(value or ""):
        entry = entry.strip()
        lowered = entry.lower()
        if lowered.startswith("mailto:"):
            if email is None:
                address = entry[len("mailto:") :].split("?", 1)[0]
                email = unquote(address).strip() or None
        elif lowered.startswith(("http://", "https://")):
            links.append(entry)
    return links, email


def find_unsubscribe_links(text: str | None) -> list[str]:
    """URLs in free text that look like unsubscribe or preference links."""
    found: list[str] = []
    for match in RE_URL.findall(text or ""):
        url = match.rstrip(_TRAILING)
        if RE_UNSUBSCRIBE_HINT.search(url):
            found.append(url)
    return found


def merge_links(*groups: list[str]) -> list[str]:
    seen: set[str] = set()
    merged: list[str] = []
    for group in groups:
        for link in group:
            if link not in seen:
                seen.add(link)
                merged.append(link)
    return merged
