import re

RE_REPLY_PREFIX = re.compile(r"^\s*re:", re.IGNORECASE)
RE_FORWARD_PREFIX = re.compile(r"^\s*fwd:", re.IGNORECASE)


def reply_subject(subject: str | None) -> str:
    s = (subject or "").strip()
    if RE_REPLY_PREFIX.match(s):
        return s
    return f"Re: {s}"


def forward_subject(subject: str | None) -> str:
    s = (subject or "").strip()
    if RE_FORWARD_PREFIX.match(s):
        return s
    return f"Fwd: {s}"
