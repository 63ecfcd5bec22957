"""Success envelopes shared by the REST routes."""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status

from gmail_http_api.models import ApiModel, EmailListResult


def ok(**payload: Any) -> dict[str, Any]:
    """``{success: true, ...payload}`` with models dumped by alias."""
    body: dict[str, Any] = {"success": True}
    for key, value in payload.items():
        if isinstance(value, ApiModel):
            value = value.to_json()
        elif isinstance(value, list):
            value = [v.to_json() if isinstance(v, ApiModel) else v for v in value]
        body[key] = value
    return body


def ok_list(key: str, items: list[Any], errors: list[Any] | None = None) -> dict[str, Any]:
    body = ok(count=len(items), **{key: items})
    if errors:
        body["errors"] = [e.to_json() for e in errors]
    return body


def email_list(result: EmailListResult) -> dict[str, Any]:
    """Envelope for a list of emails; per-item failures go under ``errors``."""
    return ok_list("emails", result.emails, result.errors)


def not_found(what: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")
