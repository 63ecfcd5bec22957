"""FastAPI dependency injection providers."""

from __future__ import annotations

import hmac
from typing import Annotated, Any, TypeVar

import structlog
from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from gmail_http_api.commands import ToolArgs
from gmail_http_api.config import Settings
from gmail_http_api.gmail.service import GmailService

logger = structlog.get_logger()

A = TypeVar("A", bound=ToolArgs)

UNAUTHORIZED = "Unauthorized - Invalid or missing API key"


def get_service(request: Request) -> GmailService:
    """Get the Gmail service bound to the application."""
    return request.app.state.service


async def require_api_key(
    request: Request,
    x_api_key: Annotated[str | None, Header(alias="x-api-key")] = None,
) -> None:
    """Reject the request unless it carries the configured shared key.

    No configured key means the check is disabled.

    Raises:
        HTTPException: 401 when the key is missing or wrong.
    """
    settings: Settings = request.app.state.settings
    if not settings.auth_enabled:
        return
    expected = settings.api_key or ""
    if not x_api_key or not hmac.compare_digest(x_api_key.encode(), expected.encode()):
        logger.warning("api_key_rejected", path=request.url.path, provided=bool(x_api_key))
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED)


def build_args(model: type[A], source: str = "query", **values: Any) -> A:
    """Validate request values against a tool's argument model.

    ``None`` values are dropped so model defaults apply. Values are keyed by
    their wire alias, so error locations name the parameter the client sent.
    Failures are raised as ``RequestValidationError`` and rendered like any
    other schema failure.
    """
    fields = model.model_fields
    data = {
        (fields[k].alias if k in fields and fields[k].alias else k): v
        for k, v in values.items()
        if v is not None
    }
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        errors = [{**e, "loc": (source, *e.get("loc", ()))} for e in exc.errors()]
        raise RequestValidationError(errors) from exc


ServiceDep = Annotated[GmailService, Depends(get_service)]
