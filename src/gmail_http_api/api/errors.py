"""Exception handlers rendering the ``{success: false, error, details?}`` envelope."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gmail_http_api.commands import validation_details
from gmail_http_api.exceptions import GmailHttpApiError, ToolArgumentError, UnknownToolError

logger = structlog.get_logger()

INTERNAL_ERROR = "Internal server error"
ENDPOINT_NOT_FOUND = "Endpoint not found"


def error_response(
    status_code: int, error: str, details: list[dict[str, Any]] | None = None
) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "error": error}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema failures on path, query or body become a 400 with field details."""
    details = validation_details(exc.errors())
    logger.warning("validation_error", path=request.url.path, error_count=len(details))
    return error_response(400, "Invalid request", details)


async def tool_argument_error_handler(request: Request, exc: ToolArgumentError) -> JSONResponse:
    logger.warning("tool_argument_error", path=request.url.path, error=str(exc))
    return error_response(400, str(exc), exc.details)


async def unknown_tool_handler(request: Request, exc: UnknownToolError) -> JSONResponse:
    logger.warning("unknown_tool", tool=exc.tool)
    return error_response(400, str(exc))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unmatched paths and methods both report a missing endpoint.
    if exc.status_code in (404, 405) and exc.detail in ("Not Found", "Method Not Allowed"):
        return error_response(404, ENDPOINT_NOT_FOUND)
    detail = exc.detail if isinstance(exc.detail, str) else INTERNAL_ERROR
    return error_response(exc.status_code, detail)


async def gmail_error_handler(request: Request, exc: GmailHttpApiError) -> JSONResponse:
    logger.error(
        "request_failed",
        path=request.url.path,
        exc_type=type(exc).__name__,
        error=str(exc),
        status_code=getattr(exc, "status_code", None),
    )
    return error_response(500, str(exc) or INTERNAL_ERROR)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", path=request.url.path, exc_type=type(exc).__name__)
    return error_response(500, str(exc) or INTERNAL_ERROR)


def setup_error_handlers(app: FastAPI) -> None:
    """Register all error handlers for the application."""
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ToolArgumentError, tool_argument_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(UnknownToolError, unknown_tool_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(GmailHttpApiError, gmail_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
