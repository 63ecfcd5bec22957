"""Tool catalogue and the generic ``{tool, arguments}`` call endpoint.

Bots post ``{"tool": "list_emails", "arguments": {"maxResults": 5}}`` to
``/api/call`` instead of addressing the REST path. Arguments go through the
same models as the REST routes.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter
from pydantic import BaseModel

from gmail_http_api.api.dependencies import ServiceDep
from gmail_http_api.api.errors import error_response
from gmail_http_api.commands import TOOL_SPECS, dispatch, to_data
from gmail_http_api.models import EmailListResult

router = APIRouter(prefix="/api", tags=["tools"])
logger = structlog.get_logger()


class ToolCall(BaseModel):
    tool: str | None = None
    arguments: dict[str, Any] | None = None


@router.get("/tools")
async def list_tools() -> dict[str, Any]:
    return {
        "success": True,
        "tools": [
            {
                "name": spec.tool.value,
                "method": spec.method,
                "path": spec.path,
                "description": spec.description,
            }
            for spec in TOOL_SPECS.values()
        ],
    }


@router.post("/call")
async def call_tool(call: ToolCall, service: ServiceDep) -> Any:
    """Run one tool by name.

    Lookups that find nothing return ``data: null`` with status 200 rather
    than the 404 the REST routes use.
    """
    if not call.tool:
        return error_response(400, "Missing required field: tool")

    result = await dispatch(service, call.tool, call.arguments)
    body: dict[str, Any] = {"success": True, "data": to_data(result)}
    if isinstance(result, EmailListResult) and result.errors:
        body["errors"] = [e.to_json() for e in result.errors]
    logger.info("tool_called", tool=call.tool)
    return body
