"""Thread endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from gmail_http_api.api.dependencies import ServiceDep, build_args
from gmail_http_api.api.responses import not_found, ok
from gmail_http_api.commands import ThreadRef, Tool, execute

router = APIRouter(prefix="/api/threads", tags=["threads"])


@router.get("/{thread_id}")
async def get_thread(thread_id: str, service: ServiceDep) -> dict[str, Any]:
    thread = await execute(service, Tool.GET_THREAD, build_args(ThreadRef, "path", thread_id=thread_id))
    if thread is None:
        raise not_found("Thread")
    return ok(thread=thread)
