"""Draft endpoints."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Query

from gmail_http_api.api.dependencies import ServiceDep, build_args
from gmail_http_api.api.responses import not_found, ok, ok_list
from gmail_http_api.commands import (
    ComposeFields,
    CreateDraftArgs,
    DraftRef,
    ListDraftsArgs,
    Tool,
    UpdateDraftArgs,
    execute,
)

router = APIRouter(prefix="/api/drafts", tags=["drafts"])


@router.get("")
async def list_drafts(
    service: ServiceDep,
    max_results: Annotated[str | None, Query(alias="maxResults")] = None,
) -> dict[str, Any]:
    args = build_args(ListDraftsArgs, max_results=max_results)
    return ok_list("drafts", await execute(service, Tool.LIST_DRAFTS, args))


@router.post("")
async def create_draft(service: ServiceDep, args: CreateDraftArgs) -> dict[str, Any]:
    result = await execute(service, Tool.CREATE_DRAFT, args)
    return ok(message="Draft created successfully", **result.to_json())


@router.get("/{draft_id}")
async def get_draft(draft_id: str, service: ServiceDep) -> dict[str, Any]:
    draft = await execute(service, Tool.GET_DRAFT, build_args(DraftRef, "path", draft_id=draft_id))
    if draft is None:
        raise not_found("Draft")
    return ok(draft=draft)


@router.put("/{draft_id}")
async def update_draft(draft_id: str, fields: ComposeFields, service: ServiceDep) -> dict[str, Any]:
    args = build_args(UpdateDraftArgs, "path", draft_id=draft_id, **fields.model_dump())
    result = await execute(service, Tool.UPDATE_DRAFT, args)
    return ok(message="Draft updated successfully", **result.to_json())


@router.delete("/{draft_id}")
async def delete_draft(draft_id: str, service: ServiceDep) -> dict[str, Any]:
    await execute(service, Tool.DELETE_DRAFT, build_args(DraftRef, "path", draft_id=draft_id))
    return ok(message="Draft deleted successfully")


@router.post("/{draft_id}/send")
async def send_draft(draft_id: str, service: ServiceDep) -> dict[str, Any]:
    """Send a draft; the draft ID stops being valid once sent."""
    result = await execute(service, Tool.SEND_DRAFT, build_args(DraftRef, "path", draft_id=draft_id))
    return ok(message="Draft sent successfully", **result.to_json())
