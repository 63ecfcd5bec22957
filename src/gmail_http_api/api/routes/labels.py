"""Label endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from gmail_http_api.api.dependencies import ServiceDep, build_args
from gmail_http_api.api.responses import ok, ok_list
from gmail_http_api.commands import (
    CreateLabelArgs,
    LabelNameFields,
    LabelRef,
    NoArgs,
    Tool,
    UpdateLabelArgs,
    execute,
)

router = APIRouter(prefix="/api/labels", tags=["labels"])


@router.get("")
async def get_labels(service: ServiceDep) -> dict[str, Any]:
    return ok_list("labels", await execute(service, Tool.GET_LABELS, NoArgs()))


@router.post("")
async def create_label(service: ServiceDep, args: CreateLabelArgs) -> dict[str, Any]:
    label = await execute(service, Tool.CREATE_LABEL, args)
    return ok(message="Label created successfully", label=label)


@router.put("/{label_id}")
async def update_label(label_id: str, fields: LabelNameFields, service: ServiceDep) -> dict[str, Any]:
    args = build_args(UpdateLabelArgs, "path", label_id=label_id, **fields.model_dump())
    label = await execute(service, Tool.UPDATE_LABEL, args)
    return ok(message="Label updated successfully", label=label)


@router.delete("/{label_id}")
async def delete_label(label_id: str, service: ServiceDep) -> dict[str, Any]:
    await execute(service, Tool.DELETE_LABEL, build_args(LabelRef, "path", label_id=label_id))
    return ok(message="Label deleted successfully")
