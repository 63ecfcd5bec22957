"""Account settings endpoints (vacation responder)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from gmail_http_api.api.dependencies import ServiceDep
from gmail_http_api.api.responses import ok
from gmail_http_api.commands import NoArgs, SetVacationArgs, Tool, execute

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("/vacation")
async def get_vacation_settings(service: ServiceDep) -> dict[str, Any]:
    return ok(settings=await execute(service, Tool.GET_VACATION_SETTINGS, NoArgs()))


@router.put("/vacation")
async def set_vacation_settings(service: ServiceDep, args: SetVacationArgs) -> dict[str, Any]:
    await execute(service, Tool.SET_VACATION_SETTINGS, args)
    return ok(message="Vacation settings updated successfully")
