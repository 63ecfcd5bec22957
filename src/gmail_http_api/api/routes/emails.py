"""Email endpoints."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Query

from gmail_http_api.api.dependencies import ServiceDep, build_args
from gmail_http_api.api.responses import email_list, not_found, ok
from gmail_http_api.commands import (
    AttachmentRef,
    BatchModifyArgs,
    FindMarketingArgs,
    ForwardEmailArgs,
    ForwardFields,
    LabelChangeFields,
    ListEmailsArgs,
    MessageRef,
    ModifyEmailArgs,
    ReplyEmailArgs,
    ReplyFields,
    SearchEmailsArgs,
    SendEmailArgs,
    Tool,
    UnreadCountArgs,
    execute,
)

router = APIRouter(prefix="/api/emails", tags=["emails"])

# Fixed paths are declared before "/{message_id}" so they are not captured by it.


@router.get("")
async def list_emails(
    service: ServiceDep,
    q: str | None = None,
    max_results: Annotated[str | None, Query(alias="maxResults")] = None,
) -> dict[str, Any]:
    args = build_args(ListEmailsArgs, query=q, max_results=max_results)
    return email_list(await execute(service, Tool.LIST_EMAILS, args))


@router.get("/marketing")
async def find_marketing_emails(
    service: ServiceDep,
    max_results: Annotated[str | None, Query(alias="maxResults")] = None,
    include_unsubscribe: Annotated[str | None, Query(alias="includeUnsubscribe")] = None,
) -> dict[str, Any]:
    """Promotional emails, each with its unsubscribe links unless disabled."""
    args = build_args(
        FindMarketingArgs,
        max_results=max_results,
        include_unsubscribe=include_unsubscribe if include_unsubscribe is not None else True,
    )
    return email_list(await execute(service, Tool.FIND_MARKETING_EMAILS, args))


@router.get("/unread/count")
async def get_unread_count(service: ServiceDep, q: str | None = None) -> dict[str, Any]:
    args = build_args(UnreadCountArgs, query=q)
    result = await execute(service, Tool.GET_UNREAD_COUNT, args)
    return ok(count=result.count)


@router.post("/search")
async def search_emails(service: ServiceDep, args: SearchEmailsArgs) -> dict[str, Any]:
    return email_list(await execute(service, Tool.SEARCH_EMAILS, args))


@router.post("/send")
async def send_email(service: ServiceDep, args: SendEmailArgs) -> dict[str, Any]:
    result = await execute(service, Tool.SEND_EMAIL, args)
    return ok(message="Email sent successfully", **result.to_json())


@router.post("/batch/labels")
async def batch_modify(service: ServiceDep, args: BatchModifyArgs) -> dict[str, Any]:
    await execute(service, Tool.BATCH_MODIFY, args)
    return ok(message=f"Modified {len(args.message_ids)} emails")


@router.get("/{message_id}")
async def get_email(message_id: str, service: ServiceDep) -> dict[str, Any]:
    args = build_args(MessageRef, "path", message_id=message_id)
    email = await execute(service, Tool.GET_EMAIL, args)
    if email is None:
        raise not_found("Email")
    return ok(email=email)


@router.delete("/{message_id}")
async def trash_email(message_id: str, service: ServiceDep) -> dict[str, Any]:
    await execute(service, Tool.TRASH_EMAIL, build_args(MessageRef, "path", message_id=message_id))
    return ok(message="Email moved to trash")


@router.delete("/{message_id}/permanent")
async def delete_email(message_id: str, service: ServiceDep) -> dict[str, Any]:
    await execute(service, Tool.DELETE_EMAIL, build_args(MessageRef, "path", message_id=message_id))
    return ok(message="Email permanently deleted")


@router.post("/{message_id}/untrash")
async def untrash_email(message_id: str, service: ServiceDep) -> dict[str, Any]:
    await execute(service, Tool.UNTRASH_EMAIL, build_args(MessageRef, "path", message_id=message_id))
    return ok(message="Email restored from trash")


@router.put("/{message_id}/labels")
async def modify_email(message_id: str, fields: LabelChangeFields, service: ServiceDep) -> dict[str, Any]:
    args = build_args(ModifyEmailArgs, "path", message_id=message_id, **fields.model_dump())
    await execute(service, Tool.MODIFY_EMAIL, args)
    return ok(message="Labels modified successfully")


@router.post("/{message_id}/read")
async def mark_read(message_id: str, service: ServiceDep) -> dict[str, Any]:
    await execute(service, Tool.MARK_READ, build_args(MessageRef, "path", message_id=message_id))
    return ok(message="Email marked as read")


@router.post("/{message_id}/unread")
async def mark_unread(message_id: str, service: ServiceDep) -> dict[str, Any]:
    await execute(service, Tool.MARK_UNREAD, build_args(MessageRef, "path", message_id=message_id))
    return ok(message="Email marked as unread")


@router.post("/{message_id}/star")
async def star_email(message_id: str, service: ServiceDep) -> dict[str, Any]:
    await execute(service, Tool.STAR_EMAIL, build_args(MessageRef, "path", message_id=message_id))
    return ok(message="Email starred")


@router.delete("/{message_id}/star")
async def unstar_email(message_id: str, service: ServiceDep) -> dict[str, Any]:
    await execute(service, Tool.UNSTAR_EMAIL, build_args(MessageRef, "path", message_id=message_id))
    return ok(message="Email unstarred")


@router.post("/{message_id}/archive")
async def archive_email(message_id: str, service: ServiceDep) -> dict[str, Any]:
    await execute(service, Tool.ARCHIVE_EMAIL, build_args(MessageRef, "path", message_id=message_id))
    return ok(message="Email archived")


@router.post("/{message_id}/reply")
async def reply_email(message_id: str, fields: ReplyFields, service: ServiceDep) -> dict[str, Any]:
    args = build_args(ReplyEmailArgs, "path", message_id=message_id, **fields.model_dump())
    result = await execute(service, Tool.REPLY_EMAIL, args)
    return ok(message="Reply sent successfully", **result.to_json())


@router.post("/{message_id}/forward")
async def forward_email(message_id: str, fields: ForwardFields, service: ServiceDep) -> dict[str, Any]:
    args = build_args(ForwardEmailArgs, "path", message_id=message_id, **fields.model_dump())
    result = await execute(service, Tool.FORWARD_EMAIL, args)
    return ok(message="Email forwarded successfully", **result.to_json())


@router.get("/{message_id}/unsubscribe")
async def get_unsubscribe_info(message_id: str, service: ServiceDep) -> dict[str, Any]:
    args = build_args(MessageRef, "path", message_id=message_id)
    info = await execute(service, Tool.GET_UNSUBSCRIBE_INFO, args)
    if info.email is None:
        raise not_found("Email")
    return ok(**info.to_json())


@router.get("/{message_id}/attachments")
async def get_email_attachments(message_id: str, service: ServiceDep) -> dict[str, Any]:
    args = build_args(MessageRef, "path", message_id=message_id)
    email = await execute(service, Tool.GET_EMAIL_ATTACHMENTS, args)
    if email is None:
        raise not_found("Email")
    data = email.to_json()
    attachments = data.pop("attachments")
    return ok(email=data, attachments=attachments)


@router.get("/{message_id}/attachments/{attachment_id}")
async def download_attachment(message_id: str, attachment_id: str, service: ServiceDep) -> dict[str, Any]:
    args = build_args(AttachmentRef, "path", message_id=message_id, attachment_id=attachment_id)
    attachment = await execute(service, Tool.DOWNLOAD_ATTACHMENT, args)
    if attachment is None:
        raise not_found("Attachment")
    return ok(data=attachment.data, size=attachment.size)
