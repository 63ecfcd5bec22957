"""Tool catalogue and command dispatch.

Every operation the API offers is a ``Tool``. Each tool has exactly one
argument model, and both surfaces (REST routes and the generic ``/api/call``
envelope) validate through that model before calling ``execute``. The REST
layer only differs in where the values come from (path, query, body).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Literal

import structlog
from pydantic import ConfigDict, EmailStr, Field, ValidationError, field_validator, model_validator

from gmail_http_api.exceptions import ToolArgumentError, UnknownToolError
from gmail_http_api.gmail.mime import ComposeParams
from gmail_http_api.gmail.service import GmailService
from gmail_http_api.models import (
    ActionResult,
    ApiModel,
    EmailListResult,
    UnreadCount,
    VacationSettings,
)

logger = structlog.get_logger()


class Tool(str, Enum):
    """Names accepted by the generic tool endpoint."""

    LIST_EMAILS = "list_emails"
    GET_EMAIL = "get_email"
    SEARCH_EMAILS = "search_emails"
    SEND_EMAIL = "send_email"
    REPLY_EMAIL = "reply_email"
    FORWARD_EMAIL = "forward_email"
    MODIFY_EMAIL = "modify_email"
    MARK_READ = "mark_read"
    MARK_UNREAD = "mark_unread"
    STAR_EMAIL = "star_email"
    UNSTAR_EMAIL = "unstar_email"
    ARCHIVE_EMAIL = "archive_email"
    TRASH_EMAIL = "trash_email"
    UNTRASH_EMAIL = "untrash_email"
    DELETE_EMAIL = "delete_email"
    BATCH_MODIFY = "batch_modify"
    GET_UNSUBSCRIBE_INFO = "get_unsubscribe_info"
    FIND_MARKETING_EMAILS = "find_marketing_emails"
    GET_UNREAD_COUNT = "get_unread_count"
    GET_THREAD = "get_thread"
    GET_EMAIL_ATTACHMENTS = "get_email_attachments"
    DOWNLOAD_ATTACHMENT = "download_attachment"
    GET_LABELS = "get_labels"
    CREATE_LABEL = "create_label"
    UPDATE_LABEL = "update_label"
    DELETE_LABEL = "delete_label"
    LIST_DRAFTS = "list_drafts"
    GET_DRAFT = "get_draft"
    CREATE_DRAFT = "create_draft"
    UPDATE_DRAFT = "update_draft"
    DELETE_DRAFT = "delete_draft"
    SEND_DRAFT = "send_draft"
    GET_VACATION_SETTINGS = "get_vacation_settings"
    SET_VACATION_SETTINGS = "set_vacation_settings"


# Argument models


class ToolArgs(ApiModel):
    model_config = ConfigDict(extra="ignore")


class NoArgs(ToolArgs):
    pass


class MessageRef(ToolArgs):
    message_id: str = Field(min_length=1)


class ThreadRef(ToolArgs):
    thread_id: str = Field(min_length=1)


class DraftRef(ToolArgs):
    draft_id: str = Field(min_length=1)


class LabelRef(ToolArgs):
    label_id: str = Field(min_length=1)


class AttachmentRef(MessageRef):
    attachment_id: str = Field(min_length=1)


class ListEmailsArgs(ToolArgs):
    query: str | None = None
    max_results: int = Field(default=10, ge=1, le=100)


class SearchEmailsArgs(ToolArgs):
    query: str = Field(min_length=1)
    max_results: int = Field(default=10, ge=1, le=100)


class UnreadCountArgs(ToolArgs):
    query: str | None = None


class FindMarketingArgs(ToolArgs):
    max_results: int = Field(default=10, ge=1, le=100)
    include_unsubscribe: bool = False


class ListDraftsArgs(ToolArgs):
    max_results: int = Field(default=10, ge=1, le=100)


def _wrap_single(value: Any) -> Any:
    # Bots often send one recipient as a bare string.
    if isinstance(value, str):
        return [value]
    return value


def _ascii_only(value: list[str] | None) -> list[str] | None:
    # Address headers are written unencoded; SMTPUTF8 addresses would go out raw.
    for address in value or []:
        if not address.isascii():
            raise ValueError(f"non-ASCII email addresses are not supported: {address}")
    return value


class ComposeFields(ToolArgs):
    to: list[EmailStr] = Field(min_length=1)
    subject: str = Field(min_length=1)
    body: str = Field(min_length=1)
    cc: list[EmailStr] | None = None
    bcc: list[EmailStr] | None = None
    html_body: str | None = None

    @field_validator("to", "cc", "bcc", mode="before")
    @classmethod
    def _wrap_recipients(cls, value: Any) -> Any:
        return _wrap_single(value)

    @field_validator("to", "cc", "bcc")
    @classmethod
    def _check_ascii(cls, value: list[str] | None) -> list[str] | None:
        return _ascii_only(value)

    def to_params(self) -> ComposeParams:
        return ComposeParams(
            to=list(self.to),
            cc=list(self.cc or []),
            bcc=list(self.bcc or []),
            subject=self.subject,
            body=self.body,
            html_body=self.html_body or None,
        )


class SendEmailArgs(ComposeFields):
    pass


class CreateDraftArgs(ComposeFields):
    pass


class UpdateDraftArgs(ComposeFields):
    draft_id: str = Field(min_length=1)


class ReplyFields(ToolArgs):
    body: str = Field(min_length=1)
    html_body: str | None = None
    reply_all: bool = False


class ReplyEmailArgs(ReplyFields):
    message_id: str = Field(min_length=1)


class ForwardFields(ToolArgs):
    to: list[EmailStr] = Field(min_length=1)
    body: str | None = None
    cc: list[EmailStr] | None = None
    bcc: list[EmailStr] | None = None

    @field_validator("to", "cc", "bcc", mode="before")
    @classmethod
    def _wrap_recipients(cls, value: Any) -> Any:
        return _wrap_single(value)

    @field_validator("to", "cc", "bcc")
    @classmethod
    def _check_ascii(cls, value: list[str] | None) -> list[str] | None:
        return _ascii_only(value)


class ForwardEmailArgs(ForwardFields):
    message_id: str = Field(min_length=1)


class LabelChangeFields(ToolArgs):
    """Label IDs to add and remove; the two lists must not overlap."""

    add_label_ids: list[str] | None = None
    remove_label_ids: list[str] | None = None

    @model_validator(mode="after")
    def _reject_overlap(self) -> LabelChangeFields:
        overlap = set(self.add_label_ids or []) & set(self.remove_label_ids or [])
        if overlap:
            raise ValueError(
                "label IDs cannot be both added and removed: " + ", ".join(sorted(overlap))
            )
        return self


class ModifyEmailArgs(LabelChangeFields):
    message_id: str = Field(min_length=1)


class BatchModifyArgs(LabelChangeFields):
    message_ids: list[str] = Field(min_length=1)


class CreateLabelArgs(ToolArgs):
    name: str = Field(min_length=1)
    background_color: str | None = None
    text_color: str | None = None
    label_list_visibility: Literal["labelShow", "labelShowIfUnread", "labelHide"] | None = None
    message_list_visibility: Literal["show", "hide"] | None = None


class LabelNameFields(ToolArgs):
    name: str = Field(min_length=1)


class UpdateLabelArgs(LabelNameFields):
    label_id: str = Field(min_length=1)


class SetVacationArgs(ToolArgs):
    enable_auto_reply: bool
    response_subject: str | None = None
    response_body_plain_text: str | None = None
    response_body_html: str | None = None
    restrict_to_contacts: bool | None = None
    restrict_to_domain: bool | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None

    def to_settings(self) -> VacationSettings:
        return VacationSettings(**self.model_dump())


# Registry

Handler = Callable[[GmailService, Any], Awaitable[Any]]


@dataclass(frozen=True)
class ToolSpec:
    tool: Tool
    method: str
    path: str
    args_model: type[ToolArgs]
    handler: Handler
    description: str


TOOL_SPECS: dict[Tool, ToolSpec] = {}


def _register(
    tool: Tool, method: str, path: str, args_model: type[ToolArgs], description: str
) -> Callable[[Handler], Handler]:
    def decorator(handler: Handler) -> Handler:
        TOOL_SPECS[tool] = ToolSpec(tool, method, path, args_model, handler, description)
        return handler

    return decorator


@_register(Tool.LIST_EMAILS, "GET", "/api/emails", ListEmailsArgs, "List emails, optionally filtered by a Gmail query")
async def _list_emails(service: GmailService, args: ListEmailsArgs) -> EmailListResult:
    return await service.list_emails(args.query, args.max_results)


@_register(Tool.GET_EMAIL, "GET", "/api/emails/:id", MessageRef, "Get one email with its body")
async def _get_email(service: GmailService, args: MessageRef):
    return await service.get_email(args.message_id)


@_register(Tool.SEARCH_EMAILS, "POST", "/api/emails/search", SearchEmailsArgs, "Search emails with Gmail query syntax")
async def _search_emails(service: GmailService, args: SearchEmailsArgs) -> EmailListResult:
    return await service.search_emails(args.query, args.max_results)


@_register(Tool.SEND_EMAIL, "POST", "/api/emails/send", SendEmailArgs, "Send a new email")
async def _send_email(service: GmailService, args: SendEmailArgs):
    return await service.send_email(args.to_params())


@_register(Tool.REPLY_EMAIL, "POST", "/api/emails/:id/reply", ReplyEmailArgs, "Reply to an email in its thread")
async def _reply_email(service: GmailService, args: ReplyEmailArgs):
    return await service.reply_to_email(args.message_id, args.body, args.html_body, args.reply_all)


@_register(Tool.FORWARD_EMAIL, "POST", "/api/emails/:id/forward", ForwardEmailArgs, "Forward an email")
async def _forward_email(service: GmailService, args: ForwardEmailArgs):
    return await service.forward_email(
        args.message_id, list(args.to), args.body, list(args.cc or []), list(args.bcc or [])
    )


@_register(Tool.MODIFY_EMAIL, "PUT", "/api/emails/:id/labels", ModifyEmailArgs, "Add or remove labels on an email")
async def _modify_email(service: GmailService, args: ModifyEmailArgs) -> ActionResult:
    await service.modify_email(args.message_id, args.add_label_ids, args.remove_label_ids)
    return ActionResult(message="Labels modified successfully")


@_register(Tool.MARK_READ, "POST", "/api/emails/:id/read", MessageRef, "Mark an email as read")
async def _mark_read(service: GmailService, args: MessageRef) -> ActionResult:
    await service.mark_as_read(args.message_id)
    return ActionResult(message="Marked as read")


@_register(Tool.MARK_UNREAD, "POST", "/api/emails/:id/unread", MessageRef, "Mark an email as unread")
async def _mark_unread(service: GmailService, args: MessageRef) -> ActionResult:
    await service.mark_as_unread(args.message_id)
    return ActionResult(message="Marked as unread")


@_register(Tool.STAR_EMAIL, "POST", "/api/emails/:id/star", MessageRef, "Star an email")
async def _star_email(service: GmailService, args: MessageRef) -> ActionResult:
    await service.star_email(args.message_id)
    return ActionResult(message="Email starred")


@_register(Tool.UNSTAR_EMAIL, "DELETE", "/api/emails/:id/star", MessageRef, "Remove the star from an email")
async def _unstar_email(service: GmailService, args: MessageRef) -> ActionResult:
    await service.unstar_email(args.message_id)
    return ActionResult(message="Email unstarred")


@_register(Tool.ARCHIVE_EMAIL, "POST", "/api/emails/:id/archive", MessageRef, "Archive an email (remove from inbox)")
async def _archive_email(service: GmailService, args: MessageRef) -> ActionResult:
    await service.archive_email(args.message_id)
    return ActionResult(message="Email archived")


@_register(Tool.TRASH_EMAIL, "DELETE", "/api/emails/:id", MessageRef, "Move an email to trash")
async def _trash_email(service: GmailService, args: MessageRef) -> ActionResult:
    await service.trash_email(args.message_id)
    return ActionResult(message="Moved to trash")


@_register(Tool.UNTRASH_EMAIL, "POST", "/api/emails/:id/untrash", MessageRef, "Restore an email from trash")
async def _untrash_email(service: GmailService, args: MessageRef) -> ActionResult:
    await service.untrash_email(args.message_id)
    return ActionResult(message="Email restored from trash")


@_register(Tool.DELETE_EMAIL, "DELETE", "/api/emails/:id/permanent", MessageRef, "Permanently delete an email")
async def _delete_email(service: GmailService, args: MessageRef) -> ActionResult:
    await service.delete_email(args.message_id)
    return ActionResult(message="Email permanently deleted")


@_register(Tool.BATCH_MODIFY, "POST", "/api/emails/batch/labels", BatchModifyArgs, "Add or remove labels on many emails")
async def _batch_modify(service: GmailService, args: BatchModifyArgs) -> ActionResult:
    await service.batch_modify_emails(args.message_ids, args.add_label_ids, args.remove_label_ids)
    return ActionResult(message=f"Modified {len(args.message_ids)} emails")


@_register(
    Tool.GET_UNSUBSCRIBE_INFO, "GET", "/api/emails/:id/unsubscribe", MessageRef, "Find unsubscribe links in an email"
)
async def _get_unsubscribe_info(service: GmailService, args: MessageRef):
    return await service.get_email_with_unsubscribe(args.message_id)


@_register(
    Tool.FIND_MARKETING_EMAILS, "GET", "/api/emails/marketing", FindMarketingArgs, "Find promotional emails"
)
async def _find_marketing_emails(service: GmailService, args: FindMarketingArgs) -> EmailListResult:
    return await service.find_marketing_emails(args.max_results, args.include_unsubscribe)


@_register(Tool.GET_UNREAD_COUNT, "GET", "/api/emails/unread/count", UnreadCountArgs, "Count unread emails")
async def _get_unread_count(service: GmailService, args: UnreadCountArgs) -> UnreadCount:
    return UnreadCount(count=await service.get_unread_count(args.query))


@_register(Tool.GET_THREAD, "GET", "/api/threads/:id", ThreadRef, "Get every message in a thread")
async def _get_thread(service: GmailService, args: ThreadRef):
    return await service.get_thread(args.thread_id)


@_register(
    Tool.GET_EMAIL_ATTACHMENTS, "GET", "/api/emails/:id/attachments", MessageRef, "List attachments of an email"
)
async def _get_email_attachments(service: GmailService, args: MessageRef):
    return await service.get_email_with_attachments(args.message_id)


@_register(
    Tool.DOWNLOAD_ATTACHMENT,
    "GET",
    "/api/emails/:id/attachments/:attachmentId",
    AttachmentRef,
    "Download an attachment as base64",
)
async def _download_attachment(service: GmailService, args: AttachmentRef):
    return await service.get_attachment(args.message_id, args.attachment_id)


@_register(Tool.GET_LABELS, "GET", "/api/labels", NoArgs, "List labels")
async def _get_labels(service: GmailService, args: NoArgs):
    return await service.get_labels()


@_register(Tool.CREATE_LABEL, "POST", "/api/labels", CreateLabelArgs, "Create a label")
async def _create_label(service: GmailService, args: CreateLabelArgs):
    return await service.create_label(
        args.name,
        background_color=args.background_color,
        text_color=args.text_color,
        label_list_visibility=args.label_list_visibility,
        message_list_visibility=args.message_list_visibility,
    )


@_register(Tool.UPDATE_LABEL, "PUT", "/api/labels/:id", UpdateLabelArgs, "Rename a label")
async def _update_label(service: GmailService, args: UpdateLabelArgs):
    return await service.update_label(args.label_id, args.name)


@_register(Tool.DELETE_LABEL, "DELETE", "/api/labels/:id", LabelRef, "Delete a label")
async def _delete_label(service: GmailService, args: LabelRef) -> ActionResult:
    await service.delete_label(args.label_id)
    return ActionResult(message="Label deleted")


@_register(Tool.LIST_DRAFTS, "GET", "/api/drafts", ListDraftsArgs, "List drafts")
async def _list_drafts(service: GmailService, args: ListDraftsArgs):
    return await service.list_drafts(args.max_results)


@_register(Tool.GET_DRAFT, "GET", "/api/drafts/:id", DraftRef, "Get a draft")
async def _get_draft(service: GmailService, args: DraftRef):
    return await service.get_draft(args.draft_id)


@_register(Tool.CREATE_DRAFT, "POST", "/api/drafts", CreateDraftArgs, "Create a draft")
async def _create_draft(service: GmailService, args: CreateDraftArgs):
    return await service.create_draft(args.to_params())


@_register(Tool.UPDATE_DRAFT, "PUT", "/api/drafts/:id", UpdateDraftArgs, "Replace the content of a draft")
async def _update_draft(service: GmailService, args: UpdateDraftArgs):
    return await service.update_draft(args.draft_id, args.to_params())


@_register(Tool.DELETE_DRAFT, "DELETE", "/api/drafts/:id", DraftRef, "Delete a draft")
async def _delete_draft(service: GmailService, args: DraftRef) -> ActionResult:
    await service.delete_draft(args.draft_id)
    return ActionResult(message="Draft deleted")


@_register(Tool.SEND_DRAFT, "POST", "/api/drafts/:id/send", DraftRef, "Send a draft")
async def _send_draft(service: GmailService, args: DraftRef):
    return await service.send_draft(args.draft_id)


@_register(Tool.GET_VACATION_SETTINGS, "GET", "/api/settings/vacation", NoArgs, "Get vacation responder settings")
async def _get_vacation_settings(service: GmailService, args: NoArgs):
    return await service.get_vacation_settings()


@_register(
    Tool.SET_VACATION_SETTINGS, "PUT", "/api/settings/vacation", SetVacationArgs, "Update vacation responder settings"
)
async def _set_vacation_settings(service: GmailService, args: SetVacationArgs) -> ActionResult:
    await service.set_vacation_settings(args.to_settings())
    return ActionResult(message="Vacation settings updated")


# Dispatch


def resolve_tool(name: str) -> Tool:
    try:
        return Tool(name)
    except ValueError:
        raise UnknownToolError(name) from None


def validation_details(errors: Iterable[Any]) -> list[dict[str, Any]]:
    """Flatten Pydantic errors into ``{field, message, type}`` records."""
    details = []
    for error in errors:
        loc = error.get("loc", ())
        details.append(
            {
                "field": ".".join(str(x) for x in loc) if loc else "arguments",
                "message": error.get("msg", "Validation error"),
                "type": error.get("type", "unknown"),
            }
        )
    return details


def parse_arguments(tool: Tool, arguments: dict[str, Any] | None) -> ToolArgs:
    """Validate raw arguments against the tool's argument model.

    Raises:
        ToolArgumentError: If the arguments do not satisfy the model.
    """
    spec = TOOL_SPECS[tool]
    try:
        return spec.args_model.model_validate(arguments or {})
    except ValidationError as exc:
        details = validation_details(exc.errors())
        summary = "; ".join(f"{d['field']}: {d['message']}" for d in details)
        raise ToolArgumentError(f"Invalid arguments for {tool.value}: {summary}", details) from exc


async def execute(service: GmailService, tool: Tool, args: ToolArgs) -> Any:
    """Run a tool with already-validated arguments."""
    spec = TOOL_SPECS[tool]
    if not isinstance(args, spec.args_model):
        raise TypeError(f"{tool.value} expects {spec.args_model.__name__}, got {type(args).__name__}")
    logger.info("tool_executing", tool=tool.value)
    return await spec.handler(service, args)


async def dispatch(service: GmailService, name: str, arguments: dict[str, Any] | None) -> Any:
    """Resolve, validate and run a tool call from the generic envelope."""
    tool = resolve_tool(name)
    args = parse_arguments(tool, arguments)
    return await execute(service, tool, args)


def to_data(result: Any) -> Any:
    """JSON-ready form of a tool result.

    List results become a plain list of emails; per-item failures are
    reported separately by the caller.
    """
    if isinstance(result, EmailListResult):
        return [to_data(email) for email in result.emails]
    if isinstance(result, ApiModel):
        return result.to_json()
    if isinstance(result, list):
        return [to_data(item) for item in result]
    return result
