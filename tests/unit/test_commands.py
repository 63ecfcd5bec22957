"""Unit tests for the tool catalogue and argument models."""

import pytest
from factories import make_message
from pydantic import ValidationError

from gmail_http_api.commands import (
    TOOL_SPECS,
    BatchModifyArgs,
    ForwardEmailArgs,
    ListEmailsArgs,
    ModifyEmailArgs,
    SendEmailArgs,
    SetVacationArgs,
    Tool,
    dispatch,
    parse_arguments,
    to_data,
)
from gmail_http_api.exceptions import NotFoundError, ToolArgumentError, UnknownToolError
from gmail_http_api.gmail.parsing import message_to_email
from gmail_http_api.models import ActionResult, EmailListResult, ItemError


class TestCatalogue:
    """Test suite for the tool registry."""

    def test_every_tool_is_registered(self) -> None:
        assert set(TOOL_SPECS) == set(Tool)
        assert len(TOOL_SPECS) == 34

    def test_paths_are_unique_per_method(self) -> None:
        routes = [(spec.method, spec.path) for spec in TOOL_SPECS.values()]

        assert len(routes) == len(set(routes))


class TestArgumentModels:
    """Test suite for the shared argument schemas."""

    def test_max_results_defaults_and_bounds(self) -> None:
        assert ListEmailsArgs().max_results == 10
        assert ListEmailsArgs(maxResults="25").max_results == 25
        with pytest.raises(ValidationError):
            ListEmailsArgs(maxResults=0)
        with pytest.raises(ValidationError):
            ListEmailsArgs(maxResults=101)

    def test_single_recipient_is_wrapped(self) -> None:
        args = SendEmailArgs.model_validate(
            {"to": "a@example.com", "subject": "Hi", "body": "Hello", "cc": "c@example.com"}
        )

        assert args.to == ["a@example.com"]
        assert args.cc == ["c@example.com"]

    def test_recipients_must_be_addresses(self) -> None:
        with pytest.raises(ValidationError):
            SendEmailArgs.model_validate({"to": ["not-an-address"], "subject": "Hi", "body": "x"})

    def test_non_ascii_addresses_are_rejected(self) -> None:
        with pytest.raises(ValidationError, match="non-ASCII"):
            SendEmailArgs.model_validate({"to": ["josé@example.com"], "subject": "Hi", "body": "x"})
        with pytest.raises(ValidationError, match="non-ASCII"):
            ForwardEmailArgs.model_validate({"messageId": "m1", "to": "a@example.com", "cc": "josé@example.com"})

    def test_recipients_required(self) -> None:
        with pytest.raises(ValidationError):
            SendEmailArgs.model_validate({"to": [], "subject": "Hi", "body": "x"})

    def test_to_params_maps_html_body(self) -> None:
        params = SendEmailArgs.model_validate(
            {"to": ["a@example.com"], "subject": "Hi", "body": "x", "htmlBody": "<b>x</b>"}
        ).to_params()

        assert params.html_body == "<b>x</b>"
        assert params.cc == []

    def test_forward_accepts_single_recipient(self) -> None:
        args = ForwardEmailArgs.model_validate({"messageId": "m1", "to": "d@example.com"})

        assert args.to == ["d@example.com"]
        assert args.body is None

    def test_overlapping_label_changes_are_rejected(self) -> None:
        with pytest.raises(ValidationError, match="STARRED"):
            ModifyEmailArgs.model_validate(
                {"messageId": "m1", "addLabelIds": ["STARRED", "Label_1"], "removeLabelIds": ["STARRED"]}
            )

    def test_disjoint_label_changes_are_accepted(self) -> None:
        args = BatchModifyArgs.model_validate(
            {"messageIds": ["m1", "m2"], "addLabelIds": ["Label_1"], "removeLabelIds": ["INBOX"]}
        )

        assert args.message_ids == ["m1", "m2"]

    def test_vacation_times_parse_iso_8601(self) -> None:
        args = SetVacationArgs.model_validate(
            {"enableAutoReply": True, "startTime": "2024-07-01T09:00:00Z"}
        )

        settings = args.to_settings()

        assert settings.enable_auto_reply is True
        assert settings.start_time.year == 2024
        assert settings.end_time is None


class TestParseArguments:
    """Test suite for parse_arguments."""

    def test_missing_required_field(self) -> None:
        with pytest.raises(ToolArgumentError) as exc_info:
            parse_arguments(Tool.GET_EMAIL, {})

        assert str(exc_info.value).startswith("Invalid arguments for get_email: messageId")
        assert exc_info.value.details[0]["field"] == "messageId"

    def test_none_arguments_use_defaults(self) -> None:
        args = parse_arguments(Tool.LIST_EMAILS, None)

        assert isinstance(args, ListEmailsArgs)
        assert args.max_results == 10

    def test_unknown_keys_are_ignored(self) -> None:
        args = parse_arguments(Tool.GET_LABELS, {"verbose": True})

        assert args.model_dump() == {}


class TestDispatch:
    """Test suite for dispatch and to_data."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self, service) -> None:
        with pytest.raises(UnknownToolError, match="Unknown tool: explode"):
            await dispatch(service, "explode", {})

    @pytest.mark.asyncio
    async def test_void_operation_returns_confirmation(self, service, mock_client) -> None:
        result = await dispatch(service, "mark_read", {"messageId": "m1"})

        assert result == ActionResult(message="Marked as read")
        mock_client.modify_message.assert_awaited_once_with("m1", None, ["UNREAD"])

    @pytest.mark.asyncio
    async def test_batch_modify_reports_count(self, service) -> None:
        result = await dispatch(service, "batch_modify", {"messageIds": ["a", "b", "c"]})

        assert result.message == "Modified 3 emails"

    @pytest.mark.asyncio
    async def test_get_email_missing_is_none(self, service, mock_client) -> None:
        mock_client.get_message.side_effect = NotFoundError("gone")

        assert await dispatch(service, "get_email", {"messageId": "missing"}) is None

    @pytest.mark.asyncio
    async def test_unread_count(self, service, mock_client) -> None:
        mock_client.estimate_messages.return_value = 7

        result = await dispatch(service, "get_unread_count", {})

        assert to_data(result) == {"count": 7}

    def test_to_data_flattens_email_lists(self) -> None:
        result = EmailListResult(
            emails=[message_to_email(make_message("m1"))],
            errors=[ItemError(id="m2", error="gone")],
        )

        data = to_data(result)

        assert [e["id"] for e in data] == ["m1"]
        assert data[0]["threadId"] == "thread-m1"

    def test_to_data_passes_none_through(self) -> None:
        assert to_data(None) is None
