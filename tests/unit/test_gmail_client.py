"""Unit tests for Gmail client."""

from unittest.mock import MagicMock

import httplib2
import pytest
from googleapiclient.errors import HttpError

from gmail_http_api.auth import TokenHolder
from gmail_http_api.exceptions import GmailAPIError, NotFoundError
from gmail_http_api.gmail.client import GmailClient


def _http_error(status: int) -> HttpError:
    return HttpError(httplib2.Response({"status": str(status)}), b'{"error": {"message": "boom"}}')


@pytest.fixture
def tokens() -> MagicMock:
    return MagicMock(spec=TokenHolder)


@pytest.fixture
def gmail_service() -> MagicMock:
    """Stand-in for the googleapiclient discovery resource."""
    return MagicMock()


@pytest.fixture
def gmail(tokens: MagicMock, gmail_service: MagicMock) -> GmailClient:
    return GmailClient(tokens, service=gmail_service)


def _messages(gmail_service: MagicMock) -> MagicMock:
    return gmail_service.users.return_value.messages.return_value


class TestGmailClient:
    """Test suite for GmailClient class."""

    def test_initialization(self, tokens: MagicMock) -> None:
        client = GmailClient(tokens)

        assert client.tokens is tokens
        assert client.user_id == "me"
        assert client._service is None

    @pytest.mark.asyncio
    async def test_list_message_ids_follows_pages(self, gmail, gmail_service) -> None:
        list_call = _messages(gmail_service).list
        list_call.return_value.execute.side_effect = [
            {"messages": [{"id": "a"}, {"id": "b"}], "nextPageToken": "page-2"},
            {"messages": [{"id": "c"}]},
        ]

        ids = await gmail.list_message_ids("is:unread", 10)

        assert ids == ["a", "b", "c"]
        assert list_call.call_args_list[-1].kwargs["pageToken"] == "page-2"
        assert list_call.call_args_list[-1].kwargs["q"] == "is:unread"

    @pytest.mark.asyncio
    async def test_list_message_ids_stops_at_max(self, gmail, gmail_service) -> None:
        execute = _messages(gmail_service).list.return_value.execute
        execute.return_value = {"messages": [{"id": "a"}, {"id": "b"}], "nextPageToken": "more"}

        ids = await gmail.list_message_ids(None, 2)

        assert ids == ["a", "b"]
        assert execute.call_count == 1

    @pytest.mark.asyncio
    async def test_list_message_ids_empty_mailbox(self, gmail, gmail_service) -> None:
        _messages(gmail_service).list.return_value.execute.return_value = {"resultSizeEstimate": 0}

        assert await gmail.list_message_ids("from:nobody", 5) == []

    @pytest.mark.asyncio
    async def test_estimate_messages(self, gmail, gmail_service) -> None:
        _messages(gmail_service).list.return_value.execute.return_value = {"resultSizeEstimate": 17}

        assert await gmail.estimate_messages("is:unread") == 17

    @pytest.mark.asyncio
    async def test_get_message_passes_format_and_headers(self, gmail, gmail_service) -> None:
        get_call = _messages(gmail_service).get
        get_call.return_value.execute.return_value = {"id": "m1"}

        result = await gmail.get_message("m1", format="metadata", metadata_headers=["From"])

        assert result == {"id": "m1"}
        get_call.assert_called_with(userId="me", id="m1", format="metadata", metadataHeaders=["From"])

    @pytest.mark.asyncio
    async def test_send_message_keeps_thread(self, gmail, gmail_service) -> None:
        send_call = _messages(gmail_service).send
        send_call.return_value.execute.return_value = {"id": "sent", "threadId": "t1"}

        await gmail.send_message("cmF3", thread_id="t1")

        send_call.assert_called_with(userId="me", body={"raw": "cmF3", "threadId": "t1"})

    @pytest.mark.asyncio
    async def test_modify_message_sends_empty_lists_for_none(self, gmail, gmail_service) -> None:
        modify_call = _messages(gmail_service).modify
        modify_call.return_value.execute.return_value = {}

        await gmail.modify_message("m1", add_label_ids=["STARRED"])

        modify_call.assert_called_with(
            userId="me", id="m1", body={"addLabelIds": ["STARRED"], "removeLabelIds": []}
        )

    @pytest.mark.asyncio
    async def test_empty_response_becomes_empty_dict(self, gmail, gmail_service) -> None:
        _messages(gmail_service).trash.return_value.execute.return_value = ""

        assert await gmail.trash_message("m1") == {}

    @pytest.mark.asyncio
    async def test_calls_use_holder_credentials_and_publish(self, gmail, gmail_service, tokens) -> None:
        _messages(gmail_service).get.return_value.execute.return_value = {"id": "m1"}

        await gmail.get_message("m1")

        tokens.credentials.assert_called_once()
        tokens.publish.assert_called_once_with(tokens.credentials.return_value)
        http = _messages(gmail_service).get.return_value.execute.call_args.kwargs["http"]
        assert http.credentials is tokens.credentials.return_value

    @pytest.mark.asyncio
    async def test_404_raises_not_found(self, gmail, gmail_service, tokens) -> None:
        _messages(gmail_service).get.return_value.execute.side_effect = _http_error(404)

        with pytest.raises(NotFoundError) as exc_info:
            await gmail.get_message("missing")

        assert exc_info.value.status_code == 404
        tokens.publish.assert_called_once()

    @pytest.mark.asyncio
    async def test_other_http_errors_keep_status(self, gmail, gmail_service) -> None:
        _messages(gmail_service).send.return_value.execute.side_effect = _http_error(403)

        with pytest.raises(GmailAPIError) as exc_info:
            await gmail.send_message("cmF3")

        assert not isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_wrapped(self, gmail, gmail_service) -> None:
        _messages(gmail_service).get.return_value.execute.side_effect = TimeoutError("timed out")

        with pytest.raises(GmailAPIError, match="timed out"):
            await gmail.get_message("m1")

    @pytest.mark.asyncio
    async def test_list_drafts_and_labels_unwrap_collections(self, gmail, gmail_service) -> None:
        users = gmail_service.users.return_value
        users.drafts.return_value.list.return_value.execute.return_value = {"drafts": [{"id": "d1"}]}
        users.labels.return_value.list.return_value.execute.return_value = {}

        assert await gmail.list_drafts(5) == [{"id": "d1"}]
        assert await gmail.list_labels() == []
