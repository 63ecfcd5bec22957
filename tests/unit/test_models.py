"""Unit tests for data models."""

from datetime import datetime, timezone

from gmail_http_api.models import (
    EmailMessage,
    EmailSummary,
    MarketingEmail,
    UnsubscribeInfo,
    VacationSettings,
)


class TestEmailMessage:
    """Test suite for EmailMessage model."""

    def test_serialises_with_wire_aliases(self) -> None:
        email = EmailMessage(
            id="msg123",
            thread_id="thread456",
            subject="Test Email",
            sender="sender@example.com",
            labels=["INBOX", "UNREAD"],
        )

        data = email.to_json()

        assert data["threadId"] == "thread456"
        assert data["from"] == "sender@example.com"
        assert "sender" not in data
        assert data["body"] is None

    def test_accepts_aliases_on_input(self) -> None:
        email = EmailMessage.model_validate({"id": "m1", "threadId": "t1", "from": "a@example.com"})

        assert email.thread_id == "t1"
        assert email.sender == "a@example.com"


class TestUnsubscribeInfo:
    """Test suite for UnsubscribeInfo model."""

    def test_has_unsubscribe_from_links(self) -> None:
        info = UnsubscribeInfo(
            email=EmailSummary(id="m1"),
            unsubscribe_links=["https://example.com/u"],
        )

        assert info.has_unsubscribe is True
        assert info.to_json()["hasUnsubscribe"] is True

    def test_has_unsubscribe_from_mailto_only(self) -> None:
        info = UnsubscribeInfo(email=EmailSummary(id="m1"), unsubscribe_email="u@example.com")

        assert info.has_unsubscribe is True

    def test_nothing_found(self) -> None:
        data = UnsubscribeInfo(email=EmailSummary(id="m1")).to_json()

        assert data["hasUnsubscribe"] is False
        assert data["unsubscribeLinks"] == []
        assert data["email"]["from"] == ""


class TestMarketingEmail:
    def test_extends_email_fields(self) -> None:
        email = MarketingEmail(id="m1", subject="Sale", has_unsubscribe=True)

        data = email.to_json()

        assert data["subject"] == "Sale"
        assert data["hasUnsubscribe"] is True
        assert data["unsubscribeEmail"] is None


class TestVacationSettings:
    def test_times_serialise_as_iso_8601(self) -> None:
        settings = VacationSettings(
            enable_auto_reply=True,
            start_time=datetime(2024, 7, 1, 9, 0, tzinfo=timezone.utc),
        )

        data = settings.to_json()

        assert data["enableAutoReply"] is True
        assert data["startTime"].startswith("2024-07-01T09:00:00")
        assert data["endTime"] is None
