"""Unit tests for reply/forward subject prefixes."""

import pytest

from gmail_http_api.gmail.subject import forward_subject, reply_subject


class TestReplySubject:
    """Test suite for reply_subject."""

    def test_adds_prefix(self) -> None:
        assert reply_subject("Meeting") == "Re: Meeting"

    @pytest.mark.parametrize("subject", ["Re: Meeting", "RE: Meeting", "re:Meeting"])
    def test_existing_prefix_is_kept(self, subject: str) -> None:
        assert reply_subject(subject) == subject

    def test_empty_subject(self) -> None:
        assert reply_subject(None) == "Re: "


class TestForwardSubject:
    """Test suite for forward_subject."""

    def test_adds_prefix(self) -> None:
        assert forward_subject("Update") == "Fwd: Update"

    def test_existing_prefix_is_case_insensitive(self) -> None:
        assert forward_subject("FWD: Update") == "FWD: Update"

    def test_reply_prefix_does_not_count(self) -> None:
        assert forward_subject("Re: Update") == "Fwd: Re: Update"
