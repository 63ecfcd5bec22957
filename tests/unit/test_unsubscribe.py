"""Unit tests for unsubscribe link discovery."""

from gmail_http_api.gmail.unsubscribe import (
    find_unsubscribe_links,
    merge_links,
    parse_list_unsubscribe,
)


class TestParseListUnsubscribe:
    """Test suite for the List-Unsubscribe header parser."""

    def test_splits_mailto_and_http(self) -> None:
        links, email = parse_list_unsubscribe(
            "<mailto:leave@news.example.com?subject=unsubscribe>, <https://news.example.com/u/123>"
        )

        assert links == ["https://news.example.com/u/123"]
        assert email == "leave@news.example.com"

    def test_first_mailto_wins(self) -> None:
        _, email = parse_list_unsubscribe("<mailto:a@example.com>, <mailto:b@example.com>")

        assert email == "a@example.com"

    def test_missing_header(self) -> None:
        assert parse_list_unsubscribe(None) == ([], None)
        assert parse_list_unsubscribe("") == ([], None)

    def test_unbracketed_entries_are_ignored(self) -> None:
        assert parse_list_unsubscribe("https://example.com/unsubscribe") == ([], None)


class TestFindUnsubscribeLinks:
    """Test suite for body URL scanning."""

    def test_finds_keyword_urls_only(self) -> None:
        text = (
            "Read more at https://shop.example.com/sale. "
            "Unsubscribe: https://shop.example.com/unsubscribe?id=9. "
            "Or manage https://shop.example.com/email-preferences, thanks."
        )

        assert find_unsubscribe_links(text) == [
            "https://shop.example.com/unsubscribe?id=9",
            "https://shop.example.com/email-preferences",
        ]

    def test_opt_out_variants(self) -> None:
        links = find_unsubscribe_links('<a href="https://x.example.com/opt-out">stop</a>')

        assert links == ["https://x.example.com/opt-out"]

    def test_empty_text(self) -> None:
        assert find_unsubscribe_links(None) == []


def test_merge_links_keeps_first_seen_order() -> None:
    assert merge_links(["a", "b"], ["b", "c", "a"]) == ["a", "b", "c"]
