"""Unit tests for Gmail message parsing helpers."""

from factories import b64url, make_message

from gmail_http_api.gmail.parsing import (
    HeaderMap,
    LeafPart,
    MultiPart,
    collect_attachments,
    decode_body_data,
    find_body,
    iter_leaves,
    message_to_email,
    parse_part,
)


def _leaf(mime_type: str, text: str | None = None, **extra) -> dict:
    body = {"data": b64url(text)} if text is not None else {}
    body.update(extra.pop("body", {}))
    return {"mimeType": mime_type, "body": body, **extra}


def _multi(mime_type: str, *parts: dict) -> dict:
    return {"mimeType": mime_type, "body": {"size": 0}, "parts": list(parts)}


class TestHeaderMap:
    """Test suite for HeaderMap."""

    def test_lookup_is_case_insensitive(self) -> None:
        headers = HeaderMap([{"name": "Message-ID", "value": "<a@b>"}])

        assert headers.get("message-id") == "<a@b>"
        assert headers.get("MESSAGE-ID") == "<a@b>"
        assert "Message-Id" in headers

    def test_first_occurrence_wins(self) -> None:
        headers = HeaderMap(
            [
                {"name": "Received", "value": "first"},
                {"name": "received", "value": "second"},
            ]
        )

        assert headers.get("Received") == "first"

    def test_missing_header_returns_default(self) -> None:
        headers = HeaderMap(None)

        assert headers.get("Subject") == ""
        assert headers.get("Subject", "n/a") == "n/a"
        assert "Subject" not in headers


class TestPartTree:
    """Test suite for part tree construction and traversal."""

    def test_parse_builds_typed_nodes(self) -> None:
        tree = parse_part(
            _multi("multipart/mixed", _leaf("text/plain", "hi"), _multi("multipart/alternative"))
        )

        assert isinstance(tree, MultiPart)
        assert isinstance(tree.parts[0], LeafPart)
        assert tree.parts[0].mime_type == "text/plain"

    def test_iter_leaves_is_document_order(self) -> None:
        tree = parse_part(
            _multi(
                "multipart/mixed",
                _multi("multipart/alternative", _leaf("text/plain", "1"), _leaf("text/html", "2")),
                _leaf("application/pdf", filename="3.pdf", body={"attachmentId": "att3"}),
            )
        )

        kinds = [leaf.mime_type for leaf in iter_leaves(tree)]

        assert kinds == ["text/plain", "text/html", "application/pdf"]

    def test_deep_nesting_does_not_recurse(self) -> None:
        part = _leaf("text/plain", "deep body")
        for _ in range(5000):
            part = _multi("multipart/mixed", part)

        assert find_body(parse_part(part)) == "deep body"


class TestFindBody:
    """Test suite for body resolution."""

    def test_top_level_body_wins(self) -> None:
        tree = parse_part(_leaf("text/html", "<p>direct</p>"))

        assert find_body(tree) == "<p>direct</p>"

    def test_prefers_plain_over_html(self) -> None:
        tree = parse_part(
            _multi("multipart/alternative", _leaf("text/html", "<p>h</p>"), _leaf("text/plain", "p"))
        )

        assert find_body(tree) == "p"

    def test_falls_back_to_nested_html(self) -> None:
        """Only an HTML part carries content: the HTML is returned."""
        tree = parse_part(
            _multi(
                "multipart/mixed",
                _multi("multipart/related", _leaf("text/html", "<p>only html</p>")),
                _leaf("image/png", filename="logo.png", body={"attachmentId": "att1"}),
            )
        )

        assert find_body(tree) == "<p>only html</p>"

    def test_attachment_text_is_not_the_body(self) -> None:
        tree = parse_part(
            _multi(
                "multipart/mixed",
                _leaf("text/plain", "notes.txt content", filename="notes.txt"),
                _leaf("text/html", "<p>real</p>"),
            )
        )

        assert find_body(tree) == "<p>real</p>"

    def test_no_text_parts_gives_empty_body(self) -> None:
        tree = parse_part(_multi("multipart/mixed", _leaf("image/png", filename="a.png")))

        assert find_body(tree) == ""

    def test_decodes_utf8(self) -> None:
        assert find_body(parse_part(_leaf("text/plain", "naïve — ok"))) == "naïve — ok"

    def test_multipart_root_body_beats_nested_parts(self) -> None:
        payload = _multi("multipart/mixed", _leaf("text/plain", "nested"))
        payload["body"] = {"data": b64url("top")}

        assert find_body(parse_part(payload)) == "top"

    def test_invalid_base64_gives_empty_body(self) -> None:
        assert decode_body_data("abcde") == ""
        assert find_body(parse_part({"mimeType": "text/plain", "body": {"data": "abcde"}})) == ""


class TestCollectAttachments:
    """Test suite for attachment discovery."""

    def test_finds_attachments_at_any_depth(self) -> None:
        tree = parse_part(
            _multi(
                "multipart/mixed",
                _multi(
                    "multipart/alternative",
                    _leaf("text/plain", "body"),
                    _multi(
                        "multipart/related",
                        _leaf(
                            "image/png",
                            filename="inline.png",
                            body={"attachmentId": "att-inner", "size": 42},
                        ),
                    ),
                ),
                _leaf(
                    "application/pdf",
                    filename="report.pdf",
                    body={"attachmentId": "att-outer", "size": 1024},
                ),
            )
        )

        attachments = collect_attachments(tree)

        assert [a.filename for a in attachments] == ["inline.png", "report.pdf"]
        assert attachments[0].attachment_id == "att-inner"
        assert attachments[0].size == 42
        assert attachments[1].mime_type == "application/pdf"

    def test_requires_both_filename_and_attachment_id(self) -> None:
        tree = parse_part(
            _multi(
                "multipart/mixed",
                _leaf("application/pdf", filename="no-id.pdf"),
                _leaf("application/pdf", body={"attachmentId": "no-name"}),
            )
        )

        assert collect_attachments(tree) == []


class TestMessageToEmail:
    """Test suite for message_to_email."""

    def test_parses_basic_fields(self) -> None:
        email = message_to_email(make_message("m1", subject="Hello", sender="a@example.com"))

        assert email.id == "m1"
        assert email.thread_id == "thread-m1"
        assert email.subject == "Hello"
        assert email.sender == "a@example.com"
        assert email.to == "user@example.com"
        assert email.body == "Hello there"
        assert email.labels == ["INBOX", "UNREAD"]

    def test_serialises_with_wire_names(self) -> None:
        data = message_to_email(make_message("m1")).to_json()

        assert data["threadId"] == "thread-m1"
        assert data["from"] == "News <news@example.com>"
        assert "sender" not in data

    def test_can_skip_body(self) -> None:
        assert message_to_email(make_message(), include_body=False).body is None

    def test_missing_payload_is_tolerated(self) -> None:
        email = message_to_email({"id": "bare"})

        assert email.subject == ""
        assert email.body == ""
        assert email.labels == []
