"""
Unit tests for the Message response representation.
"""

import json

import pytest

from reqstream.message import Message, normalize_headers


class TestMessageCreation:
    def test_from_h11_style_headers(self, sample_headers) -> None:
        message = Message(200, sample_headers, b"OK")

        assert message.status() == 200
        assert message.reason == "OK"
        assert message.headers["content-type"] == "application/json; charset=UTF-8"
        assert message.content_type.mime_type == "application/json"
        assert message.charset == "UTF-8"
        assert message.encoding == "gzip, br"
        assert message.encodings == ["br", "gzip"]
        assert message.content == b""
        assert message.invalid is None

    def test_repeated_headers(self, sample_headers) -> None:
        message = Message(200, sample_headers + [(b"Vary", b"Accept"), (b"Vary", b"Origin")])
        assert message.headers["set-cookie"] == ["a=1", "b=2"]
        assert message.headers["vary"] == "Accept, Origin"
        assert message.header("Set-Cookie") == "a=1, b=2"

    def test_mapping_headers(self) -> None:
        message = Message(204, {"Content-Type": "text/plain", "X-Values": ["1", "2"]})
        assert message.header("content-type") == "text/plain"
        assert message.headers["x-values"] == "1, 2"

    def test_defaults_without_headers(self) -> None:
        message = Message(200)
        assert message.charset == "utf-8"
        assert message.encoding is None
        assert message.encodings == []
        assert message.location is None

    def test_normalize_headers_none(self) -> None:
        assert normalize_headers(None) == {}

    def test_cookie_string_then_list(self) -> None:
        headers = normalize_headers({"Set-Cookie": "a=1", "set-cookie": ["b=2", "c=3"]})
        assert headers == {"set-cookie": ["a=1", "b=2", "c=3"]}


class TestMessageStatus:
    @pytest.mark.parametrize("status", [200, 201, 204, 299])
    def test_success(self, status) -> None:
        assert Message(status).is_success()

    @pytest.mark.parametrize("status", [199, 300, 404, 500])
    def test_not_success(self, status) -> None:
        assert not Message(status).is_success()

    @pytest.mark.parametrize("status", [201, 301, 302, 303, 307, 308])
    def test_redirection_with_location(self, status) -> None:
        assert Message(status, [(b"Location", b"/next")]).is_redirection()

    @pytest.mark.parametrize("status", [201, 301, 302])
    def test_redirection_requires_location(self, status) -> None:
        assert not Message(status).is_redirection()

    @pytest.mark.parametrize("status", [200, 204, 404])
    def test_location_alone_is_not_redirection(self, status) -> None:
        assert not Message(status, [(b"Location", b"/next")]).is_redirection()


class TestMessageContent:
    def test_concat_preserves_order_and_chains(self) -> None:
        message = Message(200)
        assert message.concat(b"Hello").concat(b", ").concat(b"World") is message
        assert message.content == b"Hello, World"

    def test_text_uses_charset(self) -> None:
        message = Message(200, [(b"Content-Type", b"text/plain; charset=latin-1")])
        message.concat("café".encode("latin-1"))
        assert message.text() == "café"
        assert str(message) == "café"

    def test_text_unknown_charset_falls_back(self) -> None:
        message = Message(200, [(b"Content-Type", b"text/plain; charset=bogus")])
        message.concat("naïve".encode("utf-8"))
        assert message.text() == "naïve"

    def test_json(self) -> None:
        message = Message(200).concat(b'{"a": [1, 2], "b": null}')
        assert message.json() == {"a": [1, 2], "b": None}

    def test_json_malformed(self) -> None:
        message = Message(200).concat(b"{not json")
        with pytest.raises(json.JSONDecodeError):
            message.json()

    def test_repr(self) -> None:
        assert repr(Message(404)) == "<Message [404]>"
