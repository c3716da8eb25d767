"""Tests for response body decoding."""

from __future__ import annotations

import pytest

from apitransport.client.response import decode_body, response_charset
from apitransport.transport import ContentPatterns


class TestResponseCharset:
    def test_override_wins(self) -> None:
        assert response_charset("text/plain; charset=utf-8", encoding="latin-1") == "latin-1"

    def test_utf8(self) -> None:
        assert response_charset("text/plain; charset=UTF-8") == "utf-8"

    def test_declared_charset(self) -> None:
        assert response_charset("text/plain; charset=iso-8859-1") == "iso-8859-1"

    def test_quoted_charset(self) -> None:
        assert response_charset('text/plain; charset="windows-1252"') == "windows-1252"

    def test_default(self) -> None:
        assert response_charset("text/plain") == "utf-8"
        assert response_charset("") == "utf-8"


class TestDecodeBody:
    def test_empty_body(self) -> None:
        assert decode_body(b"", "application/json") is None

    def test_json(self) -> None:
        assert decode_body(b'{"id": 1}', "application/json") == {"id": 1}

    def test_vendor_json(self) -> None:
        assert decode_body(b"[1, 2]", "application/problem+json") == [1, 2]

    def test_text(self) -> None:
        assert decode_body("héllo".encode("utf-8"), "text/plain; charset=utf-8") == "héllo"

    def test_declared_latin1(self) -> None:
        assert decode_body("héllo".encode("latin-1"), "text/plain; charset=iso-8859-1") == "héllo"

    def test_encoding_override(self) -> None:
        body = "héllo".encode("latin-1")
        assert decode_body(body, "text/plain", encoding="latin-1") == "héllo"

    def test_encoding_override_beats_declared_utf8(self) -> None:
        body = "é".encode("utf-8")
        assert decode_body(body, "text/plain; charset=utf-8", encoding="latin-1") == "Ã©"
        assert decode_body(body, "text/plain; charset=utf-8") == "é"

    def test_binary(self) -> None:
        png = b"\x89PNG\r\n\x1a\n"
        assert decode_body(png, "image/png") == png

    def test_svg_is_text(self) -> None:
        assert decode_body(b"<svg/>", "image/svg+xml") == "<svg/>"

    def test_unknown_decodable(self) -> None:
        assert decode_body(b"plain", "") == "plain"

    def test_unknown_undecodable_returns_bytes(self) -> None:
        assert decode_body(b"\xff\xfe\xfa", "foo/bar") == b"\xff\xfe\xfa"

    def test_malformed_json(self) -> None:
        with pytest.raises(ValueError):
            decode_body(b"{not json", "application/json")

    def test_undecodable_text(self) -> None:
        with pytest.raises(ValueError):
            decode_body(b"\xff\xfe\xfa", "text/plain; charset=utf-8")

    def test_unknown_charset(self) -> None:
        with pytest.raises(ValueError, match="Unknown response encoding"):
            decode_body(b"abc", "text/plain; charset=klingon")

    def test_custom_patterns(self) -> None:
        patterns = ContentPatterns.from_strings(string=r"^never/", binary=r"^text/")
        assert decode_body(b"abc", "text/plain", patterns=patterns) == b"abc"
