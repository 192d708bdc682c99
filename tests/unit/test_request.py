"""
Unit tests for HTTP request parsing.
"""

import pytest

from tinyhttpd.errors import MalformedHeader, MalformedRequestLine, ParseError
from tinyhttpd.http.request import (
    HTTPRequest,
    Method,
    RequestParser,
    parse_request,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        parser = RequestParser()
        request = parser.parse(sample_get_request, ("127.0.0.1", 12345))

        assert request.method is Method.GET
        assert request.method_token == "GET"
        assert request.target == "/echo/hello"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)

    def test_headers_keep_wire_order(self, sample_get_request: bytes):
        request = parse_request(sample_get_request)

        assert request.headers == (
            ("Host", "localhost:9090"),
            ("User-Agent", "pytest"),
            ("Accept", "*/*"),
        )

    def test_header_name_and_value_trimmed(self):
        raw = b"GET / HTTP/1.1\r\n  X-Pad  :   spaced out  \r\n\r\n"
        request = parse_request(raw)

        assert request.headers == (("X-Pad", "spaced out"),)

    def test_header_split_on_first_colon(self):
        raw = b"GET / HTTP/1.1\r\nHost: localhost:9090\r\n\r\n"
        request = parse_request(raw)

        assert request.get_header("Host") == "localhost:9090"

    def test_empty_header_value_allowed(self):
        request = parse_request(b"GET / HTTP/1.1\r\nX-Empty:\r\n\r\n")

        assert request.get_header("X-Empty") == ""

    def test_duplicate_headers_kept(self):
        raw = b"GET / HTTP/1.1\r\nX-A: 1\r\nX-A: 2\r\n\r\n"
        request = parse_request(raw)

        assert request.headers == (("X-A", "1"), ("X-A", "2"))
        assert request.get_header("X-A") == "1"

    def test_target_is_not_decoded(self):
        """Query strings and percent-escapes stay in the target verbatim."""
        raw = b"GET /echo/a%20b?x=1&y=2 HTTP/1.1\r\n\r\n"
        request = parse_request(raw)

        assert request.target == "/echo/a%20b?x=1&y=2"

    def test_parse_missing_headers(self):
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n")

        assert request.target == "/"
        assert request.headers == ()

    def test_body_is_ignored(self):
        raw = b"GET / HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello"
        request = parse_request(raw)

        assert request.headers == (("Content-Length", "5"),)

    def test_http_10_accepted(self):
        request = parse_request(b"GET / HTTP/1.0\r\n\r\n")
        assert request.version == "HTTP/1.0"

    @pytest.mark.parametrize("token", ["POST", "PUT", "DELETE", "HEAD", "OPTIONS", "BREW"])
    def test_non_get_methods_parse_as_other(self, token: str):
        """Unknown or unsupported methods are policy, not parse errors."""
        request = parse_request(f"{token} / HTTP/1.1\r\n\r\n".encode())

        assert request.method is Method.OTHER
        assert request.method_token == token

    def test_method_is_case_sensitive(self):
        request = parse_request(b"get / HTTP/1.1\r\n\r\n")
        assert request.method is Method.OTHER

    def test_latin1_bytes_survive(self):
        raw = b"GET /echo/caf\xe9 HTTP/1.1\r\nUser-Agent: \xff\xfe\r\n\r\n"
        request = parse_request(raw)

        assert request.target == "/echo/caf\xe9"
        assert request.get_header("User-Agent") == "\xff\xfe"


class TestParseErrors:

    def test_request_line_without_space(self):
        with pytest.raises(MalformedRequestLine):
            parse_request(b"GET\r\nHost: test\r\n\r\n")

    def test_empty_head(self):
        with pytest.raises(MalformedRequestLine):
            parse_request(b"\r\n\r\n")

    def test_missing_target(self):
        with pytest.raises(MalformedRequestLine):
            parse_request(b"GET  HTTP/1.1\r\n\r\n")

    def test_missing_version(self):
        with pytest.raises(MalformedRequestLine):
            parse_request(b"GET /\r\n\r\n")

    @pytest.mark.parametrize("version", ["HTTX/1.1", "HTTP/1", "HTTP/a.b", "HTTP/1.1 extra"])
    def test_bad_version(self, version: str):
        with pytest.raises(MalformedRequestLine):
            parse_request(f"GET / {version}\r\n\r\n".encode())

    def test_header_without_colon(self):
        with pytest.raises(MalformedHeader):
            parse_request(b"GET / HTTP/1.1\r\nNoColonHere\r\n\r\n")

    def test_header_with_empty_name(self):
        with pytest.raises(MalformedHeader):
            parse_request(b"GET / HTTP/1.1\r\n: value\r\n\r\n")

    def test_parse_errors_map_to_400(self):
        with pytest.raises(ParseError) as exc_info:
            parse_request(b"garbage\r\n\r\n")

        assert exc_info.value.status_code == 400


class TestHTTPRequest:
    """Tests for HTTPRequest dataclass."""

    def test_get_header_is_case_sensitive(self):
        request = HTTPRequest(
            method=Method.GET,
            target="/user-agent",
            headers=(("user-agent", "lower"),),
        )

        assert request.get_header("User-Agent") is None
        assert request.get_header("user-agent") == "lower"

    def test_request_is_immutable(self):
        request = HTTPRequest(method=Method.GET, target="/")

        with pytest.raises(AttributeError):
            request.target = "/other"

    def test_method_from_token(self):
        assert Method.from_token("GET") is Method.GET
        assert Method.from_token("POST") is Method.OTHER
