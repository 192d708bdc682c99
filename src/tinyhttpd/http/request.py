"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw head of an HTTP/1.1 request into an immutable HTTPRequest.
Only the head is looked at: the server never reads request bodies.

=============================================================================
HTTP REQUEST HEAD
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    GET /echo/abc HTTP/1.1\r\n           ← request line               │
    │    ─┬─ ────┬──── ────┬───                                            │
    │   method  target   version                                           │
    │                                                                      │
    │    Host: localhost:9090\r\n             ← header lines               │
    │    User-Agent: curl/8.4.0\r\n                                        │
    │    \r\n                                 ← blank line ends the head   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The target is kept exactly as sent: no percent-decoding, no splitting
off the query string. "/echo/a%20b?x=1" stays "/echo/a%20b?x=1".

=============================================================================
FAILURES
=============================================================================

    EOF before blank line           → IncompleteRequest
    head buffer full, no blank line → RequestTooLarge
    request line without a space    → MalformedRequestLine
    header line without a colon     → MalformedHeader

All four are ParseError subclasses and end in "400 Bad Request".
An unknown method is NOT a failure: it parses as Method.OTHER and the
router answers 405 for it.

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..errors import MalformedHeader, MalformedRequestLine


logger = logging.getLogger(__name__)


# Every byte maps to exactly one character, so len(str) == len(bytes)
HEAD_ENCODING = "iso-8859-1"

HEAD_TERMINATOR = b"\r\n\r\n"


class Method(Enum):
    """
    Request method as seen by the router.

    The server only serves GET. Every other token (standard or not)
    collapses into OTHER; the raw token is kept on the request for logs.
    """
    GET = "GET"
    OTHER = "OTHER"

    @classmethod
    def from_token(cls, token: str) -> "Method":
        return cls.GET if token == "GET" else cls.OTHER


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed request head.

    Built once per connection by RequestParser and never mutated.

    Attributes:
        method:         Method.GET or Method.OTHER.
        target:         Raw request target (path plus optional query).
        method_token:   The method exactly as sent ("GET", "POST", "BREW").
        version:        Protocol version string, e.g. "HTTP/1.1".
        headers:        (name, value) pairs in wire order, both trimmed.
                        Duplicates are kept.
        client_address: (ip, port) of the peer, for logging.
    """

    method: Method
    target: str
    method_token: str = "GET"
    version: str = "HTTP/1.1"
    headers: tuple[tuple[str, str], ...] = ()
    client_address: tuple[str, int] = field(default=("", 0), compare=False)

    def get_header(self, name: str) -> Optional[str]:
        """
        Return the value of the first header called exactly `name`.

        The match is case-sensitive: "user-agent" does not find a
        "User-Agent" header.
        """
        for header_name, value in self.headers:
            if header_name == name:
                return value
        return None


class RequestParser:
    """
    Parses request heads, either from bytes or straight off a Connection.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        Connection
            │
            ▼  read_head(max_header_size)
        b"GET / HTTP/1.1\\r\\nHost: x\\r\\n\\r\\n"
            │
            ▼  decode ISO-8859-1, split on CRLF
        ["GET / HTTP/1.1", "Host: x"]
            │
            ├──► _parse_request_line(lines[0])
            └──► _parse_headers(lines[1:])
            │
            ▼
        HTTPRequest(method=GET, target="/", headers=(("Host", "x"),))

    ==========================================================================
    """

    def __init__(self, max_header_size: int = 1024):
        """
        Args:
            max_header_size: Head buffer size in bytes. Heads that don't
                             fit are rejected with RequestTooLarge.
        """
        self.max_header_size = max_header_size

    def receive(self, conn) -> HTTPRequest:
        """
        Read one head from `conn` and parse it.

        Raises:
            ParseError: Incomplete, oversized or malformed head.
            TransportError: The socket read itself failed.
        """
        head = conn.read_head(self.max_header_size)
        return self.parse(head, conn.address)

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse a request head.

        `data` may still carry the terminating blank line and anything
        after it (a body the client sent); both are ignored.

        Raises:
            MalformedRequestLine: Bad or missing request line.
            MalformedHeader: A header line without a colon.
        """
        head_end = data.find(HEAD_TERMINATOR)
        if head_end != -1:
            data = data[:head_end]

        lines = data.decode(HEAD_ENCODING).split("\r\n")

        method_token, target, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=Method.from_token(method_token),
            target=target,
            method_token=method_token,
            version=version,
            headers=headers,
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        """
        Split "METHOD SP TARGET SP VERSION".

        The method is everything before the first space. The remainder
        must hold a non-empty target and an HTTP/x.y version.
        """
        method_token, sep, rest = line.partition(" ")
        if not sep:
            raise MalformedRequestLine(f"No space in request line: {line[:64]!r}")

        if not method_token:
            raise MalformedRequestLine("Empty method token")

        target, _, version = rest.partition(" ")
        if not target:
            raise MalformedRequestLine(f"Missing request target: {line[:64]!r}")

        if not _is_http_version(version):
            raise MalformedRequestLine(f"Bad HTTP version: {version[:16]!r}")

        return method_token, target, version

    def _parse_headers(self, lines: list[str]) -> tuple[tuple[str, str], ...]:
        headers = []
        for line in lines:
            name, sep, value = line.partition(":")
            name = name.strip()
            if not sep or not name:
                raise MalformedHeader(f"Invalid header line: {line[:64]!r}")
            headers.append((name, value.strip()))
        return tuple(headers)


def _is_http_version(version: str) -> bool:
    # "HTTP/1.1", "HTTP/1.0", "HTTP/2.0" ...
    if not version.startswith("HTTP/"):
        return False
    major, dot, minor = version[5:].partition(".")
    return bool(dot) and major.isdigit() and minor.isdigit()


def parse_request(data: bytes) -> HTTPRequest:
    """Convenience wrapper around RequestParser().parse()."""
    return RequestParser().parse(data)
