"""
=============================================================================
HTTP RESPONSE WRITER
=============================================================================

Builds and serializes HTTP/1.1 responses.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                  ← status line               │
    │    Content-Type: text/plain\r\n         ← handler headers, in order │
    │    Echo-Length: 3\r\n                                                │
    │    Content-Length: 3\r\n                ← always computed here      │
    │    Connection: close\r\n                ← one request per socket    │
    │    \r\n                                                              │
    │    abc                                  ← body bytes                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Handlers never set Content-Length themselves. If one does, the writer
drops it so the response carries exactly one, matching the body.

Short-circuit answers (parse failure, pool full, handler crash) skip
HTTPResponse altogether and send a bare status line:

    HTTP/1.1 400 Bad Request\r\n\r\n

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


HTTP_VERSION = "HTTP/1.1"


@dataclass(frozen=True)
class HTTPResponse:
    """
    A response value produced by exactly one handler.

    Attributes:
        status:  Status code.
        headers: (name, value) pairs, serialized in this order.
        body:    Raw body bytes.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: tuple[tuple[str, str], ...] = ()
    body: bytes = b""

    @property
    def status_line(self) -> str:
        """e.g. "HTTP/1.1 404 Not Found" """
        return f"{HTTP_VERSION} {int(self.status)} {self.status.phrase}"

    def get_header(self, name: str) -> Optional[str]:
        for header_name, value in self.headers:
            if header_name == name:
                return value
        return None

    def to_bytes(self) -> bytes:
        """
        Serialize the response for a single sendall().

        Returns:
            Status line, headers, computed Content-Length, Connection:
            close, blank line, body.
        """
        lines = [self.status_line]

        for name, value in self.headers:
            if name.lower() == "content-length":
                logger.debug(f"Dropping handler-supplied Content-Length: {value}")
                continue
            lines.append(f"{name}: {value}")

        lines.append(f"Content-Length: {len(self.body)}")
        lines.append("Connection: close")

        # Trailing "" gives the blank line between headers and body
        lines.append("")
        head = "\r\n".join(lines) + "\r\n"

        return head.encode("iso-8859-1") + self.body


def text_response(
    status: HTTPStatus,
    body: Union[str, bytes],
    headers: tuple[tuple[str, str], ...] = ()
) -> HTTPResponse:
    """
    Shorthand for a response with a text body.

    Strings are encoded as ISO-8859-1 so a body echoed from the request
    head goes back out byte for byte.
    """
    if isinstance(body, str):
        body = body.encode("iso-8859-1")
    return HTTPResponse(status=status, headers=headers, body=body)


def status_line_bytes(status: HTTPStatus) -> bytes:
    """
    Bare status line plus blank line, with no headers and no body.

    Used where the pipeline gives up before a handler produced anything.
    """
    return f"{HTTP_VERSION} {int(status)} {status.phrase}\r\n\r\n".encode("ascii")


def write_response(conn, response: HTTPResponse) -> bool:
    """
    Serialize `response` and send it on `conn` in one write.

    A failed write is not retried and no second response is attempted;
    the caller just closes the connection.

    Returns:
        True if every byte was handed to the OS.
    """
    return conn.send(response.to_bytes())
