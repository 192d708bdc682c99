"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server only ever answers with a handful of codes:

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  200   │ OK                    - root, echo, user-agent, files     │
    │  400   │ Bad Request           - unparseable head, missing UA,     │
    │        │                         bad file path                     │
    │  404   │ Not Found             - no route matched                  │
    │  405   │ Method Not Allowed    - anything but GET                  │
    │  500   │ Internal Server Error - pool full, handler crash,         │
    │        │                         file serving unavailable          │
    └────────┴───────────────────────────────────────────────────────────┘

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return _PHRASES[self]


_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
