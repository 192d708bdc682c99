"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure in the server belongs to one of four families. Each family
is handled at the boundary closest to where it happens:

    ┌──────────────────┬──────────────────────────────┬──────────────────────┐
    │ Error            │ Raised by                    │ Client sees          │
    ├──────────────────┼──────────────────────────────┼──────────────────────┤
    │ TransportError   │ accept / recv / send         │ abrupt close         │
    │ ParseError       │ Connection.read_head, parser │ 400 Bad Request      │
    │ HandlerError     │ dispatcher (handler crashed) │ 500 Internal Error   │
    │ ConfigError      │ ServerConfig.validate()      │ process exits (1)    │
    └──────────────────┴──────────────────────────────┴──────────────────────┘

A missing serving directory at request time is NOT a ConfigError: the
file handler answers 500 and the server keeps running.

=============================================================================
"""


class ServerError(Exception):
    """Base class for every error raised by tinyhttpd."""


class TransportError(ServerError):
    """Socket-level failure: the peer vanished or the OS refused an operation."""


class ParseError(ServerError):
    """
    The request head could not be parsed.

    Attributes:
        status_code: HTTP status to answer with. Always 400 here; kept as
                     an attribute so the dispatcher never hardcodes it.
    """

    status_code = 400


class IncompleteRequest(ParseError):
    """Stream reached EOF before the blank line ending the head."""


class MalformedRequestLine(ParseError):
    """Request line has no space, no target, or no HTTP version."""


class MalformedHeader(ParseError):
    """A header line has no colon or an empty name."""


class RequestTooLarge(ParseError):
    """The head buffer filled up before the terminator was seen."""


class HandlerError(ServerError):
    """A handler failed in a way it did not map to a status itself."""


class ConfigError(ServerError, ValueError):
    """Invalid server configuration detected at startup."""
