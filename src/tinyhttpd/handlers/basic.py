"""
Fixed-response and reflection handlers.

These touch nothing but the request they are given, so they are safe to
run from any number of worker threads at once.
"""

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, text_response
from ..http.status_codes import HTTPStatus


def root() -> HTTPResponse:
    """GET / → 200 "OK\\n"."""
    return text_response(HTTPStatus.OK, "OK\n")


def echo(text: str) -> HTTPResponse:
    """
    GET /echo/<text> → 200 with <text> as the body.

    Echo-Length carries the body length in bytes. The text is the raw
    target remainder, query string and percent-escapes included.
    """
    body = text.encode("iso-8859-1")
    return text_response(
        HTTPStatus.OK,
        body,
        headers=(
            ("Content-Type", "text/plain"),
            ("Echo-Length", str(len(body))),
        ),
    )


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """
    GET /user-agent → 200 with the User-Agent value as the body.

    The header name is matched case-sensitively. Without it the client
    gets 400. Content-Length is filled in by the response writer.
    """
    agent = request.get_header("User-Agent")
    if agent is None:
        return text_response(HTTPStatus.BAD_REQUEST, "No User-Agent header provided\n")

    return text_response(
        HTTPStatus.OK,
        agent,
        headers=(("Content-Type", "text/plain"),),
    )


def not_found() -> HTTPResponse:
    return text_response(HTTPStatus.NOT_FOUND, "NOT FOUND\n")


def method_not_allowed() -> HTTPResponse:
    return text_response(HTTPStatus.METHOD_NOT_ALLOWED, "METHOD NOT ALLOWED\n")
