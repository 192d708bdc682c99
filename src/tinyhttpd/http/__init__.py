"""
HTTP protocol layer: request parsing, routing, response serialization.

    from tinyhttpd.http import RequestParser, route, HTTPResponse

    request = RequestParser().parse(b"GET /echo/hi HTTP/1.1\\r\\n\\r\\n")
    match = route(request.method, request.target)
    # RouteMatch(route=Route.ECHO, path_param="hi")
"""

from .status_codes import HTTPStatus
from .request import HTTPRequest, Method, RequestParser, parse_request
from .response import (
    HTTPResponse,
    status_line_bytes,
    text_response,
    write_response,
)
from .router import Route, RouteMatch, route


__all__ = [
    "HTTPStatus",
    "HTTPRequest",
    "Method",
    "RequestParser",
    "parse_request",
    "HTTPResponse",
    "status_line_bytes",
    "text_response",
    "write_response",
    "Route",
    "RouteMatch",
    "route",
]
