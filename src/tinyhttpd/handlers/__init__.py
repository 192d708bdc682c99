"""
=============================================================================
HANDLERS
=============================================================================

One handler per route. A handler takes what it needs (the request, a
path parameter, the serving directory) and returns one HTTPResponse.

    ┌─────────────────────┬───────────────────────────────────────────────┐
    │ Route               │ Handler                                       │
    ├─────────────────────┼───────────────────────────────────────────────┤
    │ ROOT                │ basic.root()                                  │
    │ ECHO                │ basic.echo(path_param)                        │
    │ USER_AGENT          │ basic.user_agent(request)                     │
    │ FILES               │ files.serve_file(path_param, serving_dir)     │
    │ NOT_FOUND           │ basic.not_found()                             │
    │ METHOD_NOT_ALLOWED  │ basic.method_not_allowed()                    │
    └─────────────────────┴───────────────────────────────────────────────┘

dispatch() is the single place that knows this table.

=============================================================================
"""

from ..config import ServerConfig
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse
from ..http.router import Route, RouteMatch
from .basic import echo, method_not_allowed, not_found, root, user_agent
from .files import serve_file


def dispatch(match: RouteMatch, request: HTTPRequest, config: ServerConfig) -> HTTPResponse:
    """
    Run the handler selected by `match`.

    The serving directory is read from `config` here and handed to the
    file handler as a plain argument.
    """
    if match.route is Route.ROOT:
        return root()
    if match.route is Route.ECHO:
        return echo(match.path_param or "")
    if match.route is Route.USER_AGENT:
        return user_agent(request)
    if match.route is Route.FILES:
        return serve_file(match.path_param or "", config.serving_directory)
    if match.route is Route.METHOD_NOT_ALLOWED:
        return method_not_allowed()
    return not_found()


__all__ = [
    "dispatch",
    "root",
    "echo",
    "user_agent",
    "serve_file",
    "not_found",
    "method_not_allowed",
]
