"""
=============================================================================
URL ROUTER
=============================================================================

The route table is fixed. Routing is a pure function of (method, target):
no registration, no regexes, no URL decoding.

=============================================================================
DECISION ORDER (first match wins)
=============================================================================

    ┌───┬────────────────────────────────────────┬─────────────────────┐
    │ # │ Condition                              │ Route   (param)     │
    ├───┼────────────────────────────────────────┼─────────────────────┤
    │ 1 │ method != GET                          │ METHOD_NOT_ALLOWED  │
    │ 2 │ target == "/"                          │ ROOT                │
    │ 3 │ target starts with "/echo/"            │ ECHO   (target[6:]) │
    │ 4 │ target == "/user-agent"                │ USER_AGENT          │
    │ 5 │ target starts with "/files/", len > 7  │ FILES  (target[7:]) │
    │ 6 │ anything else                          │ NOT_FOUND           │
    └───┴────────────────────────────────────────┴─────────────────────┘

Comparisons are on the raw target, query string included:

    GET /echo/a?b=1     → ECHO, param "a?b=1"
    GET /echo/          → ECHO, param ""
    GET /files/         → NOT_FOUND (nothing after the prefix)
    GET /user-agent?x   → NOT_FOUND (not an exact match)
    POST /              → METHOD_NOT_ALLOWED

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .request import Method


ECHO_PREFIX = "/echo/"
FILES_PREFIX = "/files/"


class Route(Enum):
    """Identity of the handler a request is dispatched to."""
    ROOT = "root"
    ECHO = "echo"
    USER_AGENT = "user_agent"
    FILES = "files"
    NOT_FOUND = "not_found"
    METHOD_NOT_ALLOWED = "method_not_allowed"


@dataclass(frozen=True)
class RouteMatch:
    """
    Result of routing a request.

    Attributes:
        route:      Which handler to run.
        path_param: Part of the target after the route prefix (ECHO and
                    FILES only), None for the other routes.
    """
    route: Route
    path_param: Optional[str] = None


def route(method: Method, target: str) -> RouteMatch:
    """
    Map a request's method and raw target to a RouteMatch.

    Total: every input produces a match, NOT_FOUND being the fallback.
    """
    if method is not Method.GET:
        return RouteMatch(Route.METHOD_NOT_ALLOWED)

    if target == "/":
        return RouteMatch(Route.ROOT)

    if target.startswith(ECHO_PREFIX):
        return RouteMatch(Route.ECHO, target[len(ECHO_PREFIX):])

    if target == "/user-agent":
        return RouteMatch(Route.USER_AGENT)

    if target.startswith(FILES_PREFIX) and len(target) > len(FILES_PREFIX):
        return RouteMatch(Route.FILES, target[len(FILES_PREFIX):])

    return RouteMatch(Route.NOT_FOUND)
