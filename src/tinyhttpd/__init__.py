"""
=============================================================================
TINYHTTPD - Minimal Concurrent HTTP/1.1 Server
=============================================================================

A small raw-socket HTTP/1.1 server with a fixed route table:

    GET /               → 200 "OK\\n"
    GET /echo/<text>    → 200 <text>            (Echo-Length header)
    GET /user-agent     → 200 <User-Agent>      (400 if missing)
    GET /files/<path>   → 200 file bytes        (needs a serving directory)
    anything else GET   → 404
    any other method    → 405

One request per connection: the server always closes the socket after
its response. Connections are processed by a fixed pool of worker
threads; when the pool is saturated new connections get a bare 500.

=============================================================================
PACKAGE LAYOUT
=============================================================================

    tinyhttpd/
    ├── config.py          ServerConfig (frozen)
    ├── errors.py          Transport / Parse / Handler / Config errors
    ├── server.py          HTTPServer: accept → pool → pipeline
    ├── access_log.py      logging setup, per-connection access records
    ├── core/
    │   ├── connection.py      bounded head read, send, close-once
    │   ├── socket_server.py   listening socket, accept loop, signals
    │   └── thread_pool.py     fixed workers, non-blocking admission
    ├── http/
    │   ├── request.py         HTTPRequest, RequestParser
    │   ├── router.py          route(method, target) → RouteMatch
    │   ├── response.py        HTTPResponse, serialization
    │   └── status_codes.py    HTTPStatus
    └── handlers/
        ├── basic.py           root, echo, user-agent, 404, 405
        └── files.py           /files/<path>

=============================================================================
QUICK START
=============================================================================

    from tinyhttpd import HTTPServer, ServerConfig

    HTTPServer(ServerConfig(serving_directory="./public")).run()

Or from the shell:

    python -m tinyhttpd --directory ./public

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .errors import (
    ConfigError,
    HandlerError,
    IncompleteRequest,
    MalformedHeader,
    MalformedRequestLine,
    ParseError,
    RequestTooLarge,
    ServerError,
    TransportError,
)
from .server import HTTPServer


__all__ = [
    "__version__",
    "HTTPServer",
    "ServerConfig",
    "ServerError",
    "TransportError",
    "ParseError",
    "IncompleteRequest",
    "MalformedRequestLine",
    "MalformedHeader",
    "RequestTooLarge",
    "HandlerError",
    "ConfigError",
]
