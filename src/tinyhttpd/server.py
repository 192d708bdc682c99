"""
=============================================================================
HTTP SERVER (DISPATCHER)
=============================================================================

Ties the pieces together: the listener accepts, the pool bounds
concurrency, and each worker runs one connection through the whole
pipeline before taking the next.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌──────────────┐   Connection   ┌──────────────┐
    │ SocketServer │ ─────────────► │  ThreadPool  │── full? ──► "500" + close
    │ accept loop  │                │  submit()    │
    └──────────────┘                └──────┬───────┘
                                           │ worker thread
                                           ▼
    ┌──────────────────────────────────────────────────────────────────┐
    │ process_connection(conn)                                          │
    │                                                                   │
    │   RequestParser.receive ── ParseError ─────► "400" ──┐            │
    │          │              ── TransportError ───────────┤            │
    │          ▼                                           │            │
    │   route(method, target)                              │            │
    │          │                                           │            │
    │          ▼                                           │            │
    │   dispatch(match, request, config) ── crash ─► "500" ┤            │
    │          │                                           │            │
    │          ▼                                           │            │
    │   write_response ── fails ─► (nothing more) ─────────┤            │
    │          │                                           │            │
    │          ▼                                           ▼            │
    │        close()  ◄──────────────────────────────── close()         │
    │        access log                                                 │
    └──────────────────────────────────────────────────────────────────┘

Every accepted connection gets closed exactly once, and every request
that parsed gets exactly one write attempt.

=============================================================================
"""

import logging
import threading
from typing import Optional

from .access_log import AccessLogEntry, log_access
from .config import ServerConfig
from .core import Connection, SocketServer, ThreadPool
from .errors import HandlerError, ParseError, TransportError
from .handlers import dispatch
from .http import (
    HTTPRequest,
    HTTPResponse,
    HTTPStatus,
    RequestParser,
    RouteMatch,
    route,
    status_line_bytes,
    write_response,
)


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Concurrent one-request-per-connection HTTP/1.1 server.

        config = ServerConfig(serving_directory="/srv/files")
        server = HTTPServer(config)
        server.run()          # blocks until SIGINT/SIGTERM or shutdown()

    From another thread (tests):

        threading.Thread(target=server.run, daemon=True).start()
        server.ready.wait(5)
        host, port = server.address
        ...
        server.shutdown()
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Immutable server configuration. Defaults are used if
                    omitted.

        Raises:
            ConfigError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            workers=self.config.workers,
            queue_size=self.config.queue_size,
        )
        self._parser = RequestParser(max_header_size=self.config.max_header_size)
        self._stopped = threading.Event()

    @property
    def ready(self) -> threading.Event:
        """Set once the listening socket accepts connections."""
        return self._socket_server.ready

    @property
    def address(self) -> tuple[str, int]:
        return self._socket_server.address

    @property
    def stats(self) -> dict:
        return self._thread_pool.stats

    def run(self):
        """
        Serve until shutdown() or a termination signal.

        Raises:
            TransportError: The listening address could not be bound.
        """
        self._stopped.clear()
        self._thread_pool.start()

        if self.config.serving_directory is None:
            logger.info("No serving directory configured, /files/ requests will fail")
        else:
            logger.info(f"Serving files from {self.config.serving_directory}")

        logger.info(f"Starting {self.config.server_name} on {self.config.host}:{self.config.port}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def shutdown(self, timeout: Optional[float] = None):
        """
        Ask the server to stop and, if `timeout` is given, wait for it.

        Returns once the accept loop and the pool are down, or once
        `timeout` expires.
        """
        self._socket_server.shutdown()
        if timeout is not None:
            self._stopped.wait(timeout)

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._thread_pool.shutdown(wait=True, timeout=5.0)
        self._stopped.set()
        logger.info("Server stopped")

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Hand a fresh connection to the pool (runs on the accept thread).

        A refused connection is answered with a bare 500 status line and
        closed right here. The accept loop never blocks on the pool.
        """
        if self._thread_pool.submit(self.process_connection, args=(conn,)):
            return

        logger.warning(f"[{conn.id}] Worker pool full, rejecting {conn.client_ip}")
        sent = conn.send(status_line_bytes(HTTPStatus.INTERNAL_SERVER_ERROR))
        conn.close()

        log_access(self._access_entry(
            conn, None, HTTPStatus.INTERNAL_SERVER_ERROR if sent else None, 0
        ))

    def process_connection(self, conn: Connection):
        """
        Run the full pipeline for one connection (runs on a worker).

        The connection is closed when this returns, whatever happened.
        """
        with conn:
            request, status, bytes_sent = self._serve(conn)

        log_access(self._access_entry(conn, request, status, bytes_sent))

    def _serve(self, conn: Connection) -> tuple[Optional[HTTPRequest], Optional[int], int]:
        """
        Parse, route, handle and write.

        Returns:
            (request or None, status sent or None, body bytes sent)
        """
        # ─────────────────────────────────────────────────────────────────
        # PARSE
        # ─────────────────────────────────────────────────────────────────
        try:
            request = self._parser.receive(conn)
        except ParseError as e:
            logger.info(f"[{conn.id}] Bad request from {conn.client_ip}: {e}")
            status = HTTPStatus(e.status_code)
            sent = conn.send(status_line_bytes(status))
            return None, (int(status) if sent else None), 0
        except TransportError as e:
            logger.warning(f"[{conn.id}] Abandoning connection: {e}")
            return None, None, 0

        # ─────────────────────────────────────────────────────────────────
        # ROUTE + HANDLE
        # ─────────────────────────────────────────────────────────────────
        match = route(request.method, request.target)
        logger.debug(f"[{conn.id}] {request.method_token} {request.target} -> {match.route.name}")

        try:
            response = self._run_handler(match, request)
        except HandlerError as e:
            logger.error(f"[{conn.id}] {e}")
            sent = conn.send(status_line_bytes(HTTPStatus.INTERNAL_SERVER_ERROR))
            return request, (int(HTTPStatus.INTERNAL_SERVER_ERROR) if sent else None), 0

        # ─────────────────────────────────────────────────────────────────
        # WRITE
        # ─────────────────────────────────────────────────────────────────
        if not write_response(conn, response):
            return request, None, 0

        return request, int(response.status), len(response.body)

    def _run_handler(self, match: RouteMatch, request: HTTPRequest) -> HTTPResponse:
        """
        Call the routed handler.

        Raises:
            HandlerError: Wrapping anything the handler didn't turn into
                          a response itself.
        """
        try:
            return dispatch(match, request, self.config)
        except Exception as e:
            logger.exception(f"Handler {match.route.name} failed: {e}")
            raise HandlerError(f"{match.route.name} handler failed: {e}") from e

    @staticmethod
    def _access_entry(
        conn: Connection,
        request: Optional[HTTPRequest],
        status: Optional[int],
        bytes_sent: int,
    ) -> AccessLogEntry:
        return AccessLogEntry(
            connection_id=conn.id,
            client_ip=conn.client_ip,
            method=request.method_token if request else "-",
            target=request.target if request else "-",
            status=int(status) if status is not None else None,
            bytes_sent=bytes_sent,
            duration_ms=conn.age * 1000,
        )
