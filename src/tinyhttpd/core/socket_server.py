"""
=============================================================================
TCP LISTENER
=============================================================================

Owns the listening socket and the accept loop. Every accepted socket is
wrapped in a Connection and handed to a callback; what happens to it
after that is the HTTP server's business.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer.start()                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   socket()  + SO_REUSEADDR                                           │
    │   bind(host, port)      ── OSError ──► TransportError (exit 1)      │
    │   listen(backlog)                                                    │
    │   ready.set()                                                        │
    │                                                                      │
    │   while running:                                                     │
    │       accept()          ── timeout ──► loop (re-check running)      │
    │          │              ── OSError ──► log, loop                    │
    │          ▼                                                           │
    │       handler(Connection(sock, addr))                                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A failed accept never stops the server. Only shutdown() does.

=============================================================================
"""

import logging
import signal
import socket
import threading
import time
from typing import Callable, Optional

from ..config import ServerConfig
from ..errors import TransportError
from .connection import Connection


logger = logging.getLogger(__name__)


# Pause after a failed accept so a persistent error (EMFILE) can't spin the CPU
ACCEPT_ERROR_BACKOFF = 0.05


class SocketServer:
    """
    Low-level TCP listener.

    Usage:
        def on_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(on_connection)   # blocks until shutdown()
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound_address: Optional[tuple[str, int]] = None

        # Set once listen() succeeded; tests wait on it
        self.ready = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> tuple[str, int]:
        """Bound (host, port). Reflects the real port when config.port is 0."""
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restarting right after a stop would otherwise hit TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # accept() wakes up this often to notice shutdown()
        sock.settimeout(self.config.accept_timeout)
        return sock

    def _setup_signals(self):
        """
        Turn SIGINT / SIGTERM into a graceful shutdown.

        signal.signal() only works on the main thread; when the server
        runs anywhere else (tests) the caller stops it with shutdown().
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and run the accept loop. Blocks until shutdown().

        Raises:
            TransportError: The address could not be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
            self._socket.listen(self.config.backlog)
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise TransportError(f"Cannot listen on {self.config.host}:{self.config.port}: {e}") from e

        self._bound_address = self._socket.getsockname()[:2]
        self._running = True
        self._setup_signals()
        self.ready.set()

        logger.info(f"Server listening on {self.address[0]}:{self.address[1]}")

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._running:
                    break
                logger.error(f"Accept error: {e}")
                time.sleep(ACCEPT_ERROR_BACKOFF)
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(socket=client_socket, address=client_address[:2])
            connection_handler(conn)

    def shutdown(self):
        """Stop the accept loop. Idempotent, callable from any thread."""
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self.ready.clear()
        logger.info("Socket server stopped")
