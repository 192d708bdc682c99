"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for exactly one request/response
exchange.

=============================================================================
CONNECTION LIFECYCLE
=============================================================================

    accept()
       │
       ▼
     NEW ──read_head()──► READING ──► PROCESSING ──send()──► WRITING
       │                     │             │                    │
       └─────────────────────┴─────────────┴────────────────────┘
                                   │
                                close()
                                   │
                                   ▼
                                CLOSED   (exactly once, on every path)

Ownership moves with the object: the accept loop creates it, the pool
hands it to one worker, and that worker closes it. A connection the
pool refuses is closed by the dispatcher instead.

There are no read or write deadlines. A client that stalls mid-head
keeps its worker busy until it sends more bytes or disconnects. The
only deadline is the one on the drain in close().

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum

from ..errors import IncompleteRequest, RequestTooLarge, TransportError


logger = logging.getLogger(__name__)


HEAD_TERMINATOR = b"\r\n\r\n"

# Upper bounds on unread bytes swallowed while closing, and on the time
# spent doing it. The time bound covers the whole drain, not each recv.
DRAIN_LIMIT = 64 * 1024
DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    One accepted client socket.

    Attributes:
        socket:     The client socket, in blocking mode.
        address:    Client's (ip, port).
        id:         Short random id used to correlate log lines.
        state:      Where in the lifecycle this connection is.
        created_at: Accept timestamp, used for request duration.
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    def __post_init__(self):
        # Listening socket may carry a timeout; the client socket must not
        self.socket.settimeout(None)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Seconds since accept."""
        return time.time() - self.created_at

    @property
    def closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    def read_head(self, max_size: int) -> bytes:
        """
        Read until the blank line ending the request head.

        At most `max_size` bytes are ever buffered. Anything the client
        sent after the blank line is left in the returned bytes for the
        parser to ignore; nothing more is read.

        ┌─────────────────────────────────────────────────────────────────┐
        │   while no \\r\\n\\r\\n in buffer:                                  │
        │       buffer full?        → RequestTooLarge                     │
        │       recv(room left)                                            │
        │           b""             → IncompleteRequest (peer closed)     │
        │           OSError         → TransportError                      │
        └─────────────────────────────────────────────────────────────────┘

        Returns:
            The buffered bytes, containing the terminator.
        """
        self.state = ConnectionState.READING
        buffer = bytearray()

        while HEAD_TERMINATOR not in buffer:
            room = max_size - len(buffer)
            if room <= 0:
                raise RequestTooLarge(f"Request head exceeds {max_size} bytes")

            try:
                chunk = self.socket.recv(room)
            except OSError as e:
                raise TransportError(f"recv failed: {e}") from e

            if not chunk:
                raise IncompleteRequest(
                    f"Connection closed after {len(buffer)} bytes of request head"
                )
            buffer += chunk

        self.state = ConnectionState.PROCESSING
        return bytes(buffer)

    # =========================================================================
    # WRITING
    # =========================================================================

    def send(self, data: bytes) -> bool:
        """
        Send `data` in one sendall().

        Returns:
            True on success, False if the client went away. Never raises
            for socket errors: a failed write only ends in close().
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection. Safe to call more than once.

        1. shutdown(SHUT_WR) sends FIN so the client sees end of response.
        2. Drain what the client still had in flight (a body we never
           read), so the kernel doesn't answer with RST and wipe out the
           response before the client reads it. The drain gives up after
           DRAIN_LIMIT bytes or DRAIN_TIMEOUT seconds in total, so a
           client trickling bytes cannot hold the caller.
        3. close() releases the descriptor.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0
        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(4096)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass  # socket.timeout is an OSError too

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
