"""
Networking and concurrency primitives.

- Connection:   one accepted client socket, closed exactly once
- SocketServer: listening socket and accept loop
- ThreadPool:   fixed workers behind a bounded admission counter
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer
from .thread_pool import ThreadPool, Worker, WorkerState


__all__ = [
    "Connection",
    "ConnectionState",
    "SocketServer",
    "ThreadPool",
    "Worker",
    "WorkerState",
]
