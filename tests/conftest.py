"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from typing import Callable, Generator

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tinyhttpd import HTTPServer, ServerConfig


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/hello HTTP/1.1\r\n"
        b"Host: localhost:9090\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def serving_dir(tmp_path: Path) -> Path:
    """Directory with a couple of files to serve."""
    (tmp_path / "hello.txt").write_bytes(b"Hello, files!\n")
    (tmp_path / "blob.bin").write_bytes(bytes(range(256)))
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "deep.txt").write_bytes(b"deep")
    return tmp_path


def http_exchange(address: tuple[str, int], data: bytes, timeout: float = 5.0) -> bytes:
    """Send raw bytes, then read until the server closes the connection."""
    with socket.create_connection(address, timeout=timeout) as sock:
        sock.sendall(data)
        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def parse_response(raw: bytes) -> tuple[int, list[tuple[str, str]], bytes]:
    """Split a raw response into (status code, header pairs, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("iso-8859-1").split("\r\n")
    status = int(lines[0].split(" ")[1])
    headers = []
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers.append((name, value.strip()))
    return status, headers, body


def get(address: tuple[str, int], target: str, headers: str = "") -> tuple[int, dict, bytes]:
    """GET `target` and return (status, headers as dict, body)."""
    raw = http_exchange(
        address,
        f"GET {target} HTTP/1.1\r\nHost: test\r\n{headers}\r\n".encode("iso-8859-1"),
    )
    status, header_list, body = parse_response(raw)
    return status, dict(header_list), body


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


@pytest.fixture
def start_server() -> Generator[Callable[..., HTTPServer], None, None]:
    """
    Factory starting an HTTPServer on a free port in a background thread.

        server = start_server(serving_directory=str(path))
        host, port = server.address
    """
    running: list[tuple[HTTPServer, threading.Thread]] = []

    def _start(**overrides) -> HTTPServer:
        settings = dict(
            host="127.0.0.1",
            port=0,
            accept_timeout=0.05,
            log_level="WARNING",
        )
        settings.update(overrides)

        server = HTTPServer(ServerConfig(**settings))
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()

        if not server.ready.wait(5.0):
            raise RuntimeError("Server failed to start")

        running.append((server, thread))
        return server

    yield _start

    for server, thread in running:
        server.shutdown()
        thread.join(timeout=10.0)


@pytest.fixture
def server(start_server, serving_dir: Path) -> HTTPServer:
    """Server with a serving directory and room for bursts."""
    return start_server(serving_directory=str(serving_dir), queue_size=64)
