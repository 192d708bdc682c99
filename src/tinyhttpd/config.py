"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

One immutable value holds every knob the server has. It is built once at
startup (usually from the command line) and passed explicitly into the
server, which threads it down to the handlers that need it.

    argv ──► argparse ──► ServerConfig ──► HTTPServer ──► dispatch()
                             (frozen)                        │
                                                             └──► FileServe
                                                                  reads
                                                                  serving_directory

Because the dataclass is frozen, worker threads can read it concurrently
without any locking.

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional

from .errors import ConfigError


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK
    - host, port, backlog, accept_timeout

    PROTOCOL
    - max_header_size

    CONCURRENCY
    - workers, queue_size

    FILES
    - serving_directory

    LOGGING
    - log_level, log_format, server_name

    =========================================================================
    """

    # =========================================================================
    # FILES
    # =========================================================================

    serving_directory: Optional[str] = None
    """
    Root directory for /files/<path>.
    None = file serving disabled, every /files/ request answers 500.
    """

    # =========================================================================
    # NETWORK
    # =========================================================================

    host: str = "127.0.0.1"
    """Loopback by default."""

    port: int = 9090
    """
    TCP port to listen on.
    0 = let the OS pick a free port (handy in tests, read it back from
    HTTPServer.address once the server is ready).
    """

    backlog: int = 128
    """Kernel accept queue length passed to listen()."""

    accept_timeout: float = 1.0
    """
    How long accept() blocks before the loop re-checks the running flag.
    Only affects shutdown latency, never client-visible behaviour.
    """

    # =========================================================================
    # PROTOCOL
    # =========================================================================

    max_header_size: int = 1024
    """
    Size of the request head buffer in bytes.
    A head that doesn't fit (request line + headers + blank line) is
    rejected with 400.
    """

    # =========================================================================
    # CONCURRENCY
    # =========================================================================

    workers: int = 4
    """Fixed number of worker threads. Each owns one connection at a time."""

    queue_size: int = 16
    """
    Connections allowed to wait for a free worker.
    0 = no waiting room: reject as soon as every worker is busy.
    When full, new connections get a synthetic 500 and are closed.
    """

    # =========================================================================
    # LOGGING
    # =========================================================================

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    log_format: str = "text"
    """'text' for humans, 'json' for log aggregators."""

    server_name: str = "tinyhttpd/1.0"

    def validate(self) -> None:
        """
        Validate configuration values.

        Called by HTTPServer.__init__ so a bad value fails at startup,
        not in the middle of serving traffic.

        Raises:
            ConfigError: Describing the first invalid field found.
        """
        if not 0 <= self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.workers < 1:
            raise ConfigError("workers must be >= 1")

        if self.queue_size < 0:
            raise ConfigError("queue_size must be >= 0")

        if self.max_header_size < 16:
            raise ConfigError("max_header_size must be >= 16")

        if self.backlog < 1:
            raise ConfigError("backlog must be >= 1")

        if self.accept_timeout <= 0:
            raise ConfigError("accept_timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ConfigError(f"Unknown log format: {self.log_format}")
