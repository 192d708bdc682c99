"""
=============================================================================
LOGGING
=============================================================================

Two kinds of log output:

1. Diagnostic logs: every module logs through
   logging.getLogger(__name__), so records are named after where they
   come from (tinyhttpd.core.socket_server, tinyhttpd.server, ...).

2. Access logs: one record per answered connection on the
   "tinyhttpd.access" logger, carrying an AccessLogEntry.

configure_logging() wires both to stderr in one of two formats:

    text  2026-01-01 12:00:00 [INFO] tinyhttpd.access: 127.0.0.1 [3fa2c1d0] "GET /echo/hi" 200 2 0.41ms
    json  {"time": "...", "level": "INFO", "logger": "tinyhttpd.access",
           "message": "...", "connection_id": "3fa2c1d0", "status": 200, ...}

=============================================================================
"""

import json
import logging
from dataclasses import asdict, dataclass
from typing import Optional


access_logger = logging.getLogger("tinyhttpd.access")


TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class AccessLogEntry:
    """
    What happened on one connection.

    Attributes:
        connection_id: Connection.id, matches the worker's debug lines.
        client_ip:     Peer address.
        method:        Raw method token, "-" if the head never parsed.
        target:        Raw request target, "-" if the head never parsed.
        status:        Status code sent, None if nothing could be sent.
        bytes_sent:    Response body length.
        duration_ms:   Accept to close.
    """
    connection_id: str
    client_ip: str
    method: str
    target: str
    status: Optional[int]
    bytes_sent: int
    duration_ms: float

    def to_dict(self) -> dict:
        data = asdict(self)
        data["duration_ms"] = round(self.duration_ms, 2)
        return data

    def to_text(self) -> str:
        status = self.status if self.status is not None else "-"
        return (
            f'{self.client_ip} [{self.connection_id}] '
            f'"{self.method} {self.target}" {status} '
            f'{self.bytes_sent} {self.duration_ms:.2f}ms'
        )


def log_access(entry: AccessLogEntry):
    access_logger.info(entry.to_text(), extra={"access": entry.to_dict()})


class JsonFormatter(logging.Formatter):
    """One JSON object per line; access fields are merged in at top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        access = getattr(record, "access", None)
        if access:
            payload.update(access)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload)


def configure_logging(level: str = "INFO", log_format: str = "text"):
    """
    Install a stderr handler on the root logger.

    Replaces handlers installed by an earlier call so running the CLI
    twice in one process doesn't duplicate every line.
    """
    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, "_tinyhttpd", False):
            root.removeHandler(existing)

    handler._tinyhttpd = True
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
