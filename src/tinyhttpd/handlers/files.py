"""
=============================================================================
FILE SERVING HANDLER
=============================================================================

Serves GET /files/<path> from the configured serving directory.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        serve_file() Flow                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   serving_directory unset? ──── yes ──► 500 Unable to serve files   │
    │          │ no                                                        │
    │          ▼                                                           │
    │   path empty / escapes dir? ─── yes ──► 400 Invalid file path       │
    │          │ no                                                        │
    │          ▼                                                           │
    │   open + read whole file                                             │
    │          │                                                           │
    │          ├── OSError ─────────────────► 500 It may not exist!       │
    │          │                                                           │
    │          └── bytes ───────────────────► 200 application/octet-stream│
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
SECURITY
=============================================================================

The path comes straight from the request target, so it is checked
before it is joined with the serving directory. Rejected with 400:

    /files/../../etc/passwd      ".." segment
    /files/a/../../secret        ".." segment anywhere
    /files//etc/passwd           absolute path (would replace the root)
    /files/a%00b                 NUL byte (not decoded, but a literal one)
    /files/link                  symlink resolving outside the directory

The target is never percent-decoded, so "%2e%2e" is just a file name.

Every request opens, reads and closes the file: no caching, no
streaming, no partial reads.

=============================================================================
"""

import logging
from pathlib import Path, PurePosixPath
from typing import Optional

from ..http.response import HTTPResponse, text_response
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


UNSET_DIRECTORY_BODY = "ERROR: Unable to serve files\n"
INVALID_PATH_BODY = "ERROR: Invalid file path\n"
READ_FAILED_BODY = "ERROR: Unable to serve file, It may not exist!\n"


def serve_file(relative_path: str, serving_directory: Optional[str]) -> HTTPResponse:
    """
    Read `relative_path` under `serving_directory` and return it.

    Args:
        relative_path: Target remainder after "/files/".
        serving_directory: Root directory, or None when file serving
                           was not configured.

    Returns:
        200 with the file bytes, or a 400/500 text response.
    """
    if serving_directory is None:
        logger.warning("File requested but no serving directory is configured")
        return text_response(HTTPStatus.INTERNAL_SERVER_ERROR, UNSET_DIRECTORY_BODY)

    if not is_safe_relative_path(relative_path):
        logger.warning(f"Rejected file path: {relative_path!r}")
        return text_response(HTTPStatus.BAD_REQUEST, INVALID_PATH_BODY)

    try:
        root = Path(serving_directory).resolve()
        # resolve() follows symlinks, so a link pointing out of root is caught too
        full_path = (root / relative_path).resolve()
    except (OSError, RuntimeError) as e:
        # Symlink loop
        logger.info(f"Unable to resolve {relative_path!r}: {e}")
        return text_response(HTTPStatus.INTERNAL_SERVER_ERROR, READ_FAILED_BODY)

    try:
        full_path.relative_to(root)
    except ValueError:
        logger.warning(f"Rejected file path outside {root}: {relative_path!r}")
        return text_response(HTTPStatus.BAD_REQUEST, INVALID_PATH_BODY)

    try:
        with open(full_path, "rb") as f:
            content = f.read()
    except OSError as e:
        logger.info(f"Unable to read {full_path}: {e}")
        return text_response(HTTPStatus.INTERNAL_SERVER_ERROR, READ_FAILED_BODY)

    logger.debug(f"Serving {full_path} ({len(content)} bytes)")
    return HTTPResponse(
        status=HTTPStatus.OK,
        headers=(("Content-Type", "application/octet-stream"),),
        body=content,
    )


def is_safe_relative_path(relative_path: str) -> bool:
    """
    True if `relative_path` stays inside whatever directory it is joined to.

    Lexical only. serve_file() also resolves the joined path, which
    catches symlinks leading out of the serving directory.
    """
    if not relative_path or "\x00" in relative_path:
        return False

    path = PurePosixPath(relative_path)
    if path.is_absolute():
        return False

    return ".." not in path.parts
