"""
Docker availability detection.

A stopped Docker Desktop, a missing socket, or a socket without permissions
all surface as different exception types from the Docker SDK. They are
collapsed into RuntimeUnavailable so callers can degrade gracefully.
"""

import errno
import logging
from typing import Optional

from docker.errors import APIError

logger = logging.getLogger(__name__)

UNAVAILABLE_ERRNOS = {
    errno.ECONNREFUSED,
    errno.ENOENT,
    errno.EACCES,
    errno.EPIPE,
}

UNAVAILABLE_MESSAGE_PATTERNS = (
    "connection refused",
    "connect econnrefused",
    "connection aborted",
    "no such file",
    "permission denied",
    "cannot connect to the docker daemon",
    "is the docker daemon running",
    "error while fetching server api version",
    "docker socket",
    "docker desktop is manually paused",
    "docker is paused",
)


class RuntimeUnavailable(Exception):
    """Docker Engine cannot be reached."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


def is_docker_unavailable(error: Optional[BaseException]) -> bool:
    """
    Check if an error indicates Docker is not running or unreachable.

    Walks the __cause__/__context__ chain because the SDK wraps the
    underlying socket error in requests/urllib3 exceptions.
    """
    seen = set()
    while error is not None and id(error) not in seen:
        seen.add(id(error))

        if isinstance(error, RuntimeUnavailable):
            return True

        # 503 = Docker paused or unavailable
        if isinstance(error, APIError) and getattr(error, 'status_code', None) == 503:
            return True

        if isinstance(error, (ConnectionRefusedError, FileNotFoundError, PermissionError, BrokenPipeError)):
            return True

        err_no = getattr(error, 'errno', None)
        if err_no is not None and err_no in UNAVAILABLE_ERRNOS:
            return True

        message = str(error).lower()
        if any(pattern in message for pattern in UNAVAILABLE_MESSAGE_PATTERNS):
            return True

        error = error.__cause__ or error.__context__

    return False


def raise_if_unavailable(error: BaseException, context: str):
    """Re-raise Docker connectivity errors as RuntimeUnavailable"""
    if is_docker_unavailable(error):
        logger.warning(f"[{context}] Docker is not running or unavailable: {error}")
        raise RuntimeUnavailable(f"Docker is not running or unavailable ({context})", cause=error) from error


__all__ = [
    'RuntimeUnavailable',
    'is_docker_unavailable',
    'raise_if_unavailable',
]
