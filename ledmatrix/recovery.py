"""
Recovery policy for transport errors.

Applied by callers around `execute` / `reconnect`:

- timeouts are transient; the connection stays open and the caller retries
- a broken (or missing) link is reconnected once; if that fails the caller
  simply tries again on its next cycle
- anything else has no defined recovery and is escalated as FatalLinkError

After any recoverable error the handler pauses before returning, so a dead
device does not turn the caller into a tight failure loop.
"""

import logging
import time
from enum import Enum

from .errors import (
    BrokenLinkError,
    FatalLinkError,
    MatrixConnectionError,
    NotConnectedError,
    WriteTimeoutError,
)
from .transport import MatrixTransport


logger = logging.getLogger(__name__)

ERROR_RETRY_PAUSE = 2.0  # seconds


class ErrorAction(Enum):
    RETRY = "retry"
    RECONNECT = "reconnect"
    FATAL = "fatal"

    def __str__(self) -> str:
        return self.value


def classify_error(error: BaseException) -> ErrorAction:
    if isinstance(error, WriteTimeoutError):
        return ErrorAction.RETRY
    if isinstance(error, (BrokenLinkError, NotConnectedError)):
        return ErrorAction.RECONNECT
    return ErrorAction.FATAL


def handle_transport_error(
    error: BaseException,
    matrix: MatrixTransport,
    retry_pause: float = ERROR_RETRY_PAUSE,
    sleep=time.sleep,
) -> ErrorAction:
    """
    Apply the recovery policy to an error raised while talking to `matrix`.

    Args:
        error: Exception raised by matrix.execute()
        matrix: The transport that raised it
        retry_pause: Seconds to wait before returning
        sleep: Sleep function (injectable for tests)

    Returns:
        ErrorAction: What was done

    Raises:
        FatalLinkError: If the error has no defined recovery
    """
    action = classify_error(error)

    if action is ErrorAction.RETRY:
        logger.warning("%s: timed out, safe to retry", matrix.path)

    elif action is ErrorAction.RECONNECT:
        logger.warning("%s: link lost (%s), reconnecting", matrix.path, error)
        try:
            matrix.reconnect()
        except MatrixConnectionError as e:
            logger.error("Unable to reconnect port %s. Error: %s", matrix.path, e)

    else:
        logger.error("%s: unrecoverable link error: %r", matrix.path, error)
        raise FatalLinkError(
            f"Unsure how to recover from {type(error).__name__} on {matrix.path}: {error}"
        ) from error

    sleep(retry_pause)
    return action
