"""
Exception hierarchy for the LED matrix driver.

Caller-contract errors (bad coordinates, bad command arguments) derive from
ValueError as well, so they can be handled like any other invalid argument.
Transport errors are split by how a caller is expected to recover:

- WriteTimeoutError: transient, retry the same operation
- BrokenLinkError / NotConnectedError: reconnect before retrying
- TransportIOError: undiagnosed link failure, no defined recovery
"""


class LedMatrixError(Exception):
    """Base exception for all driver errors."""

    pass


class PixelOutOfBoundsError(LedMatrixError, ValueError):
    """Raised when a pixel coordinate falls outside the display."""

    def __init__(self, x: int, y: int, width: int, height: int):
        self.x = x
        self.y = y
        super().__init__(
            f"Pixel ({x},{y}) out of bounds for {width}x{height} display"
        )


class CommandEncodingError(LedMatrixError, ValueError):
    """Raised when a command is built with arguments the protocol cannot carry."""

    pass


class MatrixConnectionError(LedMatrixError):
    """Raised when the serial device cannot be opened or reopened."""

    pass


class TransportError(LedMatrixError):
    """Base exception for failures while writing a frame."""

    pass


class WriteTimeoutError(TransportError):
    """Raised when a frame write does not complete within the port timeout."""

    pass


class BrokenLinkError(TransportError):
    """Raised when the serial link has been severed (broken pipe)."""

    pass


class NotConnectedError(TransportError):
    """Raised when a command is executed while no port is open."""

    pass


class TransportIOError(TransportError):
    """Raised for any other I/O failure during a write."""

    pass


class FatalLinkError(LedMatrixError):
    """Raised by the recovery policy when no recovery is defined for an error."""

    pass
