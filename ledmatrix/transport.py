"""
Serial Transport I/O Boundary

This module provides the transport classes that own the serial connection to
one LED matrix module. Each transport encodes commands into frames and writes
them, one blocking write per command. Nothing is ever read back.

A transport is not thread-safe: drive each instance from a single thread.
Two modules means two transports, which share no state.
"""

import errno
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional

import serial
from serial import SerialException, SerialTimeoutException

from .commands import Command, greyscale_commands
from .errors import (
    BrokenLinkError,
    MatrixConnectionError,
    NotConnectedError,
    TransportIOError,
    WriteTimeoutError,
)
from .framebuffer import GreyscaleFramebuffer
from .protocol_config import BAUD_RATE, CONNECT_TIMEOUT, RECONNECT_TIMEOUT
from .protocol_encoder import ProtocolEncoder


logger = logging.getLogger(__name__)


class LinkState(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


def _is_broken_pipe(error: BaseException) -> bool:
    """Check an exception and whatever it was raised from for EPIPE."""
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, BrokenPipeError):
            return True
        if isinstance(current, OSError) and current.errno == errno.EPIPE:
            return True
        # pyserial re-raises OSError as SerialException without chaining explicitly
        current = current.__cause__ or current.__context__
    return False


class MatrixTransport(ABC):
    """
    Abstract base class for an LED matrix connection.

    Implementations handle hardware vs mock communication; framing and
    command sequencing are shared.
    """

    def __init__(self, path: str):
        self._path = path
        self.encoder = ProtocolEncoder()

    @property
    def path(self) -> str:
        return self._path

    @property
    @abstractmethod
    def state(self) -> LinkState:
        pass

    def is_connected(self) -> bool:
        return self.state is LinkState.CONNECTED

    @abstractmethod
    def reconnect(self) -> None:
        """
        Drop the current connection and open the same path again.

        Raises:
            MatrixConnectionError: If the port cannot be reopened. The
                transport is left disconnected.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    @abstractmethod
    def _write_frame(self, frame: bytes) -> int:
        pass

    def execute(self, command: Command) -> int:
        """
        Encode a command and write it as one frame.

        Returns:
            int: Number of bytes the port reported as written. A short write
                is not treated as an error here.

        Raises:
            WriteTimeoutError: The write did not finish within the timeout
            BrokenLinkError: The link was severed, reconnect before retrying
            NotConnectedError: No port is open
            TransportIOError: Any other I/O failure
        """
        frame = self.encoder.encode(command)
        logger.debug("%s <- %s: %s", self._path, command.opcode, frame.hex())
        return self._write_frame(frame)

    def show(self, framebuffer: GreyscaleFramebuffer) -> None:
        """Stage every column of a greyscale image, then commit it."""
        for command in greyscale_commands(framebuffer):
            self.execute(command)

    def __enter__(self) -> "MatrixTransport":
        return self

    def __exit__(self, exc_type, exc_value, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._path!r}, state={self.state.value})"


class LedMatrix(MatrixTransport):
    """
    Hardware transport using pyserial.

    The port is opened on construction; a failure to open raises
    MatrixConnectionError and no object is created.
    """

    def __init__(self, path: str):
        super().__init__(path)
        self._serial: Optional[serial.Serial] = None
        self._serial = self._open(CONNECT_TIMEOUT)
        logger.info(f"Connected to LED matrix at {path}")

    def _open(self, timeout: float) -> serial.Serial:
        try:
            return serial.Serial(
                port=self._path,
                baudrate=BAUD_RATE,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=timeout,
                write_timeout=timeout,
            )
        except (SerialException, OSError, ValueError) as e:
            raise MatrixConnectionError(f"Unable to open {self._path}: {e}") from e

    @property
    def state(self) -> LinkState:
        if self._serial is None:
            return LinkState.DISCONNECTED
        return LinkState.CONNECTED

    def close(self) -> None:
        """
        Close the port if it is open.

        Raises:
            MatrixConnectionError: If closing fails. The handle is dropped
                either way.
        """
        if self._serial is None:
            return
        try:
            self._serial.close()
            logger.info(f"Disconnected from LED matrix at {self._path}")
        except (SerialException, OSError) as e:
            raise MatrixConnectionError(f"Closing {self._path} failed: {e}") from e
        finally:
            self._serial = None

    def reconnect(self) -> None:
        try:
            self.close()
        except MatrixConnectionError as e:
            # The old handle is gone regardless; reopening is what matters
            logger.warning("%s", e)

        self._serial = self._open(RECONNECT_TIMEOUT)
        logger.info(f"Reconnected to LED matrix at {self._path}")

    def _write_frame(self, frame: bytes) -> int:
        if self._serial is None:
            raise NotConnectedError(f"{self._path} is not open")

        try:
            return int(self._serial.write(frame))
        except SerialTimeoutException as e:
            raise WriteTimeoutError(f"Write to {self._path} timed out") from e
        except (SerialException, OSError) as e:
            if _is_broken_pipe(e):
                raise BrokenLinkError(f"Link to {self._path} is broken: {e}") from e
            raise TransportIOError(f"Write to {self._path} failed: {e}") from e


class MockLedMatrix(MatrixTransport):
    """
    Mock transport for testing and development.

    Never touches hardware. Written frames are kept in `frames` and logged.
    """

    def __init__(self, path: str):
        super().__init__(path)
        self._connected = True
        self.frames: List[bytes] = []
        logger.info(f"[MOCK] Connected to LED matrix at {path}")

    @property
    def state(self) -> LinkState:
        return LinkState.CONNECTED if self._connected else LinkState.DISCONNECTED

    def close(self) -> None:
        if self._connected:
            self._connected = False
            logger.info(f"[MOCK] Disconnected from LED matrix at {self._path}")

    def reconnect(self) -> None:
        self.close()
        self._connected = True
        logger.info(f"[MOCK] Reconnected to LED matrix at {self._path}")

    def _write_frame(self, frame: bytes) -> int:
        if not self._connected:
            raise NotConnectedError(f"[MOCK] {self._path} is not open")
        self.frames.append(frame)
        logger.info("[MOCK] %s <- %s", self._path, frame.hex())
        return len(frame)


def create_transport(path: str, use_hardware: bool = True) -> MatrixTransport:
    """
    Factory function to create the appropriate transport implementation.

    Args:
        path: Serial device path, e.g. /dev/ttyACM0
        use_hardware: Open the real device (True) or a mock (False)

    Raises:
        MatrixConnectionError: If the hardware port cannot be opened
    """
    if use_hardware:
        logger.info("Creating hardware transport for %s", path)
        return LedMatrix(path)
    else:
        logger.info("Creating mock transport for %s", path)
        return MockLedMatrix(path)
