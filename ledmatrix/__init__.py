"""
LED matrix input module driver.

This package provides:
- Greyscale and monochrome framebuffers sized to one module
- The command set of the module firmware and its 42 byte frame encoding
- Serial transports (hardware and mock) with reconnect support
- A recovery policy for link errors
"""

from .commands import (
    Animate,
    Bootloader,
    Brightness,
    Command,
    Draw,
    DrawBuffer,
    Panic,
    Pattern,
    Sleep,
    StageColumnBuffer,
    Version,
    greyscale_commands,
)
from .errors import (
    BrokenLinkError,
    CommandEncodingError,
    FatalLinkError,
    LedMatrixError,
    MatrixConnectionError,
    NotConnectedError,
    PixelOutOfBoundsError,
    TransportError,
    TransportIOError,
    WriteTimeoutError,
)
from .framebuffer import GreyscaleFramebuffer, MonochromeFramebuffer
from .patterns import DisplayPattern, PatternId
from .protocol_config import (
    DISPLAY_HEIGHT,
    DISPLAY_WIDTH,
    DRAW_COMMAND_LENGTH,
    MAX_COMMAND_LENGTH,
    Opcode,
)
from .protocol_encoder import ProtocolEncoder
from .recovery import ErrorAction, classify_error, handle_transport_error
from .transport import LedMatrix, LinkState, MatrixTransport, MockLedMatrix, create_transport

__version__ = "0.1.0"
