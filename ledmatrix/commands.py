"""
Commands understood by the LED matrix firmware.

Each command is an immutable value that owns exactly the data it needs and
knows its opcode and payload bytes. Framing (magic header, fixed length) is
the encoder's job, see protocol_encoder.py.

Arguments are validated at construction, so an invalid command can never
reach the wire.
"""

import numbers
import operator
from dataclasses import dataclass
from typing import ClassVar, Iterator, Union

from .errors import CommandEncodingError
from .framebuffer import GreyscaleFramebuffer, MonochromeFramebuffer
from .patterns import DisplayPattern
from .protocol_config import (
    DISPLAY_HEIGHT,
    DISPLAY_WIDTH,
    DRAW_COMMAND_LENGTH,
    Opcode,
)


def _to_bytes(value, what: str) -> bytes:
    # bytes(n) would quietly build n zero bytes
    if isinstance(value, (str, numbers.Integral)):
        raise CommandEncodingError(
            f"{what} must be a sequence of 0-255 values, got {type(value).__name__}"
        )
    try:
        return bytes(value)
    except (TypeError, ValueError) as e:
        raise CommandEncodingError(f"{what} must be a sequence of 0-255 values: {e}") from e


def _to_byte(value, what: str) -> int:
    try:
        value = operator.index(value)
    except TypeError as e:
        raise CommandEncodingError(
            f"{what} must be an integer, got {type(value).__name__}"
        ) from e
    if not 0 <= value <= 0xFF:
        raise CommandEncodingError(f"{what} must be 0-255, got {value}")
    return value


@dataclass(frozen=True)
class Command:
    """Base class for all commands."""

    opcode: ClassVar[Opcode]

    def payload(self) -> bytes:
        """Bytes following the opcode. Empty for parameterless commands."""
        return b""


@dataclass(frozen=True)
class Brightness(Command):
    opcode: ClassVar[Opcode] = Opcode.BRIGHTNESS

    level: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "level", _to_byte(self.level, "Brightness"))

    def payload(self) -> bytes:
        return bytes([self.level])


@dataclass(frozen=True)
class Pattern(Command):
    opcode: ClassVar[Opcode] = Opcode.PATTERN

    pattern: DisplayPattern

    def __post_init__(self) -> None:
        if not isinstance(self.pattern, DisplayPattern):
            raise CommandEncodingError(
                f"Pattern needs a DisplayPattern, got {type(self.pattern).__name__}"
            )

    def payload(self) -> bytes:
        return self.pattern.pack()


@dataclass(frozen=True)
class Bootloader(Command):
    """Reboot the module into its bootloader."""

    opcode: ClassVar[Opcode] = Opcode.BOOTLOADER


@dataclass(frozen=True)
class Sleep(Command):
    opcode: ClassVar[Opcode] = Opcode.SLEEP

    enabled: bool

    def payload(self) -> bytes:
        return bytes([1 if self.enabled else 0])


@dataclass(frozen=True)
class Animate(Command):
    opcode: ClassVar[Opcode] = Opcode.ANIMATE


@dataclass(frozen=True)
class Panic(Command):
    """Make the firmware panic (debugging aid)."""

    opcode: ClassVar[Opcode] = Opcode.PANIC


@dataclass(frozen=True)
class Draw(Command):
    """Show a 1 bit image immediately."""

    opcode: ClassVar[Opcode] = Opcode.DRAW

    bitmap: Union[MonochromeFramebuffer, bytes]

    def __post_init__(self) -> None:
        # Snapshot the pixels so later drawing does not change this command
        if isinstance(self.bitmap, MonochromeFramebuffer):
            data = self.bitmap.data()
        else:
            data = _to_bytes(self.bitmap, "Draw bitmap")

        if len(data) != DRAW_COMMAND_LENGTH:
            raise CommandEncodingError(
                f"Draw bitmap must be {DRAW_COMMAND_LENGTH} bytes, got {len(data)}"
            )
        object.__setattr__(self, "bitmap", data)

    def payload(self) -> bytes:
        return self.bitmap


@dataclass(frozen=True)
class StageColumnBuffer(Command):
    """Upload one greyscale column; shown after the next DrawBuffer."""

    opcode: ClassVar[Opcode] = Opcode.STAGE_COLUMN

    column: int
    data: bytes

    def __post_init__(self) -> None:
        column = _to_byte(self.column, "Column index")
        if not column < DISPLAY_WIDTH:
            raise CommandEncodingError(
                f"Column index must be 0-{DISPLAY_WIDTH - 1}, got {column}"
            )
        object.__setattr__(self, "column", column)

        data = _to_bytes(self.data, "Column data")
        if len(data) != DISPLAY_HEIGHT:
            raise CommandEncodingError(
                f"Column data must be {DISPLAY_HEIGHT} bytes, got {len(data)}"
            )
        object.__setattr__(self, "data", data)

    def payload(self) -> bytes:
        return bytes([self.column]) + self.data


@dataclass(frozen=True)
class DrawBuffer(Command):
    """Commit all staged columns to the display."""

    opcode: ClassVar[Opcode] = Opcode.DRAW_BUFFER


@dataclass(frozen=True)
class Version(Command):
    opcode: ClassVar[Opcode] = Opcode.VERSION


def greyscale_commands(framebuffer: GreyscaleFramebuffer) -> Iterator[Command]:
    """
    Commands that put a greyscale image on screen.

    Yields one StageColumnBuffer per display column, in order, followed by a
    single DrawBuffer.
    """
    for index, column in framebuffer.columns():
        yield StageColumnBuffer(index, column)
    yield DrawBuffer()
