"""
LED matrix input module protocol constants.

Frame format: 0x32 0xAC Opcode Payload... (always MAX_COMMAND_LENGTH bytes)
Firmware side of the protocol lives in FrameworkComputer/inputmodule-rs.
"""

from enum import IntEnum


# Physical matrix dimensions (one module)
DISPLAY_WIDTH = 9
DISPLAY_HEIGHT = 34

# Frame layout
MAGIC = bytes([0x32, 0xAC])
MAX_COMMAND_LENGTH = 42
HEADER_LENGTH = len(MAGIC) + 1  # magic + opcode
PAYLOAD_LENGTH = MAX_COMMAND_LENGTH - HEADER_LENGTH

# One bit per pixel, rounded up to whole bytes: 9 * 34 = 306 bits -> 39 bytes
DRAW_COMMAND_LENGTH = (DISPLAY_WIDTH * DISPLAY_HEIGHT + 7) // 8

# Serial link timing (seconds)
BAUD_RATE = 115200
CONNECT_TIMEOUT = 0.1
RECONNECT_TIMEOUT = 0.5


class Opcode(IntEnum):
    """Command identifiers, written at frame byte 2."""

    BRIGHTNESS = 0x00
    PATTERN = 0x01
    BOOTLOADER = 0x02
    SLEEP = 0x03
    ANIMATE = 0x04
    PANIC = 0x05
    DRAW = 0x06
    STAGE_COLUMN = 0x07
    DRAW_BUFFER = 0x08
    VERSION = 0x20

    def __str__(self) -> str:
        return f"{self.name.lower()} (0x{self.value:02x})"
