"""
Pure Protocol Encoding Logic

This module contains the ProtocolEncoder class, which turns Command values
into wire frames. It has no I/O dependencies.

Frame format: [0x32, 0xAC, opcode, <payload bytes...>, <zero padding>]
Every frame is exactly MAX_COMMAND_LENGTH (42) bytes.
"""

from typing import Iterable, Iterator

from .commands import Command
from .errors import CommandEncodingError
from .protocol_config import HEADER_LENGTH, MAGIC, MAX_COMMAND_LENGTH, PAYLOAD_LENGTH


class ProtocolEncoder:
    """
    Pure protocol encoder for LED matrix command frames.

    A fresh frame buffer is allocated for every command, so no bytes from a
    previous command can leak into the padding.
    """

    HEADER = MAGIC
    FRAME_LENGTH = MAX_COMMAND_LENGTH

    def encode(self, command: Command) -> bytes:
        """
        Encode a single command into a complete frame.

        Args:
            command: Command to encode

        Returns:
            bytes: FRAME_LENGTH bytes ready for transmission

        Raises:
            CommandEncodingError: If the payload does not fit in one frame
        """
        payload = command.payload()
        if len(payload) > PAYLOAD_LENGTH:
            raise CommandEncodingError(
                f"{type(command).__name__} payload is {len(payload)} bytes, "
                f"at most {PAYLOAD_LENGTH} fit in a frame"
            )

        frame = bytearray(self.FRAME_LENGTH)
        frame[: len(self.HEADER)] = self.HEADER
        frame[len(self.HEADER)] = command.opcode
        frame[HEADER_LENGTH : HEADER_LENGTH + len(payload)] = payload
        return bytes(frame)

    def encode_many(self, commands: Iterable[Command]) -> Iterator[bytes]:
        """
        Encode multiple commands, preserving order.

        Yields:
            bytes: Protocol frames ready for transmission
        """
        for command in commands:
            yield self.encode(command)
