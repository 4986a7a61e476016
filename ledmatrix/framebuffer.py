"""
Pixel buffers for the LED matrix.

Both buffers share the display's coordinate system: x selects one of the
DISPLAY_WIDTH columns, y one of the DISPLAY_HEIGHT rows, (0,0) is top left.
Storage is rotated relative to that picture: consecutive bytes (or bits) walk
down a column before advancing to the next one, because the firmware stages
greyscale images one column at a time.
"""

from __future__ import annotations

import operator
from typing import Iterator, Tuple

import numpy as np

from .errors import PixelOutOfBoundsError
from .protocol_config import DISPLAY_HEIGHT, DISPLAY_WIDTH, DRAW_COMMAND_LENGTH


def _pixel_location(x: int, y: int) -> int:
    """
    Map a display coordinate to its position in column-major storage.

    location = x * DISPLAY_HEIGHT + y

    Raises:
        PixelOutOfBoundsError: If (x, y) is not on the display
    """
    if not (0 <= x < DISPLAY_WIDTH and 0 <= y < DISPLAY_HEIGHT):
        raise PixelOutOfBoundsError(x, y, DISPLAY_WIDTH, DISPLAY_HEIGHT)
    return x * DISPLAY_HEIGHT + y


def _check_byte(value: int) -> int:
    try:
        value = operator.index(value)
    except TypeError as e:
        raise ValueError(
            f"Pixel value must be an integer, got {type(value).__name__}"
        ) from e
    if not 0 <= value <= 0xFF:
        raise ValueError(f"Pixel value must be 0-255, got {value}")
    return value


class GreyscaleFramebuffer:
    """
    An 8 bit per pixel image the size of one matrix module.

    The buffer is stored column-major (see module docstring) so that each
    display column is a contiguous DISPLAY_HEIGHT byte slice, ready to be
    sent with a StageColumnBuffer command.
    """

    WIDTH = DISPLAY_WIDTH
    HEIGHT = DISPLAY_HEIGHT

    def __init__(self):
        self._buffer = np.zeros(self.WIDTH * self.HEIGHT, dtype=np.uint8)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GreyscaleFramebuffer):
            return NotImplemented
        return bool(np.array_equal(self._buffer, other._buffer))

    def _columns_view(self) -> np.ndarray:
        # (WIDTH, HEIGHT) view over the same storage; [x, y] == _buffer[x * HEIGHT + y]
        return self._buffer.reshape(self.WIDTH, self.HEIGHT)

    def data(self) -> bytes:
        """Raw column-major buffer."""
        return self._buffer.tobytes()

    def fill(self, value: int) -> None:
        self._buffer.fill(_check_byte(value))

    def get_point(self, x: int, y: int) -> int:
        return int(self._buffer[_pixel_location(x, y)])

    def draw_point(self, x: int, y: int, value: int) -> None:
        """
        Set a single pixel.

        Raises:
            PixelOutOfBoundsError: If x >= WIDTH or y >= HEIGHT. The buffer is
                left untouched.
        """
        location = _pixel_location(x, y)
        self._buffer[location] = _check_byte(value)

    def draw_box(self, x1: int, y1: int, x2: int, y2: int, value: int) -> None:
        """
        Fill the inclusive rectangle spanned by two opposite corners.

        Corners may be given in any order; each axis is normalised on its own.
        Both corners are checked before anything is drawn.

        Raises:
            PixelOutOfBoundsError: If either corner is off the display
        """
        _pixel_location(x1, y1)
        _pixel_location(x2, y2)
        value = _check_byte(value)

        x_min, x_max = min(x1, x2), max(x1, x2)
        y_min, y_max = min(y1, y2), max(y1, y2)

        self._columns_view()[x_min : x_max + 1, y_min : y_max + 1] = value

    def column(self, index: int) -> bytes:
        """Return the DISPLAY_HEIGHT bytes of one display column."""
        if not 0 <= index < self.WIDTH:
            raise IndexError(f"Column index must be 0-{self.WIDTH - 1}, got {index}")
        start = index * self.HEIGHT
        return self._buffer[start : start + self.HEIGHT].tobytes()

    def columns(self) -> Iterator[Tuple[int, bytes]]:
        for index in range(self.WIDTH):
            yield index, self.column(index)


class MonochromeFramebuffer:
    """
    A 1 bit per pixel image, packed into exactly one Draw command payload.

    Pixel (x, y) is bit (y + x * HEIGHT); bits fill each byte LSB first.
    """

    WIDTH = DISPLAY_WIDTH
    HEIGHT = DISPLAY_HEIGHT

    def __init__(self):
        self._data = np.zeros(DRAW_COMMAND_LENGTH, dtype=np.uint8)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MonochromeFramebuffer):
            return NotImplemented
        return bool(np.array_equal(self._data, other._data))

    def data(self) -> bytes:
        return self._data.tobytes()

    def fill(self, value: int) -> None:
        """Fill every byte (eight pixels at a time) with value."""
        self._data.fill(_check_byte(value))

    @staticmethod
    def _bit(x: int, y: int) -> Tuple[int, int]:
        location = _pixel_location(x, y)
        return location // 8, 1 << (location % 8)

    def get_point(self, x: int, y: int) -> bool:
        byte_index, bitmask = self._bit(x, y)
        return bool(self._data[byte_index] & bitmask)

    def draw_point(self, x: int, y: int, value: bool) -> None:
        """
        Turn one pixel on or off without touching its neighbours.

        Raises:
            PixelOutOfBoundsError: If x >= WIDTH or y >= HEIGHT
        """
        byte_index, bitmask = self._bit(x, y)

        if value:
            self._data[byte_index] |= bitmask
        else:
            self._data[byte_index] &= bitmask ^ 0xFF
