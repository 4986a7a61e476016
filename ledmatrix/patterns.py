"""
Built-in patterns rendered by the module firmware.

A pattern encodes into the two payload bytes of a Pattern command:
[pattern id, parameter]. Only Percentage uses the parameter.
"""

import operator
from dataclasses import dataclass
from enum import IntEnum

from .errors import CommandEncodingError


class PatternId(IntEnum):
    PERCENTAGE = 0x00
    GRADIENT = 0x01
    DOUBLE_GRADIENT = 0x02
    DISPLAY_LOTUS = 0x03
    ZIG_ZAG = 0x04
    FULL_BRIGHTNESS = 0x05
    DISPLAY_PANIC = 0x06
    DISPLAY_LOTUS2 = 0x07


@dataclass(frozen=True)
class DisplayPattern:
    pattern_id: PatternId
    value: int = 0

    def __post_init__(self) -> None:
        # Normalise raw ints so equality and repr stay stable
        try:
            object.__setattr__(self, "pattern_id", PatternId(self.pattern_id))
        except ValueError as e:
            raise CommandEncodingError(f"Unknown pattern id {self.pattern_id!r}") from e

        try:
            object.__setattr__(self, "value", operator.index(self.value))
        except TypeError as e:
            raise CommandEncodingError(
                f"Pattern parameter must be an integer, got {type(self.value).__name__}"
            ) from e

        if self.pattern_id is PatternId.PERCENTAGE:
            if not 0 <= self.value <= 100:
                raise CommandEncodingError(
                    f"Percentage must be 0-100, got {self.value}"
                )
        elif self.value != 0:
            raise CommandEncodingError(
                f"Pattern {self.pattern_id.name} takes no parameter, got {self.value}"
            )

    @classmethod
    def percentage(cls, value: int) -> "DisplayPattern":
        return cls(PatternId.PERCENTAGE, value)

    def pack(self) -> bytes:
        return bytes([self.pattern_id, self.value])


GRADIENT = DisplayPattern(PatternId.GRADIENT)
DOUBLE_GRADIENT = DisplayPattern(PatternId.DOUBLE_GRADIENT)
DISPLAY_LOTUS = DisplayPattern(PatternId.DISPLAY_LOTUS)
ZIG_ZAG = DisplayPattern(PatternId.ZIG_ZAG)
FULL_BRIGHTNESS = DisplayPattern(PatternId.FULL_BRIGHTNESS)
DISPLAY_PANIC = DisplayPattern(PatternId.DISPLAY_PANIC)
DISPLAY_LOTUS2 = DisplayPattern(PatternId.DISPLAY_LOTUS2)
