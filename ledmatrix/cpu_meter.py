"""
CPU utilisation bar meter across a left and a right LED matrix module.

Each module shows eight bars (columns 0-3 and 5-8, the centre column is a
divider) inside a frame at the bottom of the display. The left module shows
CPUs 0-7, the right module CPUs 8-15.
"""

import logging
import time
from typing import Callable, List, Optional, Sequence

import psutil

from .commands import Brightness, Command
from .config import MeterConfig, default_config
from .errors import TransportError
from .framebuffer import GreyscaleFramebuffer
from .protocol_config import DISPLAY_HEIGHT, DISPLAY_WIDTH
from .recovery import handle_transport_error
from .transport import MatrixTransport

logger = logging.getLogger(__name__)

BARS_PER_MODULE = 8
BAR_MAX_HEIGHT = 17
# psutil needs some time between samples for per-CPU figures to mean anything
UPDATE_INTERVAL = 0.2


def sample_cpu_usage() -> List[float]:
    """Per-CPU utilisation in percent since the previous call."""
    return psutil.cpu_percent(percpu=True)


def draw_vu_meter(
    bitmap: GreyscaleFramebuffer,
    values: Sequence[float],
    background: int = 2,
    bar: int = 20,
) -> None:
    """
    Stage VU meter in a bitmap buffer.

    Args:
        bitmap: Framebuffer to draw into (fully overwritten)
        values: Up to BARS_PER_MODULE percentages, clamped to 0-100
        background: Intensity outside the bars
        bar: Intensity of the bars
    """
    middle = DISPLAY_WIDTH // 2
    bottom = DISPLAY_HEIGHT - 2

    bitmap.fill(background)
    bitmap.draw_box(0, DISPLAY_HEIGHT - 20, DISPLAY_WIDTH - 1, DISPLAY_HEIGHT - 1, 0)
    bitmap.draw_box(0, DISPLAY_HEIGHT - 19, DISPLAY_WIDTH - 1, bottom, background)
    bitmap.draw_box(middle, DISPLAY_HEIGHT - 19, middle, bottom, 0)

    for index, value in enumerate(values[:BARS_PER_MODULE]):
        value = max(0, min(100, int(value)))
        top = bottom - (BAR_MAX_HEIGHT * value) // 100

        # skip over the divider
        column = index + 1 if index >= middle else index
        bitmap.draw_box(column, top, column, bottom, bar)


class CpuMeter:
    """
    Drives two modules with per-CPU bars, recovering from link errors.

    Transport errors on one module are handled by the recovery policy and do
    not stop the other module from updating. Unrecoverable errors propagate
    as FatalLinkError.
    """

    def __init__(
        self,
        left: MatrixTransport,
        right: MatrixTransport,
        config: Optional[MeterConfig] = None,
        sample: Optional[Callable[[], Sequence[float]]] = None,
        sleep: Optional[Callable[[float], None]] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.modules = [left, right]
        self.config = config or default_config()
        self.image = GreyscaleFramebuffer()
        self._sample = sample or sample_cpu_usage
        self._sleep = sleep or time.sleep
        self._clock = clock or time.monotonic

    def _send(self, matrix: MatrixTransport, commands: Sequence[Command]) -> bool:
        try:
            for command in commands:
                matrix.execute(command)
            return True
        except TransportError as e:
            handle_transport_error(e, matrix, self.config.retry_pause, self._sleep)
            return False

    def start(self) -> None:
        """Set brightness on both modules."""
        for matrix in self.modules:
            self._send(matrix, [Brightness(self.config.brightness)])

    def step(self) -> List[bool]:
        """
        Sample CPUs once and update both modules.

        Returns:
            List[bool]: Per module, whether the image was fully sent
        """
        values = list(self._sample())
        results = []

        for offset, matrix in enumerate(self.modules):
            chunk = values[offset * BARS_PER_MODULE : (offset + 1) * BARS_PER_MODULE]
            chunk += [0] * (BARS_PER_MODULE - len(chunk))

            draw_vu_meter(self.image, chunk, self.config.background, self.config.bar)
            try:
                matrix.show(self.image)
                results.append(True)
            except TransportError as e:
                handle_transport_error(e, matrix, self.config.retry_pause, self._sleep)
                results.append(False)

        return results

    def run(self, iterations: Optional[int] = None) -> None:
        """Update the displays forever, or `iterations` times."""
        self.start()
        logger.info(
            "CPU meter running on %s", ", ".join(m.path for m in self.modules)
        )

        count = 0
        while iterations is None or count < iterations:
            started = self._clock()
            self.step()

            # Sampling takes time; sleep only what is left of the interval
            elapsed = self._clock() - started
            if elapsed < UPDATE_INTERVAL:
                self._sleep(UPDATE_INTERVAL - elapsed)
            count += 1
