# ledmatrix/config.py
from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .recovery import ERROR_RETRY_PAUSE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SerialConfig:
    left: str = "/dev/ttyACM0"
    right: str = "/dev/ttyACM1"
    mock: bool = False

    def __post_init__(self) -> None:
        if not self.left or not self.right:
            raise ValueError("Both left and right device paths are required")
        if self.left == self.right:
            raise ValueError(f"Left and right modules share one device path: {self.left}")


@dataclass(frozen=True)
class MeterConfig:
    serial: SerialConfig = field(default_factory=SerialConfig)
    brightness: int = 0xFF
    background: int = 2
    bar: int = 20
    retry_pause: float = ERROR_RETRY_PAUSE

    def __post_init__(self) -> None:
        for name in ("brightness", "background", "bar"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFF:
                raise ValueError(f"Meter {name} must be 0-255, got {value}")
        if self.retry_pause < 0:
            raise ValueError("retry_pause must be >= 0")


def load_from_toml(config_path: str | Path) -> MeterConfig:
    """
    Load a MeterConfig from a TOML file.

    Expected TOML structure (every key optional):

    [serial]
    left = "/dev/ttyACM0"
    right = "/dev/ttyACM1"
    mock = false

    [meter]
    brightness = 255
    background = 2
    bar = 20
    retry_pause = 2.0
    """
    p = Path(config_path)
    if not p.exists():
        raise FileNotFoundError(f"Configuration file not found: {p}")

    with p.open("rb") as f:
        data = tomllib.load(f)

    serial = data.get("serial") or {}
    meter = data.get("meter") or {}
    defaults = MeterConfig()

    cfg = MeterConfig(
        serial=SerialConfig(
            left=str(serial.get("left", defaults.serial.left)),
            right=str(serial.get("right", defaults.serial.right)),
            mock=bool(serial.get("mock", defaults.serial.mock)),
        ),
        brightness=int(meter.get("brightness", defaults.brightness)),
        background=int(meter.get("background", defaults.background)),
        bar=int(meter.get("bar", defaults.bar)),
        retry_pause=float(meter.get("retry_pause", defaults.retry_pause)),
    )

    logger.info(
        "Loaded MeterConfig: left=%s right=%s (mock=%s), brightness=%d",
        cfg.serial.left,
        cfg.serial.right,
        cfg.serial.mock,
        cfg.brightness,
    )
    return cfg


def default_config() -> MeterConfig:
    """Left module on ttyACM0, right on ttyACM1, full brightness."""
    return MeterConfig()
