"""Tests for meter configuration loading and validation."""

import pytest

from ledmatrix.config import MeterConfig, SerialConfig, default_config, load_from_toml


def test_defaults():
    cfg = default_config()
    assert cfg.serial.left == "/dev/ttyACM0"
    assert cfg.serial.right == "/dev/ttyACM1"
    assert cfg.serial.mock is False
    assert cfg.brightness == 0xFF
    assert cfg.background == 2
    assert cfg.bar == 20
    assert cfg.retry_pause == 2.0


def test_load_from_toml(tmp_path):
    path = tmp_path / "meter.toml"
    path.write_text(
        """
[serial]
left = "/dev/ttyACM2"
right = "/dev/ttyACM3"
mock = true

[meter]
brightness = 64
background = 1
bar = 30
retry_pause = 0.5
"""
    )

    cfg = load_from_toml(path)
    assert cfg.serial == SerialConfig("/dev/ttyACM2", "/dev/ttyACM3", mock=True)
    assert cfg.brightness == 64
    assert cfg.background == 1
    assert cfg.bar == 30
    assert cfg.retry_pause == 0.5


def test_partial_file_keeps_defaults(tmp_path):
    path = tmp_path / "meter.toml"
    path.write_text('[meter]\nbrightness = 10\n')

    cfg = load_from_toml(path)
    assert cfg.brightness == 10
    assert cfg.serial == SerialConfig()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_from_toml(tmp_path / "nope.toml")


def test_invalid_values():
    with pytest.raises(ValueError, match="brightness"):
        MeterConfig(brightness=300)
    with pytest.raises(ValueError, match="retry_pause"):
        MeterConfig(retry_pause=-1)
    with pytest.raises(ValueError, match="share one device"):
        SerialConfig(left="/dev/ttyACM0", right="/dev/ttyACM0")
