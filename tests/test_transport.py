"""Tests for the serial transports, with pyserial replaced by a fake port."""

import errno
import logging

import pytest
import serial
from serial import SerialException, SerialTimeoutException

from ledmatrix import transport as transport_module
from ledmatrix.commands import Brightness, DrawBuffer, Sleep, Version
from ledmatrix.errors import (
    BrokenLinkError,
    MatrixConnectionError,
    NotConnectedError,
    TransportIOError,
    WriteTimeoutError,
)
from ledmatrix.framebuffer import GreyscaleFramebuffer
from ledmatrix.protocol_config import DISPLAY_WIDTH, MAX_COMMAND_LENGTH
from ledmatrix.transport import (
    LedMatrix,
    LinkState,
    MockLedMatrix,
    create_transport,
)


def raise_broken_pipe():
    # pyserial's POSIX backend wraps the OSError like this
    try:
        raise BrokenPipeError(errno.EPIPE, "Broken pipe")
    except OSError as e:
        raise SerialException(f"write failed: {e}")


class FakeSerial:
    """Stands in for serial.Serial; records what the transport does with it."""

    opened = []
    fail_open = False

    def __init__(self, **kwargs):
        if FakeSerial.fail_open:
            raise SerialException(f"could not open port {kwargs.get('port')}")
        self.kwargs = kwargs
        self.written = []
        self.closed = False
        self.error = None
        FakeSerial.opened.append(self)

    def write(self, data):
        if self.error is not None:
            self.error()
        self.written.append(bytes(data))
        return len(data)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_serial(monkeypatch):
    FakeSerial.opened = []
    FakeSerial.fail_open = False
    monkeypatch.setattr(transport_module.serial, "Serial", FakeSerial)
    return FakeSerial


@pytest.fixture
def matrix(fake_serial):
    return LedMatrix("/dev/ttyACM0")


def test_open_uses_fixed_link_settings(matrix, fake_serial):
    port = fake_serial.opened[0]
    assert port.kwargs["port"] == "/dev/ttyACM0"
    assert port.kwargs["baudrate"] == 115200
    assert port.kwargs["bytesize"] == serial.EIGHTBITS
    assert port.kwargs["parity"] == serial.PARITY_NONE
    assert port.kwargs["stopbits"] == serial.STOPBITS_ONE
    assert port.kwargs["timeout"] == 0.1
    assert port.kwargs["write_timeout"] == 0.1
    assert matrix.state is LinkState.CONNECTED
    assert matrix.is_connected()
    assert matrix.path == "/dev/ttyACM0"


def test_open_failure_raises_connection_error(fake_serial):
    fake_serial.fail_open = True
    with pytest.raises(MatrixConnectionError, match="/dev/ttyACM9"):
        LedMatrix("/dev/ttyACM9")


def test_execute_writes_one_full_frame(matrix, fake_serial):
    written = matrix.execute(Brightness(0x40))

    port = fake_serial.opened[0]
    assert written == MAX_COMMAND_LENGTH
    assert len(port.written) == 1
    assert port.written[0][:4] == bytes([0x32, 0xAC, 0x00, 0x40])


def test_execute_returns_raw_byte_count(matrix, fake_serial):
    port = fake_serial.opened[0]
    port.write = lambda data: 17  # short write is passed through untouched
    assert matrix.execute(Sleep(False)) == 17


def test_timeout_is_translated_and_keeps_port_open(matrix, fake_serial):
    port = fake_serial.opened[0]

    def timeout():
        raise SerialTimeoutException("Write timeout")

    port.error = timeout

    with pytest.raises(WriteTimeoutError) as exc_info:
        matrix.execute(Version())

    assert isinstance(exc_info.value.__cause__, SerialTimeoutException)
    assert matrix.state is LinkState.CONNECTED
    assert not port.closed


def test_broken_pipe_is_translated(matrix, fake_serial):
    fake_serial.opened[0].error = raise_broken_pipe
    with pytest.raises(BrokenLinkError, match="broken"):
        matrix.execute(DrawBuffer())


def test_plain_broken_pipe_oserror_is_translated(matrix, fake_serial):
    def broken():
        raise BrokenPipeError(errno.EPIPE, "Broken pipe")

    fake_serial.opened[0].error = broken
    with pytest.raises(BrokenLinkError):
        matrix.execute(DrawBuffer())


def test_other_io_errors_are_translated(matrix, fake_serial):
    def other():
        raise SerialException("device reports readiness to read but returned no data")

    fake_serial.opened[0].error = other
    with pytest.raises(TransportIOError, match="failed"):
        matrix.execute(DrawBuffer())


def test_reconnect_reopens_same_path_with_longer_timeout(matrix, fake_serial):
    first = fake_serial.opened[0]

    matrix.reconnect()

    assert first.closed
    assert len(fake_serial.opened) == 2
    second = fake_serial.opened[1]
    assert second.kwargs["port"] == "/dev/ttyACM0"
    assert second.kwargs["timeout"] == 0.5
    assert second.kwargs["write_timeout"] == 0.5

    matrix.execute(DrawBuffer())
    assert len(second.written) == 1
    assert first.written == []


def test_failed_reconnect_leaves_transport_disconnected(matrix, fake_serial):
    fake_serial.fail_open = True

    with pytest.raises(MatrixConnectionError):
        matrix.reconnect()

    assert matrix.state is LinkState.DISCONNECTED
    with pytest.raises(NotConnectedError):
        matrix.execute(DrawBuffer())


def test_context_manager_closes_port(fake_serial):
    with LedMatrix("/dev/ttyACM1") as matrix:
        matrix.execute(Brightness(1))
    assert fake_serial.opened[0].closed
    assert matrix.state is LinkState.DISCONNECTED


def test_show_stages_columns_then_commits(matrix, fake_serial):
    image = GreyscaleFramebuffer()
    image.draw_point(8, 33, 5)

    matrix.show(image)

    frames = fake_serial.opened[0].written
    assert len(frames) == DISPLAY_WIDTH + 1
    assert [f[2] for f in frames] == [0x07] * DISPLAY_WIDTH + [0x08]
    assert [f[3] for f in frames[:-1]] == list(range(DISPLAY_WIDTH))
    assert frames[8][4 + 33] == 5


def test_mock_transport_records_frames():
    mock = MockLedMatrix("/dev/null")
    assert mock.execute(Brightness(3)) == MAX_COMMAND_LENGTH
    assert mock.frames[0][3] == 3

    mock.close()
    with pytest.raises(NotConnectedError):
        mock.execute(Brightness(3))

    mock.reconnect()
    assert mock.is_connected()


def test_mock_transport_logs_frames(caplog):
    caplog.set_level(logging.INFO, logger="ledmatrix.transport")
    mock = MockLedMatrix("/dev/null")
    mock.execute(Brightness(3))

    frame = mock.frames[0].hex()
    assert f"[MOCK] /dev/null <- {frame}" in caplog.text


def test_create_transport(fake_serial):
    assert isinstance(create_transport("/dev/ttyACM0", use_hardware=False), MockLedMatrix)
    assert isinstance(create_transport("/dev/ttyACM0"), LedMatrix)
    assert len(fake_serial.opened) == 1
