"""Decoder for the serial stream of the video transmission receiver."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import Any, Protocol

import serial as pyserial

from rmdecision.crc import verify_crc8, verify_crc16
from rmdecision.vt_protocol import (
    CMD_ID_LENGTH,
    CONTROL_FRAME_LENGTH,
    CONTROL_SOF,
    HEADER_LENGTH,
    SOF,
    TAIL_LENGTH,
    CmdId,
    ControlData,
    CustomControllerData,
    FrameHeader,
    KeyboardMouseData,
)

logger = logging.getLogger(__name__)

DEFAULT_PORT = "/dev/usbImagetran"
DEFAULT_BAUDRATE = 921600
UNPACK_BUFFER_LENGTH = 256
FRAME_LENGTH = 128
MAX_DATA_LENGTH = 256
ONLINE_TIMEOUT = 0.1

_ENCODER_SCALE = 3.14 / 18000.0
_STICK_CENTER = 1024.0
_STICK_RANGE = 660.0


class SerialPort(Protocol):
    @property
    def in_waiting(self) -> int: ...

    def read(self, size: int) -> bytes: ...


@dataclass(frozen=True)
class CustomControllerMessage:
    """Custom controller reading with encoder angles in radians."""

    encoder_data: tuple[float, ...]
    joystick_l_y: int
    joystick_l_x: int
    joystick_r_y: int
    joystick_r_x: int
    button_data: tuple[bool, ...]


@dataclass(frozen=True)
class ReceiverControlMessage:
    """Receiver control state with sticks and wheel normalised to about [-1, 1]."""

    joystick_r_x: float
    joystick_r_y: float
    joystick_l_y: float
    joystick_l_x: float
    mode_switch: int
    pause_button: bool
    custom_button_l: bool
    custom_button_r: bool
    wheel: float
    trigger: bool
    mouse_x: int
    mouse_y: int
    mouse_wheel: int
    mouse_left_down: int
    mouse_right_down: int
    mouse_mid_down: int
    keys: dict[str, bool] = field(default_factory=dict)


def _stick(value: int) -> float:
    return (value - _STICK_CENTER) / _STICK_RANGE


def _custom_controller_message(ref: CustomControllerData) -> CustomControllerMessage:
    e1, e2, e3, e4, e5, e6 = (v * _ENCODER_SCALE for v in ref.encoders)
    return CustomControllerMessage(
        encoder_data=(e1, e2, e6, e4, e5, e3),
        joystick_l_y=ref.joystick_l_x,
        joystick_l_x=ref.joystick_l_y,
        joystick_r_y=ref.joystick_r_x,
        joystick_r_x=ref.joystick_r_y,
        button_data=tuple(ref.buttons),
    )


def _receiver_control_message(ref: ControlData) -> ReceiverControlMessage:
    return ReceiverControlMessage(
        joystick_r_x=_stick(ref.joystick_r_x),
        joystick_r_y=_stick(ref.joystick_r_y),
        joystick_l_y=_stick(ref.joystick_l_y),
        joystick_l_x=_stick(ref.joystick_l_x),
        mode_switch=ref.mode_switch,
        pause_button=ref.pause_button,
        custom_button_l=ref.custom_button_l,
        custom_button_r=ref.custom_button_r,
        wheel=_stick(ref.wheel),
        trigger=ref.trigger,
        mouse_x=ref.mouse_x,
        mouse_y=ref.mouse_y,
        mouse_wheel=ref.mouse_wheel,
        mouse_left_down=ref.mouse_left_down,
        mouse_right_down=ref.mouse_right_down,
        mouse_mid_down=ref.mouse_mid_down,
        keys=dict(ref.keys),
    )


def _payload(frame: bytes, size: int) -> bytes:
    start = HEADER_LENGTH + CMD_ID_LENGTH
    return frame[start:start + size].ljust(size, b"\x00")


class VideoTransmission:
    """Reassembles frames from the receiver and hands decoded messages to callbacks."""

    def __init__(
        self,
        serial: SerialPort,
        on_custom_controller: Callable[[CustomControllerMessage], Any] | None = None,
        on_keyboard_mouse: Callable[[KeyboardMouseData], Any] | None = None,
        on_receiver_control: Callable[[ReceiverControlMessage], Any] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        logger.info("Video transmission load.")
        self._serial = serial
        self._on_custom_controller = on_custom_controller
        self._on_keyboard_mouse = on_keyboard_mouse
        self._on_receiver_control = on_receiver_control
        self._clock = clock
        self._last_get_data_time = clock()
        self._online = False
        self._rx_buffer = bytearray()
        self._unpack_buffer = bytearray(UNPACK_BUFFER_LENGTH)

    @property
    def is_online(self) -> bool:
        """Whether a valid frame arrived recently."""
        return self._online

    def clear_rx_buffer(self) -> None:
        self._rx_buffer.clear()

    def read(self) -> None:
        """Read what the port has and decode every frame in the sliding window."""
        available = self._serial.in_waiting
        if not available:
            return
        self._rx_buffer = bytearray(self._serial.read(available))
        if self._clock() - self._last_get_data_time > ONLINE_TIMEOUT:
            self._online = False
        rx_len = len(self._rx_buffer)
        # A read as large as the window is dropped, as the receiver firmware expects.
        if rx_len < UNPACK_BUFFER_LENGTH:
            self._unpack_buffer = self._unpack_buffer[rx_len:] + self._rx_buffer
        window = bytes(self._unpack_buffer)
        k = 0
        while k < UNPACK_BUFFER_LENGTH - FRAME_LENGTH:
            if window[k] == SOF:
                frame_len = self._unpack(window[k:])
                if frame_len != -1:
                    k += frame_len
            if window[k:k + 2] == CONTROL_SOF:
                frame_len = self._control_data_unpack(window[k:])
                if frame_len != -1:
                    k += frame_len
            k += 1
        self.clear_rx_buffer()

    def _mark_online(self) -> None:
        self._online = True
        self._last_get_data_time = self._clock()

    def _unpack(self, data: bytes) -> int:
        if not verify_crc8(data[:HEADER_LENGTH]):
            return -1
        header = FrameHeader.from_bytes(data)
        if header.data_length > MAX_DATA_LENGTH:
            logger.info("discard possible wrong frames, data length: %d", header.data_length)
            return 0
        frame_len = header.data_length + HEADER_LENGTH + CMD_ID_LENGTH + TAIL_LENGTH
        frame = data[:frame_len]
        if len(frame) < frame_len or not verify_crc16(frame):
            return -1
        cmd_id = data[6] << 8 | data[5]
        if cmd_id == CmdId.CUSTOM_CONTROLLER:
            ref = CustomControllerData.from_bytes(_payload(data, CustomControllerData.SIZE))
            if self._on_custom_controller is not None:
                self._on_custom_controller(_custom_controller_message(ref))
        elif cmd_id == CmdId.ROBOT_COMMAND:
            ref_km = KeyboardMouseData.from_bytes(_payload(data, KeyboardMouseData.SIZE))
            if self._on_keyboard_mouse is not None:
                self._on_keyboard_mouse(ref_km)
        else:
            logger.warning("Referee command ID %d not found.", cmd_id)
        self._mark_online()
        return frame_len

    def _control_data_unpack(self, data: bytes) -> int:
        frame = data[:CONTROL_FRAME_LENGTH]
        if len(frame) < CONTROL_FRAME_LENGTH or not verify_crc16(frame):
            return -1
        ref = ControlData.from_bytes(frame[len(CONTROL_SOF):])
        if self._on_receiver_control is not None:
            self._on_receiver_control(_receiver_control_message(ref))
        self._mark_online()
        return CONTROL_FRAME_LENGTH


def open_serial(port: str = DEFAULT_PORT, baudrate: int = DEFAULT_BAUDRATE) -> pyserial.Serial:
    """Open the receiver's serial port with a 50 ms timeout."""
    return pyserial.Serial(port=port, baudrate=baudrate, timeout=0.05)


def _printer(topic: str) -> Callable[[Any], None]:
    def emit(message: Any) -> None:
        sys.stdout.write(json.dumps({"topic": topic, "data": asdict(message)}) + "\n")
        sys.stdout.flush()

    return emit


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Decode the video transmission receiver stream.")
    parser.add_argument("--port", default=DEFAULT_PORT)
    parser.add_argument("--baudrate", type=int, default=DEFAULT_BAUDRATE)
    parser.add_argument("--rate", type=float, default=100.0, help="loop rate in Hz")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    try:
        port = open_serial(args.port, args.baudrate)
    except pyserial.SerialException:
        logger.error("Cannot open image transmitter port")
        return 1
    transmission = VideoTransmission(
        port,
        on_custom_controller=_printer("custom_controller_data"),
        on_keyboard_mouse=_printer("keyboard_mouse_data"),
        on_receiver_control=_printer("receiver_control_data"),
    )
    period = 1.0 / args.rate
    try:
        while True:
            transmission.read()
            time.sleep(period)
    except KeyboardInterrupt:
        return 0