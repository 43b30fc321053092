"""Wire structures of the video transmission link."""

from __future__ import annotations

import struct
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar

SOF = 0xA5
CONTROL_SOF = b"\xa9\x53"
HEADER_LENGTH = 5
CMD_ID_LENGTH = 2
TAIL_LENGTH = 2
CONTROL_FRAME_LENGTH = 21

KEY_NAMES: tuple[str, ...] = (
    "w", "s", "a", "d", "shift", "ctrl", "q", "e",
    "r", "f", "g", "z", "x", "c", "v", "b",
)


class CmdId(IntEnum):
    """Command identifiers carried after the frame header."""

    CUSTOM_CONTROLLER = 0x0302
    ROBOT_COMMAND = 0x0304
    ROBOT_TO_CUSTOM = 0x0309


def _take(data: bytes | bytearray | memoryview, size: int, name: str) -> bytes:
    raw = bytes(data[:size])
    if len(raw) < size:
        raise ValueError(f"{name} needs {size} bytes, got {len(raw)}")
    return raw


def _check(name: str, value: int, bits: int) -> int:
    value = int(value)
    if not 0 <= value < (1 << bits):
        raise ValueError(f"{name} does not fit in {bits} bits: {value}")
    return value


def _no_keys() -> dict[str, bool]:
    return {name: False for name in KEY_NAMES}


def _decode_keys(word: int) -> dict[str, bool]:
    return {name: bool(word >> bit & 1) for bit, name in enumerate(KEY_NAMES)}


def _encode_keys(keys: Mapping[str, bool]) -> int:
    unknown = set(keys) - set(KEY_NAMES)
    if unknown:
        raise ValueError(f"unknown keys: {sorted(unknown)}")
    return sum(1 << bit for bit, name in enumerate(KEY_NAMES) if keys.get(name))


@dataclass(frozen=True)
class FrameHeader:
    """Header opening every referee-style frame."""

    SIZE: ClassVar[int] = HEADER_LENGTH
    _FORMAT: ClassVar[str] = "<BHBB"

    sof: int = SOF
    data_length: int = 0
    seq: int = 0
    crc8: int = 0

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> FrameHeader:
        return cls(*struct.unpack(cls._FORMAT, _take(data, cls.SIZE, "FrameHeader")))

    def to_bytes(self) -> bytes:
        return struct.pack(self._FORMAT, self.sof, self.data_length, self.seq, self.crc8)


@dataclass(frozen=True)
class CustomControllerData:
    """Raw readings of the custom controller; two-byte values are big-endian."""

    SIZE: ClassVar[int] = 30
    _FORMAT: ClassVar[str] = ">10HB9x"

    encoders: tuple[int, int, int, int, int, int] = (0, 0, 0, 0, 0, 0)
    joystick_l_y: int = 0
    joystick_l_x: int = 0
    joystick_r_y: int = 0
    joystick_r_x: int = 0
    buttons: tuple[bool, bool, bool, bool] = (False, False, False, False)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> CustomControllerData:
        values = struct.unpack(cls._FORMAT, _take(data, cls.SIZE, "CustomControllerData"))
        button_byte = values[10]
        return cls(
            encoders=tuple(values[:6]),
            joystick_l_y=values[6],
            joystick_l_x=values[7],
            joystick_r_y=values[8],
            joystick_r_x=values[9],
            buttons=tuple(bool(button_byte >> bit & 1) for bit in range(4)),
        )

    def to_bytes(self) -> bytes:
        if len(self.encoders) != 6 or len(self.buttons) != 4:
            raise ValueError("custom controller needs 6 encoders and 4 buttons")
        words = [
            *(_check("encoder", v, 16) for v in self.encoders),
            _check("joystick_l_y", self.joystick_l_y, 16),
            _check("joystick_l_x", self.joystick_l_x, 16),
            _check("joystick_r_y", self.joystick_r_y, 16),
            _check("joystick_r_x", self.joystick_r_x, 16),
        ]
        button_byte = sum(1 << bit for bit, pressed in enumerate(self.buttons) if pressed)
        return struct.pack(self._FORMAT, *words, button_byte)


@dataclass(frozen=True)
class KeyboardMouseData:
    """Keyboard and mouse state forwarded from the operator's client."""

    SIZE: ClassVar[int] = 12
    _FORMAT: ClassVar[str] = "<3h2bHH"

    mouse_x: int = 0
    mouse_y: int = 0
    mouse_z: int = 0
    left_button_down: int = 0
    right_button_down: int = 0
    keys: Mapping[str, bool] = field(default_factory=_no_keys)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> KeyboardMouseData:
        mx, my, mz, left, right, keys, _reserved = struct.unpack(
            cls._FORMAT, _take(data, cls.SIZE, "KeyboardMouseData")
        )
        return cls(mx, my, mz, left, right, _decode_keys(keys))

    def to_bytes(self) -> bytes:
        try:
            return struct.pack(
                self._FORMAT,
                self.mouse_x,
                self.mouse_y,
                self.mouse_z,
                self.left_button_down,
                self.right_button_down,
                _encode_keys(self.keys),
                0,
            )
        except struct.error as exc:
            raise ValueError(str(exc)) from exc


_CONTROL_BITS: tuple[tuple[str, int, int], ...] = (
    ("joystick_r_x", 0, 11),
    ("joystick_r_y", 11, 11),
    ("joystick_l_y", 22, 11),
    ("joystick_l_x", 33, 11),
    ("mode_switch", 44, 2),
    ("pause_button", 46, 1),
    ("custom_button_l", 47, 1),
    ("custom_button_r", 48, 1),
    ("wheel", 49, 11),
    ("trigger", 60, 1),
)


@dataclass(frozen=True)
class ControlData:
    """Remote-controller, mouse and keyboard state from the receiver."""

    SIZE: ClassVar[int] = 17
    _TAIL_FORMAT: ClassVar[str] = "<3hBH"

    joystick_r_x: int = 0
    joystick_r_y: int = 0
    joystick_l_y: int = 0
    joystick_l_x: int = 0
    mode_switch: int = 0
    pause_button: bool = False
    custom_button_l: bool = False
    custom_button_r: bool = False
    wheel: int = 0
    trigger: bool = False
    mouse_x: int = 0
    mouse_y: int = 0
    mouse_wheel: int = 0
    mouse_left_down: int = 0
    mouse_right_down: int = 0
    mouse_mid_down: int = 0
    keys: Mapping[str, bool] = field(default_factory=_no_keys)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> ControlData:
        raw = _take(data, cls.SIZE, "ControlData")
        bits = int.from_bytes(raw[:8], "little")
        packed = {name: bits >> offset & ((1 << width) - 1) for name, offset, width in _CONTROL_BITS}
        mouse_x, mouse_y, mouse_wheel, buttons, keys = struct.unpack_from(cls._TAIL_FORMAT, raw, 8)
        return cls(
            joystick_r_x=packed["joystick_r_x"],
            joystick_r_y=packed["joystick_r_y"],
            joystick_l_y=packed["joystick_l_y"],
            joystick_l_x=packed["joystick_l_x"],
            mode_switch=packed["mode_switch"],
            pause_button=bool(packed["pause_button"]),
            custom_button_l=bool(packed["custom_button_l"]),
            custom_button_r=bool(packed["custom_button_r"]),
            wheel=packed["wheel"],
            trigger=bool(packed["trigger"]),
            mouse_x=mouse_x,
            mouse_y=mouse_y,
            mouse_wheel=mouse_wheel,
            mouse_left_down=buttons & 0x3,
            mouse_right_down=buttons >> 2 & 0x3,
            mouse_mid_down=buttons >> 4 & 0x3,
            keys=_decode_keys(keys),
        )

    def to_bytes(self) -> bytes:
        bits = 0
        for name, offset, width in _CONTROL_BITS:
            bits |= _check(name, getattr(self, name), width) << offset
        buttons = (
            _check("mouse_left_down", self.mouse_left_down, 2)
            | _check("mouse_right_down", self.mouse_right_down, 2) << 2
            | _check("mouse_mid_down", self.mouse_mid_down, 2) << 4
        )
        try:
            tail = struct.pack(
                self._TAIL_FORMAT,
                self.mouse_x,
                self.mouse_y,
                self.mouse_wheel,
                buttons,
                _encode_keys(self.keys),
            )
        except struct.error as exc:
            raise ValueError(str(exc)) from exc
        return bits.to_bytes(8, "little") + tail