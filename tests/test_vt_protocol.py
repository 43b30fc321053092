import pytest

from rmdecision.vt_protocol import (
    KEY_NAMES,
    CmdId,
    ControlData,
    CustomControllerData,
    FrameHeader,
    KeyboardMouseData,
)


def _keys(*pressed):
    return {name: name in pressed for name in KEY_NAMES}


@pytest.mark.parametrize(
    "raw, expected",
    [
        (0x0302, CmdId.CUSTOM_CONTROLLER),
        (0x0304, CmdId.ROBOT_COMMAND),
        (0x0309, CmdId.ROBOT_TO_CUSTOM),
    ],
)
def test_cmd_ids(raw, expected):
    assert CmdId(raw) is expected


def test_unknown_cmd_id_raises():
    with pytest.raises(ValueError):
        CmdId(0x0001)


def test_frame_header_layout():
    header = FrameHeader.from_bytes(bytes([0xA5, 0x1E, 0x00, 0x07, 0x42]))
    assert header.sof == 0xA5
    assert header.data_length == 0x1E
    assert header.seq == 0x07
    assert header.crc8 == 0x42


def test_frame_header_round_trip():
    header = FrameHeader(data_length=300, seq=9, crc8=17)
    raw = header.to_bytes()
    assert len(raw) == FrameHeader.SIZE
    assert FrameHeader.from_bytes(raw) == header


def test_custom_controller_values_are_big_endian():
    data = CustomControllerData.from_bytes(bytes([0x01, 0x02]) + bytes(28))
    assert data.encoders[0] == 0x0102
    assert data.encoders[1:] == (0, 0, 0, 0, 0)


def test_custom_controller_round_trip():
    data = CustomControllerData(
        encoders=(1, 2, 3, 4, 5, 65535),
        joystick_l_y=10,
        joystick_l_x=20,
        joystick_r_y=30,
        joystick_r_x=40,
        buttons=(True, False, True, False),
    )
    raw = data.to_bytes()
    assert len(raw) == CustomControllerData.SIZE
    assert CustomControllerData.from_bytes(raw) == data


def test_keyboard_first_key_bit_is_w():
    raw = bytes(8) + b"\x01\x00" + bytes(2)
    data = KeyboardMouseData.from_bytes(raw)
    assert data.keys["w"] is True
    assert sum(data.keys.values()) == 1


def test_keyboard_round_trip():
    data = KeyboardMouseData(
        mouse_x=-5, mouse_y=300, mouse_z=-1, left_button_down=1, right_button_down=0,
        keys=_keys("shift", "b", "q"),
    )
    raw = data.to_bytes()
    assert len(raw) == KeyboardMouseData.SIZE
    assert KeyboardMouseData.from_bytes(raw) == data


def test_keyboard_rejects_unknown_key():
    with pytest.raises(ValueError):
        KeyboardMouseData(keys={"space": True}).to_bytes()


def test_control_first_channel_occupies_low_eleven_bits():
    data = ControlData.from_bytes(bytes([0xFF, 0x07]) + bytes(15))
    assert data.joystick_r_x == 2047
    assert data.joystick_r_y == 0
    assert data.wheel == 0


def test_control_round_trip():
    data = ControlData(
        joystick_r_x=364, joystick_r_y=1684, joystick_l_y=1024, joystick_l_x=1000,
        mode_switch=2, pause_button=True, custom_button_l=False, custom_button_r=True,
        wheel=1500, trigger=True, mouse_x=-100, mouse_y=200, mouse_wheel=-3,
        mouse_left_down=1, mouse_right_down=2, mouse_mid_down=3, keys=_keys("a", "ctrl"),
    )
    raw = data.to_bytes()
    assert len(raw) == ControlData.SIZE
    assert ControlData.from_bytes(raw) == data


def test_control_rejects_oversized_field():
    with pytest.raises(ValueError):
        ControlData(joystick_r_x=1 << 11).to_bytes()


@pytest.mark.parametrize("cls", [FrameHeader, CustomControllerData, KeyboardMouseData, ControlData])
def test_short_input_raises(cls):
    with pytest.raises(ValueError):
        cls.from_bytes(bytes(cls.SIZE - 1))