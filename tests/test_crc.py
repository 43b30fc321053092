import pytest

from rmdecision.crc import (
    append_crc8,
    append_crc16,
    get_crc8,
    get_crc16,
    verify_crc8,
    verify_crc16,
)

PAYLOADS = [
    b"\x00\x00\x00",
    b"\xa5\x1e\x00\x07\x00",
    bytes(range(40)),
    b"hello world\x00\x00",
]


def test_crc8_table_entries():
    assert get_crc8(b"\x01", 0) == 0x5E
    assert get_crc8(b"\x02", 0) == 0xBC


def test_crc16_table_entry():
    assert get_crc16(b"\x01", 0) == 0x1189


def test_crc16_standard_check_value():
    assert get_crc16(b"123456789") == 0x6F91


def test_empty_data_returns_init():
    assert get_crc8(b"", 0x12) == 0x12
    assert get_crc16(b"", 0x1234) == 0x1234


def test_default_init_is_all_ones():
    data = b"\x10\x20\x30"
    assert get_crc8(data) == get_crc8(data, 0xFF)
    assert get_crc16(data) == get_crc16(data, 0xFFFF)


@pytest.mark.parametrize("payload", PAYLOADS)
def test_crc8_append_then_verify(payload):
    framed = append_crc8(payload)
    assert len(framed) == len(payload)
    assert framed[:-1] == payload[:-1]
    assert verify_crc8(framed)


@pytest.mark.parametrize("payload", PAYLOADS)
def test_crc16_append_then_verify(payload):
    framed = append_crc16(bytearray(payload))
    assert len(framed) == len(payload)
    assert framed[:-2] == payload[:-2]
    assert verify_crc16(framed)


@pytest.mark.parametrize("payload", PAYLOADS)
def test_corruption_detected(payload):
    framed8 = bytearray(append_crc8(payload))
    framed8[0] ^= 0x01
    assert not verify_crc8(framed8)
    framed16 = bytearray(append_crc16(payload))
    framed16[0] ^= 0x01
    assert not verify_crc16(framed16)


def test_short_messages_are_rejected_and_left_alone():
    assert verify_crc8(b"\x00\x00") is False
    assert verify_crc16(b"\x00\x00") is False
    assert append_crc8(b"\x01\x02") == b"\x01\x02"
    assert append_crc16(b"\x01") == b"\x01"


def test_crc16_stored_low_byte_first():
    framed = append_crc16(b"abc\x00\x00")
    crc = get_crc16(b"abc")
    assert framed[-2] == crc & 0xFF
    assert framed[-1] == crc >> 8