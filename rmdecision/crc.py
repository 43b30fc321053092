"""CRC-8 and CRC-16 checksums used by the video transmission link."""

from __future__ import annotations

CRC8_INIT = 0xFF
CRC16_INIT = 0xFFFF

_CRC8_POLY = 0x8C  # x^8 + x^5 + x^4 + 1, reflected
_CRC16_POLY = 0x8408  # x^16 + x^12 + x^5 + 1, reflected


def _build_table(poly: int) -> tuple[int, ...]:
    table = []
    for byte in range(256):
        crc = byte
        for _ in range(8):
            crc = (crc >> 1) ^ poly if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_CRC8_TABLE = _build_table(_CRC8_POLY)
_CRC16_TABLE = _build_table(_CRC16_POLY)


def get_crc8(data: bytes | bytearray | memoryview, init: int = CRC8_INIT) -> int:
    """Return the CRC-8 of ``data`` starting from ``init``."""
    crc = init & 0xFF
    for byte in bytes(data):
        crc = _CRC8_TABLE[crc ^ byte]
    return crc


def verify_crc8(data: bytes | bytearray | memoryview) -> bool:
    """True if the last byte of ``data`` is the CRC-8 of the bytes before it."""
    data = bytes(data)
    if len(data) <= 2:
        return False
    return get_crc8(data[:-1]) == data[-1]


def append_crc8(data: bytes | bytearray | memoryview) -> bytes:
    """Return ``data`` with its last byte replaced by the CRC-8 of the rest."""
    data = bytes(data)
    if len(data) <= 2:
        return data
    return data[:-1] + bytes([get_crc8(data[:-1])])


def get_crc16(data: bytes | bytearray | memoryview, init: int = CRC16_INIT) -> int:
    """Return the CRC-16 of ``data`` starting from ``init``."""
    crc = init & 0xFFFF
    for byte in bytes(data):
        crc = (crc >> 8) ^ _CRC16_TABLE[(crc ^ byte) & 0xFF]
    return crc


def verify_crc16(data: bytes | bytearray | memoryview) -> bool:
    """True if the last two bytes of ``data`` hold its CRC-16, low byte first."""
    data = bytes(data)
    if len(data) <= 2:
        return False
    expected = get_crc16(data[:-2])
    return data[-2] == expected & 0xFF and data[-1] == (expected >> 8) & 0xFF


def append_crc16(data: bytes | bytearray | memoryview) -> bytes:
    """Return ``data`` with its last two bytes replaced by the CRC-16 of the rest."""
    data = bytes(data)
    if len(data) <= 2:
        return data
    crc = get_crc16(data[:-2])
    return data[:-2] + crc.to_bytes(2, "little")