from __future__ import annotations

from thermochron.w1.crc16 import checksum


def _bitwise_arc(data: bytes) -> int:
    crc = 0
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ 0xA001
            else:
                crc >>= 1
    return crc


def test_check_vector() -> None:
    assert checksum(b"123456789") == 0xBB3D


def test_empty_input_is_initial_value() -> None:
    assert checksum(b"") == 0x0000


def test_table_matches_bitwise_definition() -> None:
    data = bytes(range(256)) + b"\x69\x00\x02" + bytes(32)
    assert checksum(data) == _bitwise_arc(data)
    assert checksum(data) == checksum(bytes(data))


def test_checksum_of_data_and_crc_leaves_zero_residue() -> None:
    data = b"\x69\x00\x10" + bytes(range(32))
    crc = checksum(data)
    assert checksum(data + crc.to_bytes(2, "little")) == 0
