"""CRC-16/ARC as used by the 1-Wire memory read commands."""
from __future__ import annotations

from typing import List

POLY_REFLECTED = 0xA001


def _build_table(poly: int = POLY_REFLECTED) -> List[int]:
    table: List[int] = []
    for index in range(256):
        crc = index
        for _ in range(8):
            if crc & 0x0001:
                crc = (crc >> 1) ^ poly
            else:
                crc >>= 1
        table.append(crc)
    return table


_TABLE = _build_table()


def checksum(data: bytes, init: int = 0x0000) -> int:
    crc = init
    for byte in data:
        crc = (crc >> 8) ^ _TABLE[(crc ^ byte) & 0xFF]
    return crc & 0xFFFF
