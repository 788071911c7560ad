from __future__ import annotations

import enum
import logging
import struct
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .crc16 import checksum
from .errors import ChecksumFault

logger = logging.getLogger(__name__)

PAGE_SIZE = 32
PAGE_FRAME_SIZE = PAGE_SIZE + 2
SCRATCHPAD_FRAME_SIZE = 35
COMMAND_PREFIX_SIZE = 3

FILLER = 0x00
PASSWORD = bytes(8)

STATUS_ADDRESS = 0x0200
LOG_ADDRESS = 0x1000
LOG_SIZE = 0x2000

# Register bits written through the scratchpad
RTC_EOSC = 0x01
RTC_EHSS = 0x02
MISSION_ETL = 0x01
MISSION_TLFS = 0x04
MISSION_RESERVED = 0xC0
HUMIDITY_ALARM_DISABLED = 0xFC


class Command(enum.IntEnum):
    WRITE_SCRATCHPAD = 0x0F
    COPY_SCRATCHPAD = 0x99
    READ_SCRATCHPAD = 0xAA
    READ_MEMORY = 0x69
    CLEAR_MEMORY = 0x96
    STOP_MISSION = 0x33
    START_MISSION = 0xCC


@dataclass(frozen=True)
class MissionSettings:
    rate: int = 10
    high_speed: bool = False
    high_resolution: bool = True
    low_alarm: int = 0x52
    high_alarm: int = 0x99
    start_delay: int = 0

    def __post_init__(self) -> None:
        if not 1 <= self.rate <= 0x3FFF:
            raise ValueError(f"Sample rate must be between 1 and {0x3FFF}, got {self.rate}")
        for name in ("low_alarm", "high_alarm"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFF:
                raise ValueError(f"{name} must fit in one byte, got {value}")
        if not 0 <= self.start_delay <= 0xFFFFFF:
            raise ValueError(f"start_delay must fit in 24 bits, got {self.start_delay}")

    @property
    def rtc_control(self) -> int:
        return RTC_EOSC | (RTC_EHSS if self.high_speed else 0)

    @property
    def mission_control(self) -> int:
        value = MISSION_RESERVED | MISSION_ETL
        if self.high_resolution:
            value |= MISSION_TLFS
        return value


def _address_bytes(address: int) -> bytes:
    if not 0 <= address <= 0xFFFF:
        raise ValueError(f"Address 0x{address:X} does not fit in 16 bits")
    return struct.pack("<H", address)


def bcd_encode(value: int) -> int:
    if not 0 <= value <= 99:
        raise ValueError(f"Cannot BCD-encode {value}")
    return (value // 10) << 4 | (value % 10)


def _bcd(byte: int, tens_mask: int = 0x0F) -> int:
    return (byte & 0x0F) + ((byte >> 4) & tens_mask) * 10


def decode_timestamp(raw: bytes) -> Optional[datetime]:
    """
    Decode the six-byte BCD real-time-clock layout (sec, min, hour, day, month, year).

    Only the two low bits of the hour tens nibble are used; the 12/24 hour
    flag above them is ignored. An all-zero field means the clock was never
    set and decodes to ``None``.
    """

    if len(raw) != 6:
        raise ValueError(f"Timestamp needs 6 bytes, got {len(raw)}")
    if not any(raw):
        return None
    second = _bcd(raw[0])
    minute = _bcd(raw[1])
    hour = _bcd(raw[2], tens_mask=0x03)
    day = _bcd(raw[3])
    month = _bcd(raw[4])
    year = 2000 + _bcd(raw[5])
    return datetime(year, month, day, hour, minute, second)


def encode_timestamp(moment: datetime) -> bytes:
    return bytes(
        [
            bcd_encode(moment.second),
            bcd_encode(moment.minute),
            bcd_encode(moment.hour),
            bcd_encode(moment.day),
            bcd_encode(moment.month),
            bcd_encode(moment.year % 100),
        ]
    )


def read_memory_frame(address: int) -> bytes:
    return bytes([Command.READ_MEMORY]) + _address_bytes(address) + bytes([FILLER] * 8)


def _mission_frame(command: Command) -> bytes:
    return bytes([command]) + PASSWORD + b"\xFF"


def clear_memory_frame() -> bytes:
    return _mission_frame(Command.CLEAR_MEMORY)


def stop_mission_frame() -> bytes:
    return _mission_frame(Command.STOP_MISSION)


def start_mission_frame() -> bytes:
    return _mission_frame(Command.START_MISSION)


def copy_scratchpad_frame(target: int = STATUS_ADDRESS) -> bytes:
    return bytes([Command.COPY_SCRATCHPAD]) + _address_bytes(target) + b"\x1F" + PASSWORD


def read_scratchpad_frame() -> bytes:
    return bytes([Command.READ_SCRATCHPAD])


def write_scratchpad_frame(
    settings: MissionSettings,
    now: datetime,
    address: int = STATUS_ADDRESS,
) -> bytes:
    data = bytearray(SCRATCHPAD_FRAME_SIZE)
    data[0] = Command.WRITE_SCRATCHPAD
    data[1:3] = _address_bytes(address)
    data[3:9] = encode_timestamp(now)
    data[9:11] = struct.pack("<H", settings.rate)
    data[11] = settings.low_alarm
    data[12] = settings.high_alarm
    # alarm control, both alarms disabled
    data[19] = 0x00
    data[20] = HUMIDITY_ALARM_DISABLED
    data[21] = settings.rtc_control
    data[22] = settings.mission_control
    data[25:28] = settings.start_delay.to_bytes(3, "little")
    # write through the end of the scratchpad
    data[28:35] = b"\xFF" * 7
    return bytes(data)


def verify_page(frame: bytes, context_prefix: bytes = b"", page: int = 0) -> bytes:
    """
    Validate one 34-byte memory page frame and return its 32 data bytes.

    The trailing little-endian word is the inverted CRC16 of
    ``context_prefix + data``; the first page of a read also covers the
    command and address bytes.
    """

    if len(frame) != PAGE_FRAME_SIZE:
        raise ValueError(f"Page frame must be {PAGE_FRAME_SIZE} bytes, got {len(frame)}")
    data = bytes(frame[:PAGE_SIZE])
    received = struct.unpack_from("<H", frame, PAGE_SIZE)[0]
    expected = received ^ 0xFFFF
    actual = checksum(bytes(context_prefix) + data)
    if actual != expected:
        logger.debug("Page %d CRC mismatch (expected=%04X, actual=%04X)", page, expected, actual)
        raise ChecksumFault(page, expected, actual)
    return data


def encode_page(data: bytes, context_prefix: bytes = b"") -> bytes:
    """Build a page frame the way the device sends it."""

    if len(data) != PAGE_SIZE:
        raise ValueError(f"Page payload must be {PAGE_SIZE} bytes, got {len(data)}")
    crc = checksum(bytes(context_prefix) + bytes(data)) ^ 0xFFFF
    return bytes(data) + struct.pack("<H", crc)
