"""Typed view over the iButton register pages (0x0200-0x025F)."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional, Union

from .frames import MISSION_TLFS, PAGE_SIZE, RTC_EHSS, decode_timestamp

logger = logging.getLogger(__name__)

STATUS_PAGES = 3
STATUS_SIZE = STATUS_PAGES * PAGE_SIZE

OFFSET_CLOCK = 0x00
OFFSET_SAMPLE_RATE = 0x06
OFFSET_RTC_CONTROL = 0x12
OFFSET_MISSION_CONTROL = 0x13
OFFSET_GENERAL_STATUS = 0x15
OFFSET_MISSION_TIMESTAMP = 0x19
OFFSET_SAMPLE_COUNT = 0x20
OFFSET_DEVICE_ID = 0x26
OFFSET_CALIBRATION = 0x40

STATUS_MIP = 0x01 << 1
STATUS_MEMCLR = 0x01 << 3


class DeviceId(enum.IntEnum):
    DS2422 = 0x00
    DS1923 = 0x20
    DS1922L = 0x40
    DS1922T = 0x60
    DS1922E = 0x80


@dataclass(frozen=True)
class DeviceSpec:
    name: str
    offset: float
    supported: bool
    tr1: float


DEVICES: Dict[DeviceId, DeviceSpec] = {
    DeviceId.DS2422: DeviceSpec("DS2422", 0.0, False, 0.0),
    DeviceId.DS1923: DeviceSpec("DS1923", 0.0, False, 0.0),
    DeviceId.DS1922L: DeviceSpec("DS1922L", -41.0, True, 60.0),
    DeviceId.DS1922T: DeviceSpec("DS1922T", -1.0, True, 90.0),
    DeviceId.DS1922E: DeviceSpec("DS1922E", 0.0, False, 0.0),
}


@dataclass(frozen=True)
class KnownModel:
    device_id: DeviceId

    @property
    def spec(self) -> DeviceSpec:
        return DEVICES[self.device_id]

    @property
    def raw(self) -> int:
        return int(self.device_id)

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def offset(self) -> float:
        return self.spec.offset

    @property
    def supported(self) -> bool:
        return self.spec.supported

    @property
    def tr1(self) -> float:
        return self.spec.tr1


@dataclass(frozen=True)
class UnknownModel:
    raw: int
    offset: float = 0.0
    supported: bool = False
    tr1: float = 0.0

    @property
    def name(self) -> str:
        return f"Unknown Device (deviceId:{self.raw:x})"


DeviceModel = Union[KnownModel, UnknownModel]


def lookup_model(raw: int) -> DeviceModel:
    try:
        return KnownModel(DeviceId(raw))
    except ValueError:
        return UnknownModel(raw)


@dataclass(frozen=True)
class Status:
    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != STATUS_SIZE:
            raise ValueError(f"Status block must be 0x{STATUS_SIZE:X} bytes, got 0x{len(self.raw):X}")

    @property
    def time(self) -> Optional[datetime]:
        return decode_timestamp(self.raw[OFFSET_CLOCK : OFFSET_CLOCK + 6])

    @property
    def mission_timestamp(self) -> Optional[datetime]:
        return decode_timestamp(self.raw[OFFSET_MISSION_TIMESTAMP : OFFSET_MISSION_TIMESTAMP + 6])

    @property
    def sample_count(self) -> int:
        return int.from_bytes(self.raw[OFFSET_SAMPLE_COUNT : OFFSET_SAMPLE_COUNT + 3], "little")

    @property
    def mission_in_progress(self) -> bool:
        return bool(self.raw[OFFSET_GENERAL_STATUS] & STATUS_MIP)

    @property
    def memory_cleared(self) -> bool:
        return bool(self.raw[OFFSET_GENERAL_STATUS] & STATUS_MEMCLR)

    @property
    def high_resolution(self) -> bool:
        return bool(self.raw[OFFSET_MISSION_CONTROL] & MISSION_TLFS)

    @property
    def sample_size(self) -> int:
        return 2 if self.high_resolution else 1

    @property
    def sample_rate(self) -> timedelta:
        rate = int.from_bytes(self.raw[OFFSET_SAMPLE_RATE : OFFSET_SAMPLE_RATE + 2], "little")
        if self.raw[OFFSET_RTC_CONTROL] & RTC_EHSS:
            return timedelta(seconds=rate)
        return timedelta(minutes=rate)

    @property
    def device_id(self) -> int:
        return self.raw[OFFSET_DEVICE_ID]

    @property
    def model(self) -> DeviceModel:
        return lookup_model(self.device_id)

    @property
    def name(self) -> str:
        return self.model.name

    def as_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "model": self.name,
            "mission_timestamp": self.mission_timestamp,
            "sample_count": self.sample_count,
            "mission_in_progress": self.mission_in_progress,
            "memory_cleared": self.memory_cleared,
            "resolution": "0.0625°C" if self.high_resolution else "0.5°C",
            "sample_rate": self.sample_rate,
        }


def decode_status(block: bytes) -> Status:
    status = Status(bytes(block))
    model = status.model
    if isinstance(model, UnknownModel):
        logger.warning("Unrecognised device id 0x%02X, decoding without calibration", model.raw)
    return status
