"""
Protocol and decoding layer for Thermochron iButtons on a Linux w1 bus.

Everything here is synchronous and expects exclusive use of the device
channel; decoders are pure functions over immutable byte blocks.
"""

from .button import Button, open_button
from .calibration import Coefficients, correction_factors, decode_temperature, solve_coefficients
from .channel import Channel, FileChannel, discover, open_channel
from .crc16 import checksum
from .errors import (
    CalibrationUndefined,
    ChannelError,
    ChecksumFault,
    DeviceNotFound,
    MultipleDevices,
    W1Error,
)
from .frames import Command, MissionSettings
from .memory import read_memory
from .mission import Sample, log_page_count, reconstruct_log
from .status import DeviceId, KnownModel, Status, UnknownModel, decode_status

__all__ = [
    "Button",
    "open_button",
    "Coefficients",
    "correction_factors",
    "decode_temperature",
    "solve_coefficients",
    "Channel",
    "FileChannel",
    "discover",
    "open_channel",
    "checksum",
    "CalibrationUndefined",
    "ChannelError",
    "ChecksumFault",
    "DeviceNotFound",
    "MultipleDevices",
    "W1Error",
    "Command",
    "MissionSettings",
    "read_memory",
    "Sample",
    "log_page_count",
    "reconstruct_log",
    "DeviceId",
    "KnownModel",
    "Status",
    "UnknownModel",
    "decode_status",
]
