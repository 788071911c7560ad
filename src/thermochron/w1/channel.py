from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import List, Optional, Protocol

from .errors import ChannelError, DeviceNotFound, MultipleDevices

logger = logging.getLogger(__name__)

W1_DEVICES_DIR = Path("/sys/bus/w1/devices")
THERMOCHRON_FAMILY = "41"


class Channel(Protocol):
    def write(self, data: bytes) -> None: ...

    def read(self, count: int) -> bytes: ...


def discover(devices_dir: Path | str = W1_DEVICES_DIR, family: str = THERMOCHRON_FAMILY) -> Path:
    """Return the slave directory of the single attached device of *family*."""

    root = Path(devices_dir)
    if not root.is_dir():
        raise DeviceNotFound(f"1-Wire devices directory {root} does not exist")
    matches: List[Path] = sorted(entry for entry in root.iterdir() if entry.name.startswith(family))
    if not matches:
        raise DeviceNotFound(f"No device of family {family} found in {root}")
    if len(matches) > 1:
        names = ", ".join(entry.name for entry in matches)
        raise MultipleDevices(f"Multiple devices found ({names}); only a single device is supported")
    logger.debug("Found device %s", matches[0].name)
    return matches[0]


class FileChannel:
    """Unbuffered duplex over a w1 slave's ``rw`` file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._handle: Optional[io.FileIO] = None

    def open(self) -> "FileChannel":
        if self._handle is None:
            self._handle = io.FileIO(self.path, "r+")
            logger.debug("Opened %s", self.path)
        return self

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def __enter__(self) -> "FileChannel":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _require_handle(self) -> io.FileIO:
        if self._handle is None:
            raise ChannelError(f"Channel {self.path} is not open")
        return self._handle

    def write(self, data: bytes) -> None:
        handle = self._require_handle()
        written = handle.write(data)
        if written is not None and written != len(data):
            raise ChannelError(f"Short write: expected {len(data)} bytes, wrote {written}")

    def read(self, count: int) -> bytes:
        handle = self._require_handle()
        buffer = bytearray()
        while len(buffer) < count:
            chunk = handle.read(count - len(buffer))
            if not chunk:
                break
            buffer.extend(chunk)
        if len(buffer) != count:
            raise ChannelError(f"Short read: expected {count} bytes, got {len(buffer)}")
        return bytes(buffer)


def open_channel(devices_dir: Path | str = W1_DEVICES_DIR, family: str = THERMOCHRON_FAMILY) -> FileChannel:
    slave = discover(devices_dir, family)
    return FileChannel(slave / "rw").open()
