from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional

from . import frames
from .calibration import Coefficients, correction_factors
from .channel import THERMOCHRON_FAMILY, W1_DEVICES_DIR, Channel, open_channel
from .frames import LOG_ADDRESS, SCRATCHPAD_FRAME_SIZE, STATUS_ADDRESS, MissionSettings
from .memory import read_exact, read_memory, transaction
from .mission import Sample, log_page_count, reconstruct_log
from .status import STATUS_PAGES, Status, decode_status

logger = logging.getLogger(__name__)


class Button:
    """A Thermochron iButton reached over an exclusively owned channel."""

    def __init__(self, channel: Channel):
        self.channel = channel

    def read_memory(self, address: int, pages: int) -> bytes:
        return read_memory(self.channel, address, pages)

    def status(self) -> Status:
        return decode_status(self.read_memory(STATUS_ADDRESS, STATUS_PAGES))

    def read_log(self, calibrate: bool = True) -> List[Sample]:
        status = self.status()
        coefficients = correction_factors(status) if calibrate else Coefficients.IDENTITY
        pages = log_page_count(status)
        if pages == 0:
            logger.info("Mission log is empty")
            return []
        log_bytes = self.read_memory(LOG_ADDRESS, pages)
        return reconstruct_log(status, log_bytes, coefficients)

    def _send(self, frame: bytes, label: str) -> None:
        logger.debug("Sending %s (%d bytes)", label, len(frame))
        self.channel.write(frame)

    def clear_memory(self) -> None:
        self._send(frames.clear_memory_frame(), "clear memory")

    def stop_mission(self) -> None:
        self._send(frames.stop_mission_frame(), "stop mission")

    def start_mission(self) -> None:
        self._send(frames.start_mission_frame(), "start mission")

    def copy_scratchpad(self, target: int = STATUS_ADDRESS) -> None:
        self._send(frames.copy_scratchpad_frame(target), "copy scratchpad")

    def write_scratchpad(self, settings: MissionSettings, now: Optional[datetime] = None) -> None:
        moment = now or datetime.now()
        self._send(frames.write_scratchpad_frame(settings, moment), "write scratchpad")

    def read_scratchpad(self) -> bytes:
        with transaction(self.channel, frames.read_scratchpad_frame()):
            return read_exact(self.channel, SCRATCHPAD_FRAME_SIZE)

    def program_mission(self, settings: MissionSettings, now: Optional[datetime] = None) -> None:
        status = self.status()
        if status.mission_in_progress:
            raise RuntimeError("A mission is already running; stop it first")
        if not status.memory_cleared:
            logger.warning("Memory is not cleared; the device may refuse to start the mission")
        self.write_scratchpad(settings, now)
        self.copy_scratchpad()
        self.start_mission()
        logger.info("Started mission (rate=%d %s)", settings.rate, "s" if settings.high_speed else "min")


@contextmanager
def open_button(
    devices_dir: Path | str = W1_DEVICES_DIR,
    family: str = THERMOCHRON_FAMILY,
) -> Iterator[Button]:
    channel = open_channel(devices_dir, family)
    try:
        yield Button(channel)
    finally:
        channel.close()
