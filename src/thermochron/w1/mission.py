from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import List

from .calibration import Coefficients, decode_samples
from .frames import LOG_SIZE, PAGE_SIZE
from .status import Status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sample:
    time: datetime
    temperature: float


def log_byte_count(status: Status) -> int:
    count = status.sample_count * status.sample_size
    if count > LOG_SIZE:
        # only a rollover mission counts past the end of log memory
        raise ValueError(
            f"Device reports {status.sample_count} samples ({count} bytes), "
            f"more than the {LOG_SIZE}-byte log memory holds"
        )
    return count


def log_page_count(status: Status) -> int:
    return math.ceil(log_byte_count(status) / PAGE_SIZE)


def reconstruct_log(status: Status, log_bytes: bytes, coefficients: Coefficients) -> List[Sample]:
    """
    Turn the raw mission log into timestamped, corrected samples.

    Sample ``i`` was taken at ``mission_timestamp + i * sample_rate``; the
    returned list is in index (and therefore time) order.
    """

    count = status.sample_count
    if count == 0:
        return []
    start = status.mission_timestamp
    if start is None:
        raise ValueError(f"Device reports {count} samples but no mission start time")
    needed = log_byte_count(status)
    if len(log_bytes) < needed:
        raise ValueError(f"Mission log holds {len(log_bytes)} bytes, {needed} required")

    nominal = decode_samples(log_bytes[:needed], status.sample_size, status.model.offset)
    corrected = coefficients.correct(nominal)
    rate = status.sample_rate
    logger.debug("Reconstructed %d samples starting %s every %s", count, start, rate)
    return [
        Sample(time=start + rate * index, temperature=float(value))
        for index, value in enumerate(corrected)
    ]
