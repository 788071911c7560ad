"""
Three-point temperature correction for DS1922 loggers.

The device stores two (raw, reference) calibration pairs in its register
pages; together with a model-specific hardcoded reference temperature they
define a quadratic error curve ``err(t) = a*t^2 + b*t + c`` which is
subtracted from every nominal reading (DS1922L data sheet, p. 50).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar, Sequence, TypeVar

import numpy as np

from .errors import CalibrationUndefined
from .status import OFFSET_CALIBRATION, Status

logger = logging.getLogger(__name__)

Reading = TypeVar("Reading", float, np.ndarray)


def decode_temperature(raw: Sequence[int], offset: float) -> float:
    if len(raw) == 1:
        return raw[0] / 2 + offset
    if len(raw) == 2:
        return raw[0] / 2 + offset + raw[1] / 512
    raise ValueError(f"Temperature samples are 1 or 2 bytes, got {len(raw)}")


@dataclass(frozen=True)
class Coefficients:
    a: float
    b: float
    c: float

    IDENTITY: ClassVar["Coefficients"]

    def error(self, temperature: Reading) -> Reading:
        return self.a * temperature * temperature + self.b * temperature + self.c

    def correct(self, nominal: Reading) -> Reading:
        return nominal - self.error(nominal)


Coefficients.IDENTITY = Coefficients(0.0, 0.0, 0.0)


def solve_coefficients(tr1: float, tr2: float, tc2: float, tr3: float, tc3: float) -> Coefficients:
    err2 = tc2 - tr2
    err3 = tc3 - tr3
    err1 = err2

    square_span = tr2 * tr2 - tr1 * tr1
    denominator = square_span * (tr3 - tr1) + (tr3 * tr3 - tr1 * tr1) * (tr1 - tr2)
    if square_span == 0 or denominator == 0:
        raise CalibrationUndefined(
            f"Calibration points are degenerate (tr1={tr1}, tr2={tr2}, tr3={tr3})"
        )

    b = square_span * (err3 - err1) / denominator
    a = b * (tr1 - tr2) / square_span
    c = err1 - a * tr1 * tr1 - b * tr1
    return Coefficients(a=a, b=b, c=c)


def correction_factors(status: Status) -> Coefficients:
    model = status.model
    if not model.supported:
        raise CalibrationUndefined(f"{model.name} has no temperature calibration support")

    def window(index: int) -> float:
        start = OFFSET_CALIBRATION + index * 2
        return decode_temperature(status.raw[start : start + 2], model.offset)

    tr2, tc2, tr3, tc3 = (window(index) for index in range(4))
    coeff = solve_coefficients(model.tr1, tr2, tc2, tr3, tc3)
    logger.debug(
        "Calibration for %s: tr1=%.4f tr2=%.4f tc2=%.4f tr3=%.4f tc3=%.4f -> a=%g b=%g c=%g",
        model.name,
        model.tr1,
        tr2,
        tc2,
        tr3,
        tc3,
        coeff.a,
        coeff.b,
        coeff.c,
    )
    return coeff


def decode_samples(raw: bytes, sample_size: int, offset: float) -> np.ndarray:
    """Vectorised :func:`decode_temperature` over a packed run of samples."""

    data = np.frombuffer(raw, dtype=np.uint8).astype(float)
    if sample_size not in (1, 2):
        raise ValueError(f"Temperature samples are 1 or 2 bytes, got {sample_size}")
    if data.size % sample_size:
        raise ValueError("Sample data does not align with the sample size")
    rows = data.reshape(-1, sample_size)
    nominal = rows[:, 0] / 2 + offset
    if sample_size == 2:
        nominal = nominal + rows[:, 1] / 512
    return nominal
