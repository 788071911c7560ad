"""Tabular export of reconstructed mission logs."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from .w1.mission import Sample
from .w1.status import Status

COLUMNS = ["time", "temperature_c"]


def samples_to_frame(samples: Sequence[Sample]) -> pd.DataFrame:
    df = pd.DataFrame(
        {
            "time": pd.to_datetime([sample.time for sample in samples]),
            "temperature_c": np.array([sample.temperature for sample in samples], dtype=float),
        },
        columns=COLUMNS,
    )
    return df


def summarize(samples: Sequence[Sample]) -> Dict[str, object]:
    if not samples:
        return {"count": 0}
    temps = np.array([sample.temperature for sample in samples], dtype=float)
    return {
        "count": len(samples),
        "first": samples[0].time,
        "last": samples[-1].time,
        "min_c": float(temps.min()),
        "max_c": float(temps.max()),
        "mean_c": float(temps.mean()),
    }


def status_metadata(status: Status, calibrated: bool) -> Dict[str, str]:
    return {
        "model": status.name.replace(" ", "_"),
        "mission_start": status.mission_timestamp.isoformat() if status.mission_timestamp else "",
        "sample_rate_s": str(int(status.sample_rate.total_seconds())),
        "resolution": "high" if status.high_resolution else "low",
        "calibrated": "true" if calibrated else "false",
    }


def export_samples(
    samples: Sequence[Sample],
    path: Path,
    *,
    metadata: Optional[Mapping[str, str]] = None,
) -> Path:
    """Write *samples* to CSV, optionally preceded by one ``# key=value`` comment line."""

    path.parent.mkdir(parents=True, exist_ok=True)
    df = samples_to_frame(samples)
    with path.open("w", newline="", encoding="utf-8") as fh:
        if metadata:
            fh.write("# " + " ".join(f"{key}={value}" for key, value in metadata.items()) + "\n")
        df.to_csv(fh, index=False, date_format="%Y-%m-%dT%H:%M:%S")
    return path


def format_status(status: Status) -> str:
    lines = []
    for key, value in status.as_dict().items():
        label = key.replace("_", " ") + ":"
        lines.append(f"{label:<20}{value if value is not None else 'n/a'}")
    return "\n".join(lines)
