from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import numpy as np
import pandas as pd

from thermochron.reporting import export_samples, format_status, samples_to_frame, status_metadata, summarize
from thermochron.w1.mission import Sample
from thermochron.w1.status import decode_status
from w1_fakes import build_status_block

T0 = datetime(2013, 4, 1, 9, 15, 30)


def _samples() -> list[Sample]:
    return [Sample(T0 + timedelta(minutes=10 * i), 20.0 + i * 0.5) for i in range(4)]


def test_samples_to_frame() -> None:
    df = samples_to_frame(_samples())
    assert list(df.columns) == ["time", "temperature_c"]
    assert df["time"].iloc[1] == pd.Timestamp(T0 + timedelta(minutes=10))
    assert np.allclose(df["temperature_c"], [20.0, 20.5, 21.0, 21.5])


def test_summarize() -> None:
    stats = summarize(_samples())
    assert stats["count"] == 4
    assert stats["first"] == T0
    assert np.isclose(stats["mean_c"], 20.75)
    assert stats["min_c"] == 20.0
    assert stats["max_c"] == 21.5
    assert summarize([]) == {"count": 0}


def test_export_samples_with_metadata(tmp_path: Path) -> None:
    status = decode_status(build_status_block(sample_count=4))
    out = export_samples(_samples(), tmp_path / "logs" / "mission.csv", metadata=status_metadata(status, True))
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("# model=DS1922L")
    assert "sample_rate_s=600" in lines[0]
    assert "calibrated=true" in lines[0]
    assert lines[1] == "time,temperature_c"
    assert lines[2] == "2013-04-01T09:15:30,20.0"
    df = pd.read_csv(out, comment="#")
    assert len(df) == 4


def test_format_status() -> None:
    text = format_status(decode_status(build_status_block(running=True)))
    assert "model:" in text
    assert "DS1922L" in text
    assert "mission in progress:" in text
    assert "0.0625°C" in text
