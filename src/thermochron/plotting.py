"""Plotting helpers for mission logs."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Sequence

from .reporting import samples_to_frame, summarize
from .w1.mission import Sample


def plot_samples(samples: Sequence[Sample], out_path: Path, *, title: Optional[str] = None) -> Path:
    if not samples:
        raise ValueError("Nothing to plot: the mission log is empty")
    plt = _require_matplotlib()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df = samples_to_frame(samples)
    stats = summarize(samples)

    fig, ax = plt.subplots(figsize=(11, 5))
    ax.plot(df["time"], df["temperature_c"], color="tab:red", linewidth=1.0, label="temperature")
    ax.axhline(stats["mean_c"], color="black", linewidth=0.8, linestyle="--", label="mean")
    ax.set_title(title or "Mission log")
    ax.set_xlabel("Time")
    ax.set_ylabel("Temperature [°C]")
    ax.legend(loc="best")
    fig.autofmt_xdate()
    fig.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)
    return out_path


def _require_matplotlib() -> Any:
    try:
        import matplotlib
        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # type: ignore
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("matplotlib is required for plotting; install thermochron[plot]") from exc
    except Exception as exc:  # pragma: no cover - environment issues
        raise RuntimeError(f"matplotlib initialisation failed: {exc}") from exc
    return plt
