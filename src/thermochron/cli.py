"""Command line interface for the thermochron package."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

import typer

from .config import HostConfig, load_config
from .plotting import plot_samples
from .reporting import export_samples, format_status, status_metadata, summarize
from .w1.button import Button, open_button
from .w1.errors import CalibrationUndefined, W1Error

logger = logging.getLogger(__name__)

T = TypeVar("T")

app = typer.Typer(
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Read and control Thermochron iButtons on the Linux 1-Wire bus.",
)


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON host config."),
    override: Optional[List[str]] = typer.Option(
        None,
        "--set",
        help="Override config keys, e.g. --set mission.rate=5 --set calibrate=false",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        ctx.obj = load_config(config_path, override or None)
    except (OSError, ValueError) as exc:
        raise typer.BadParameter(f"Invalid configuration: {exc}") from exc


def _with_button(ctx: typer.Context, action: Callable[[Button, HostConfig], T]) -> T:
    cfg: HostConfig = ctx.obj
    try:
        with open_button(cfg.devices_dir, cfg.family) as button:
            return action(button, cfg)
    except CalibrationUndefined as exc:
        typer.echo(f"error: {exc}", err=True)
        typer.echo("hint: use --raw or --set calibrate=false for uncorrected readings", err=True)
        raise typer.Exit(code=1) from exc
    except (W1Error, OSError, ValueError, RuntimeError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def status(ctx: typer.Context) -> None:
    """Print the device clock, model and mission state."""

    result = _with_button(ctx, lambda button, _cfg: button.status())
    typer.echo(format_status(result))


@app.command()
def read(
    ctx: typer.Context,
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write samples to this CSV file."),
    plot: Optional[Path] = typer.Option(None, "--plot", help="Save a PNG chart of the log."),
    raw: bool = typer.Option(False, "--raw", help="Skip the three-point calibration."),
) -> None:
    """Read and print the current mission log."""

    def action(button: Button, cfg: HostConfig):
        calibrate = cfg.calibrate and not raw
        return button.status(), button.read_log(calibrate=calibrate), calibrate

    device_status, samples, calibrated = _with_button(ctx, action)
    cfg: HostConfig = ctx.obj
    target = out or cfg.output_csv
    if target is not None:
        export_samples(samples, target, metadata=status_metadata(device_status, calibrated))
        typer.echo(f"Wrote {len(samples)} samples to {target}")
    else:
        for sample in samples:
            typer.echo(f"{sample.time.isoformat(sep=' ')}\t{sample.temperature:7.3f}°C")
    stats = summarize(samples)
    if stats["count"]:
        logger.info(
            "%d samples, min=%.3f max=%.3f mean=%.3f",
            stats["count"],
            stats["min_c"],
            stats["max_c"],
            stats["mean_c"],
        )
    if plot is not None:
        try:
            plot_samples(samples, plot, title=f"{device_status.name} mission log")
        except (RuntimeError, ValueError) as exc:
            typer.echo(f"[warning] plotting skipped: {exc}")
        else:
            typer.echo(f"Plot written to {plot}")


@app.command()
def clear(ctx: typer.Context) -> None:
    """Clear the mission memory."""

    _with_button(ctx, lambda button, _cfg: button.clear_memory())
    typer.echo("Cleared memory.")


@app.command()
def stop(ctx: typer.Context) -> None:
    """Stop the running mission."""

    _with_button(ctx, lambda button, _cfg: button.stop_mission())
    typer.echo("Stopped mission.")


@app.command()
def start(ctx: typer.Context) -> None:
    """Program the configured mission settings and start logging."""

    _with_button(ctx, lambda button, cfg: button.program_mission(cfg.mission))
    cfg: HostConfig = ctx.obj
    unit = "s" if cfg.mission.high_speed else "min"
    typer.echo(f"Started mission (every {cfg.mission.rate} {unit}).")


@app.command()
def scratchpad(ctx: typer.Context) -> None:
    """Dump the scratchpad echo as hex."""

    data = _with_button(ctx, lambda button, _cfg: button.read_scratchpad())
    typer.echo(data.hex(" ").upper())


def run() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    run()
