from __future__ import annotations

from pathlib import Path

import pytest

from thermochron.config import load_config
from thermochron.w1.frames import MissionSettings


def test_defaults_without_file() -> None:
    cfg = load_config()
    assert cfg.devices_dir == Path("/sys/bus/w1/devices")
    assert cfg.family == "41"
    assert cfg.calibrate is True
    assert cfg.output_csv is None
    assert cfg.mission == MissionSettings()


def test_load_config_overrides(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text(
        """
        {
          "devices_dir": "/tmp/w1",
          "output_csv": "out/mission.csv",
          "mission": {"rate": 10, "high_resolution": true}
        }
        """,
        encoding="utf-8",
    )
    cfg = load_config(
        cfg_path,
        overrides=["mission.rate=5", "mission.high_speed=true", "mission.low_alarm=0x40", "calibrate=false"],
    )
    assert cfg.devices_dir == Path("/tmp/w1")
    assert cfg.output_csv == Path("out/mission.csv")
    assert cfg.calibrate is False
    assert cfg.mission.rate == 5
    assert cfg.mission.high_speed is True
    assert cfg.mission.high_resolution is True
    assert cfg.mission.low_alarm == 0x40


def test_bundled_config_loads() -> None:
    cfg = load_config(Path(__file__).resolve().parents[1] / "host" / "config.json")
    assert cfg.mission.rate == 10
    assert cfg.mission.mission_control == 0xC5


def test_invalid_overrides() -> None:
    with pytest.raises(ValueError):
        load_config(overrides=["mission.rate"])
    with pytest.raises(ValueError):
        load_config(overrides=["mission.speed=3"])
    with pytest.raises(ValueError):
        load_config(overrides=["mission.rate=0"])


def test_rollover_is_not_a_mission_setting(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="rollover"):
        load_config(overrides=["mission.rollover=true"])
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text('{"mission": {"rollover": false}}', encoding="utf-8")
    with pytest.raises(ValueError, match="rollover"):
        load_config(cfg_path)


def test_values_take_the_type_of_the_setting(tmp_path: Path) -> None:
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text('{"family": "41", "mission": {"rate": "0x1E", "high_speed": "true"}}', encoding="utf-8")
    cfg = load_config(cfg_path, overrides=["family=41", "mission.start_delay=60"])
    assert cfg.family == "41"
    assert cfg.mission.rate == 30
    assert cfg.mission.high_speed is True
    assert cfg.mission.start_delay == 60


@pytest.mark.parametrize(
    "override",
    [
        "calibrate=yes",
        "mission.high_resolution=1",
        "mission.rate=fast",
        "mission.rate=true",
        "calibrate.strict=true",
        "device=ds1922",
        "mission=5",
    ],
)
def test_mistyped_values_are_rejected(override: str) -> None:
    with pytest.raises(ValueError):
        load_config(overrides=[override])


def test_override_cannot_descend_into_scalar() -> None:
    with pytest.raises(ValueError):
        load_config(overrides=["calibrate=false", "calibrate.strict=true"])
