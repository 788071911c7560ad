from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .w1.channel import THERMOCHRON_FAMILY, W1_DEVICES_DIR
from .w1.frames import MissionSettings


@dataclass
class HostConfig:
    devices_dir: Path = W1_DEVICES_DIR
    family: str = THERMOCHRON_FAMILY
    calibrate: bool = True
    output_csv: Path | None = None
    mission: MissionSettings = field(default_factory=MissionSettings)


HOST_KEYS = frozenset(item.name for item in fields(HostConfig))
MISSION_KEYS = frozenset(item.name for item in fields(MissionSettings))


def _load_json(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object at the top level")
    return data


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = {**base}
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merged[key] = _merge(base[key], value)
        else:
            merged[key] = value
    return merged


def _check_keys(data: Dict[str, Any], known: frozenset, section: str) -> None:
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown {section} settings: {sorted(unknown)}")


def _mission_from_mapping(data: Dict[str, Any]) -> MissionSettings:
    if not isinstance(data, dict):
        raise ValueError("mission must be an object of mission settings")
    _check_keys(data, MISSION_KEYS, "mission")
    defaults = MissionSettings()
    values = {
        name: _coerce_value(data[name], like=getattr(defaults, name), key=f"mission.{name}")
        for name in MISSION_KEYS
        if name in data
    }
    return MissionSettings(**values)


def load_config(path: Path | str | None = None, overrides: Sequence[str] | None = None) -> HostConfig:
    """
    Load the host configuration from JSON and apply CLI-style overrides.

    Without *path* the built-in defaults are used. Overrides are dotted
    `key=value` pairs, e.g.:
        ["mission.rate=5", "mission.high_speed=true", "calibrate=false"]
    Values from either source are coerced to the type of the setting's
    default; unknown keys raise ``ValueError``.
    """
    data: Dict[str, Any] = _load_json(Path(path)) if path is not None else {}
    override_data: Dict[str, Any] = {}
    for override in overrides or []:
        key, raw_value = _parse_override(override)
        _assign_nested(override_data, key, raw_value)
    merged = _merge(data, override_data)
    _check_keys(merged, HOST_KEYS, "host")
    output_csv: Optional[Any] = merged.get("output_csv")
    return HostConfig(
        devices_dir=Path(merged.get("devices_dir", W1_DEVICES_DIR)),
        family=str(merged.get("family", THERMOCHRON_FAMILY)),
        calibrate=_coerce_value(merged.get("calibrate", True), like=True, key="calibrate"),
        output_csv=Path(output_csv) if output_csv else None,
        mission=_mission_from_mapping(merged.get("mission") or {}),
    )


def _parse_override(item: str) -> tuple[str, str]:
    if "=" not in item:
        raise ValueError(f"Override '{item}' must use key=value syntax")
    key, raw_value = item.split("=", 1)
    key = key.strip()
    if not key:
        raise ValueError("Override key may not be empty")
    return key, raw_value.strip()


def _coerce_value(value: Any, *, like: Any, key: str) -> Any:
    """Convert a JSON value or override string to the type of *like*."""

    if isinstance(like, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in {"true", "false"}:
            return value.lower() == "true"
        raise ValueError(f"{key} expects true or false, got {value!r}")
    if isinstance(like, int):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            try:
                # accepts 0x.. for alarm bytes
                return int(value, 0)
            except ValueError:
                pass
        raise ValueError(f"{key} expects an integer, got {value!r}")
    return value


def _assign_nested(target: Dict[str, Any], dotted_key: str, value: Any) -> None:
    cursor = target
    parts = dotted_key.split(".")
    for part in parts[:-1]:
        cursor = cursor.setdefault(part, {})
        if not isinstance(cursor, dict):
            raise ValueError(f"Override '{dotted_key}' descends into a scalar setting")
    cursor[parts[-1]] = value
