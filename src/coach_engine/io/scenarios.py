"""
Scenario library for the simulation runner.

Scenarios live in YAML: the bundled ``src/coach_engine/scenarios.yaml``
or any file with the same layout passed to load_scenarios(). Week keys
use short names (sessions, sleep, stress, readiness, energy, eating,
pain, injury) mapped onto SimulationWeek fields.
"""

from pathlib import Path
from typing import Any

import yaml

from ..core.models import EatingEnough, EnergyLevel, ReadinessLevel, SleepQuality, StressLevel
from ..core.simulation import SimulationScenario, SimulationWeek
from .serializers import ValidationError

_WEEK_KEYS: dict[str, tuple[str, type | None]] = {
    "sessions": ("sessions_completed", None),
    "sleep": ("sleep_quality", SleepQuality),
    "stress": ("stress_level", StressLevel),
    "readiness": ("readiness_level", ReadinessLevel),
    "energy": ("energy_level", EnergyLevel),
    "eating": ("eating_enough", EatingEnough),
    "pain": ("pain_flag", None),
    "injury": ("active_injury", None),
}


def get_bundled_scenarios_path() -> Path:
    return Path(__file__).parent.parent / "scenarios.yaml"


def week_from_dict(data: dict[str, Any], where: str) -> SimulationWeek:
    """
    Build a SimulationWeek from a YAML week entry.

    Args:
        data: Week mapping
        where: Location used in error messages, e.g. "Perfect Adherence week 3"

    Raises:
        ValidationError: On unknown keys, bad enum values or a missing
            session count
    """
    if not isinstance(data, dict):
        raise ValidationError(f"{where}: week entry must be a mapping")
    unknown = set(data) - set(_WEEK_KEYS)
    if unknown:
        raise ValidationError(f"{where}: unknown keys {sorted(unknown)}")
    if "sessions" not in data:
        raise ValidationError(f"{where}: missing 'sessions'")

    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        field_name, enum_cls = _WEEK_KEYS[key]
        if enum_cls is not None:
            try:
                value = enum_cls(str(value))
            except ValueError as e:
                valid = ", ".join(m.value for m in enum_cls)
                raise ValidationError(
                    f"{where}: invalid {key} {value!r}. Must be one of: {valid}"
                ) from e
        elif key == "sessions":
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValidationError(f"{where}: sessions must be a non-negative integer")
        elif key == "pain":
            value = str(value) if value else None
        elif key == "injury":
            value = bool(value)
        kwargs[field_name] = value
    return SimulationWeek(**kwargs)


def scenario_from_dict(data: dict[str, Any]) -> SimulationScenario:
    """Build a SimulationScenario from a YAML scenario entry."""
    if not isinstance(data, dict) or not data.get("name"):
        raise ValidationError("Scenario entry must be a mapping with a 'name'")
    name = str(data["name"])
    weeks = data.get("weeks") or []
    if not isinstance(weeks, list) or not weeks:
        raise ValidationError(f"Scenario '{name}' has no weeks")
    return SimulationScenario(
        name=name,
        description=str(data.get("description", "")),
        weeks=tuple(week_from_dict(w, f"{name} week {i + 1}") for i, w in enumerate(weeks)),
    )


def load_scenarios(path: str | Path | None = None) -> list[SimulationScenario]:
    """
    Load scenarios from a YAML file (default: the bundled library).

    Raises:
        ValidationError: If the file cannot be read or is malformed
    """
    source = Path(path) if path is not None else get_bundled_scenarios_path()
    try:
        with open(source, "r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        raise ValidationError(f"Cannot read scenarios from {source}: {e}") from e

    if not isinstance(raw, dict) or not isinstance(raw.get("scenarios"), list):
        raise ValidationError(f"{source}: expected a top-level 'scenarios' list")

    scenarios = [scenario_from_dict(entry) for entry in raw["scenarios"]]
    names = [s.name for s in scenarios]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValidationError(f"{source}: duplicate scenario names {duplicates}")
    return scenarios


def get_scenario(name: str, path: str | Path | None = None) -> SimulationScenario:
    """
    Look up a scenario by name (case-insensitive).

    Raises:
        KeyError: If no scenario has that name
    """
    for scenario in load_scenarios(path):
        if scenario.name.lower() == name.lower():
            return scenario
    raise KeyError(name)
