"""
YAML -> EngineSettings loader.

Loads evaluator thresholds from engine.yaml (bundled with the package),
then merges the user override at ~/.coach-engine/engine.yaml and an
optional explicit file. Later sources win.

Usage:
    from coach_engine.core.engine.config_loader import load_engine_settings
    settings = load_engine_settings()
    settings.fatigue_scale_back   # 7.0 unless overridden

A user or explicit file that cannot be parsed is skipped with a warning.
Keys that do not name an EngineSettings field raise ValueError.
"""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..config import EngineSettings

SETTINGS_SECTION = "evaluator"

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; warn and return {} on a read or parse error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"coach-engine: ignoring settings file {path} ({exc})", stacklevel=3)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        warnings.warn(
            f"coach-engine: ignoring settings file {path} (top level is not a mapping)",
            stacklevel=3,
        )
        return {}
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _coerce_setting(name: str, value: Any, default: Any) -> Any:
    """Check a YAML value against the type of its default; ints stay ints."""
    if value is None and default is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Engine setting '{name}' must be a number, got {value!r}")
    if isinstance(default, float):
        return float(value)
    if not float(value).is_integer():
        raise ValueError(f"Engine setting '{name}' must be a whole number, got {value!r}")
    return int(value)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled engine.yaml, or None if not found."""
    ref = importlib.resources.files("coach_engine").joinpath("engine.yaml")
    if ref.is_file():
        return Path(str(ref))
    candidate = Path(__file__).parent.parent.parent / "engine.yaml"
    return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.coach-engine/engine.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".coach-engine" / "engine.yaml"
    return p if p.exists() else None


def load_engine_config(path: str | Path | None = None) -> dict[str, Any]:
    """
    Load and merge raw settings from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/coach_engine/engine.yaml
    2. User override at ~/.coach-engine/engine.yaml
    3. ``path``, when given

    Returns:
        Merged dict of config sections. Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        config = _deep_merge(config, _load_yaml_file(user))

    if path is not None:
        explicit = Path(path)
        if not explicit.exists():
            raise FileNotFoundError(f"Settings file not found: {explicit}")
        config = _deep_merge(config, _load_yaml_file(explicit))

    return config


def settings_from_dict(raw: dict[str, Any]) -> EngineSettings:
    """
    Build EngineSettings from the ``evaluator`` section of a config dict.

    Raises:
        ValueError: On unknown keys, non-numeric values or values that fail
            EngineSettings validation
    """
    section = raw.get(SETTINGS_SECTION) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{SETTINGS_SECTION}' must be a mapping")

    defaults = {f.name: f.default for f in dataclasses.fields(EngineSettings)}
    unknown = set(section) - set(defaults)
    if unknown:
        raise ValueError(f"Unknown engine settings: {sorted(unknown)}")
    values = {name: _coerce_setting(name, value, defaults[name]) for name, value in section.items()}
    return EngineSettings(**values)


def load_engine_settings(path: str | Path | None = None) -> EngineSettings:
    """Merged YAML settings as an EngineSettings instance."""
    return settings_from_dict(load_engine_config(path))
