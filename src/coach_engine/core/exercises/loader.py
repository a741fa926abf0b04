"""
YAML -> ExerciseLibrary loader.

Loads one file per intensity tier from the bundled
``src/coach_engine/exercises/`` directory (light.yaml, moderate.yaml,
challenging.yaml). Each file has a ``strength`` and a ``cardio`` list of
entries matching the LibraryExercise schema.

User overrides: place a file with the same name in
``~/.coach-engine/exercises/``. Entries are merged by exercise_id: a
matching id overrides only the listed keys, a new id is appended to the
pool.

Usage (internal, called by registry.py):
    from .loader import load_library_from_yaml
    library = load_library_from_yaml()   # ExerciseLibrary or None
"""

from __future__ import annotations

import os
import warnings
from pathlib import Path

import yaml

from ..models import ExerciseCategory, IntensityTier
from .base import ExerciseLibrary, LibraryExercise

_REQUIRED_FIELDS: frozenset[str] = frozenset(
    {"exercise_id", "name", "movement_pattern", "reps", "rest_seconds"}
)

_SECTIONS: dict[str, ExerciseCategory] = {
    "strength": ExerciseCategory.STRENGTH,
    "cardio": ExerciseCategory.CARDIO,
}


def exercise_from_dict(d: dict, category: ExerciseCategory) -> LibraryExercise:
    """Convert a raw dict (from YAML) to a LibraryExercise.

    Raises ValueError if any required field is absent.
    """
    missing = _REQUIRED_FIELDS - set(d)
    if missing:
        raise ValueError(f"LibraryExercise missing fields: {sorted(missing)}")

    equipment = d.get("equipment") or ["bodyweight"]
    if isinstance(equipment, str):
        equipment = [equipment]

    return LibraryExercise(
        exercise_id=str(d["exercise_id"]),
        name=str(d["name"]),
        category=category,
        movement_pattern=str(d["movement_pattern"]),
        reps=str(d["reps"]),
        rest_seconds=int(d["rest_seconds"]),
        sets=int(d.get("sets", 1)),
        equipment=tuple(str(e) for e in equipment),
    )


def _load_yaml_file(path: Path) -> dict:
    """Load a YAML mapping; warn and return {} if the file is unreadable."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"coach-engine: cannot read {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _merge_by_id(base: list[dict], override: list[dict]) -> list[dict]:
    """Merge override entries into base by exercise_id (non-destructive to base)."""
    result = [dict(entry) for entry in base]
    index = {entry.get("exercise_id"): i for i, entry in enumerate(result)}
    for entry in override:
        if not isinstance(entry, dict):
            continue
        key = entry.get("exercise_id")
        if key in index:
            result[index[key]] = {**result[index[key]], **entry}
        else:
            index[key] = len(result)
            result.append(dict(entry))
    return result


def _get_bundled_exercises_dir() -> Path | None:
    """Return path to the bundled exercises/ data directory, or None if not found."""
    # loader.py lives at src/coach_engine/core/exercises/loader.py
    candidate = Path(__file__).parent.parent.parent / "exercises"
    return candidate if candidate.is_dir() else None


def _get_user_exercises_dir() -> Path | None:
    """Return ~/.coach-engine/exercises/ if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".coach-engine" / "exercises"
    return p if p.is_dir() else None


def _build_pool(
    raw_entries: list[dict], category: ExerciseCategory, source: str
) -> tuple[LibraryExercise, ...]:
    pool: list[LibraryExercise] = []
    for entry in raw_entries:
        try:
            pool.append(exercise_from_dict(entry, category))
        except (ValueError, TypeError) as exc:
            warnings.warn(
                f"coach-engine: skipping exercise "
                f"'{entry.get('exercise_id', '?')}' in {source} ({exc})",
                stacklevel=3,
            )
    return tuple(pool)


def load_library_from_yaml(
    bundled_dir: Path | None = None,
    user_dir: Path | None = None,
) -> ExerciseLibrary | None:
    """Return the ExerciseLibrary built from the per-tier YAML files.

    Args:
        bundled_dir: Directory of bundled tier files (default: package data)
        user_dir: Directory of user override files (default: ~/.coach-engine/exercises)

    Returns:
        ExerciseLibrary, or None when no tier file yielded any exercise
    """
    bundled_dir = bundled_dir or _get_bundled_exercises_dir()
    user_dir = user_dir or _get_user_exercises_dir()
    if bundled_dir is None and user_dir is None:
        return None

    strength: dict[IntensityTier, tuple[LibraryExercise, ...]] = {}
    cardio: dict[IntensityTier, tuple[LibraryExercise, ...]] = {}

    for tier in IntensityTier:
        raw: dict = {}
        if bundled_dir is not None and (bundled_dir / f"{tier.value}.yaml").exists():
            raw = _load_yaml_file(bundled_dir / f"{tier.value}.yaml")

        if user_dir is not None:
            user_path = user_dir / f"{tier.value}.yaml"
            if user_path.exists():
                user_raw = _load_yaml_file(user_path)
                for section in _SECTIONS:
                    overrides = user_raw.get(section)
                    if isinstance(overrides, list):
                        raw[section] = _merge_by_id(raw.get(section) or [], overrides)

        source = f"{tier.value}.yaml"
        strength[tier] = _build_pool(raw.get("strength") or [], ExerciseCategory.STRENGTH, source)
        cardio[tier] = _build_pool(raw.get("cardio") or [], ExerciseCategory.CARDIO, source)

    library = ExerciseLibrary(strength=strength, cardio=cardio)
    return None if library.is_empty() else library
