"""
Exercise library registry.

The library is loaded from the per-tier YAML files in the bundled
``src/coach_engine/exercises/`` directory at import time. If nothing can
be loaded a RuntimeError is raised: sessions cannot be generated without
a library.

User overrides: place matching files in ``~/.coach-engine/exercises/``.
"""

from ..models import IntensityTier
from .base import ExerciseLibrary, LibraryExercise


def _build_library() -> ExerciseLibrary:
    from .loader import load_library_from_yaml

    loaded = load_library_from_yaml()
    if loaded is None:
        raise RuntimeError(
            "coach-engine: no exercises could be loaded from YAML. "
            "Check that src/coach_engine/exercises/*.yaml files are present and valid."
        )
    return loaded


EXERCISE_LIBRARY: ExerciseLibrary = _build_library()


def get_strength_pool(tier: IntensityTier) -> tuple[LibraryExercise, ...]:
    """
    Strength exercises for an intensity tier.

    Args:
        tier: Intensity tier

    Returns:
        Tuple of LibraryExercise (empty if the tier has none)
    """
    return EXERCISE_LIBRARY.get_strength_pool(IntensityTier(tier))


def get_cardio_pool(tier: IntensityTier) -> tuple[LibraryExercise, ...]:
    """Cardio exercises for an intensity tier."""
    return EXERCISE_LIBRARY.get_cardio_pool(IntensityTier(tier))
