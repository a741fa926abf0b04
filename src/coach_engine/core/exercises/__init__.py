"""
Exercise reference library for coach-engine.

Strength and cardio pools per intensity tier, loaded from YAML and used
by the session generator for slot-based selection.
"""

from .base import ExerciseLibrary, LibraryExercise
from .registry import EXERCISE_LIBRARY, get_cardio_pool, get_strength_pool

__all__ = [
    "ExerciseLibrary",
    "LibraryExercise",
    "EXERCISE_LIBRARY",
    "get_cardio_pool",
    "get_strength_pool",
]
