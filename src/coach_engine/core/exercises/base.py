"""
Base types for the exercise reference library.

LibraryExercise is one entry in a tier's strength or cardio pool.
ExerciseLibrary groups the pools of every intensity tier and is what the
session generator selects from.
"""

from dataclasses import dataclass, field

from ..models import ExerciseCategory, IntensityTier

# Movement patterns a strength slot can ask for
MOVEMENT_PATTERNS: frozenset[str] = frozenset(
    {"squat", "hinge", "push", "pull", "arms", "core", "unilateral"}
)


@dataclass(frozen=True)
class LibraryExercise:
    """One exercise in the reference library."""

    exercise_id: str          # e.g. "bodyweight_squat"
    name: str                 # e.g. "Bodyweight Squat"
    category: ExerciseCategory
    movement_pattern: str     # e.g. "squat"; "conditioning" for cardio
    reps: str                 # "8-10", "30-45 seconds", ...
    rest_seconds: int
    sets: int = 1             # base sets before volume scaling
    equipment: tuple[str, ...] = ("bodyweight",)

    def __post_init__(self) -> None:
        """Validate library entry."""
        if not self.exercise_id:
            raise ValueError("exercise_id must be non-empty")
        if self.sets < 1:
            raise ValueError(f"{self.exercise_id}: sets must be >= 1")
        if self.rest_seconds < 0:
            raise ValueError(f"{self.exercise_id}: rest_seconds must be non-negative")
        if (
            self.category == ExerciseCategory.STRENGTH
            and self.movement_pattern not in MOVEMENT_PATTERNS
        ):
            raise ValueError(
                f"{self.exercise_id}: unknown movement_pattern '{self.movement_pattern}'"
            )


@dataclass(frozen=True)
class ExerciseLibrary:
    """Strength and cardio pools keyed by intensity tier."""

    strength: dict[IntensityTier, tuple[LibraryExercise, ...]] = field(default_factory=dict)
    cardio: dict[IntensityTier, tuple[LibraryExercise, ...]] = field(default_factory=dict)

    def get_strength_pool(self, tier: IntensityTier) -> tuple[LibraryExercise, ...]:
        return self.strength.get(tier, ())

    def get_cardio_pool(self, tier: IntensityTier) -> tuple[LibraryExercise, ...]:
        return self.cardio.get(tier, ())

    def is_empty(self) -> bool:
        return not any(self.strength.values()) and not any(self.cardio.values())
