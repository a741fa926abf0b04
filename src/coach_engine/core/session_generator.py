"""
Session generator.

Builds the week's standard and minimum-viable sessions for a program.
Given the same program, options and seed inputs it always produces the
same sessions, in the same order, with the same exercises.

Each session is a fixed warm-up, then one strength exercise per template
slot, then a cardio finisher. Slots are movement-pattern tags resolved
from the strength template and session style. Every slot draws from the
tier's pool with its own SeededRandom, walking a fallback ladder when the
strict pool is empty:

  1. unused, tag-matching, equipment-compatible, not recently used
  2. as 1, but recently used exercises allowed          (fallback)
  3. tag requirement dropped                            (fallback)
  4. any unused exercise                                (fallback)

If all four are empty the slot is left out.
"""

import math
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

from loguru import logger

from .config import (
    MINIMUM_VIABLE_DURATION_FRACTION,
    MINIMUM_VIABLE_VOLUME,
    REDUCED_VOLUME_NOTE_BELOW,
    SESSION_SPACING_DAYS,
)
from .exercises.base import ExerciseLibrary, LibraryExercise
from .models import (
    Exercise,
    ExerciseCategory,
    IntensityTier,
    ProgramConfig,
    Session,
    SessionStyle,
    SessionType,
    StrengthTemplate,
)
from .rng import SeededRandom

SESSION_ROTATION: dict[int, tuple[SessionType, ...]] = {
    2: (SessionType.A, SessionType.B),
    3: (SessionType.A, SessionType.B, SessionType.C),
    4: (SessionType.A, SessionType.B, SessionType.C, SessionType.A),
}

WARMUP: tuple[Exercise, ...] = (
    Exercise(
        name="Cat-Cow Stretch",
        category=ExerciseCategory.MOBILITY,
        sets=1,
        reps="10 reps",
        notes="Gentle spinal mobility",
    ),
    Exercise(
        name="Arm Circles",
        category=ExerciseCategory.MOBILITY,
        sets=1,
        reps="10 forward, 10 back",
    ),
    Exercise(
        name="Leg Swings",
        category=ExerciseCategory.MOBILITY,
        sets=1,
        reps="10 each leg",
    ),
)

REDUCED_VOLUME_NOTE = "Reduced volume for recovery"
CARDIO_SETS_FULL = 2
CARDIO_SETS_MINIMUM_VIABLE = 1


@dataclass(frozen=True)
class GenerationOptions:
    """Caller choices that shape exercise selection."""

    strength_template: StrengthTemplate = StrengthTemplate.FULL_BODY
    session_style: SessionStyle = SessionStyle.BALANCED
    recent_exercise_ids: frozenset[str] = field(default_factory=frozenset)
    equipment_filter: tuple[str, ...] = ()
    log_selection_fallbacks: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "strength_template", StrengthTemplate(self.strength_template))
        object.__setattr__(self, "session_style", SessionStyle(self.session_style))
        object.__setattr__(self, "recent_exercise_ids", frozenset(self.recent_exercise_ids))
        object.__setattr__(self, "equipment_filter", tuple(self.equipment_filter))


DEFAULT_OPTIONS = GenerationOptions()


# =============================================================================
# SLOT RESOLUTION
# =============================================================================


def get_template_slots(
    template: StrengthTemplate,
    style: SessionStyle,
    intensity: IntensityTier,
    is_minimum_viable: bool,
) -> list[str]:
    """
    Ordered movement-pattern tags for the strength part of a session.

    Session style wins over template for cardio_focus and
    recovery_mobility. An "arms" (or extra "lower") accessory slot is added
    for full sessions above light intensity, or always under
    strength_focus.

    Args:
        template: Strength template
        style: Session style
        intensity: Program intensity tier
        is_minimum_viable: Whether this is the reduced session

    Returns:
        List of slot tags
    """
    mv = is_minimum_viable
    add_accessory = (not mv and intensity != IntensityTier.LIGHT) or (
        style == SessionStyle.STRENGTH_FOCUS
    )

    if style == SessionStyle.CARDIO_FOCUS:
        return ["core"] if mv else ["lower", "core"]

    if style == SessionStyle.RECOVERY_MOBILITY:
        return ["core"] if mv else ["core", "lower"]

    if template == StrengthTemplate.UPPER:
        slots = ["push", "pull", "core"] if mv else ["push", "pull", "push", "pull"]
        if add_accessory:
            slots.append("arms")
        return slots

    if template == StrengthTemplate.LOWER:
        slots = ["lower", "hinge", "core"] if mv else ["lower", "hinge", "unilateral", "core"]
        if add_accessory:
            slots.append("lower")
        return slots

    if template == StrengthTemplate.STRENGTH_CONDITIONING:
        return ["lower", "core"] if mv else ["lower", "push", "core"]

    slots = ["lower", "push", "core"] if mv else ["lower", "push", "pull", "core"]
    if add_accessory:
        slots.append("arms")
    return slots


def matches_tag(exercise: LibraryExercise, tag: str) -> bool:
    """'lower' accepts squat and unilateral patterns; other tags match exactly."""
    if tag == "lower":
        return exercise.movement_pattern in ("squat", "unilateral")
    return exercise.movement_pattern == tag


def equipment_ok(exercise: LibraryExercise, equipment_filter: Sequence[str]) -> bool:
    """An empty filter accepts everything; otherwise the exercise needs one listed item."""
    if not equipment_filter:
        return True
    return any(item in equipment_filter for item in exercise.equipment)


# =============================================================================
# SELECTION
# =============================================================================


def select_strength_exercise(
    pool: Sequence[LibraryExercise],
    tag: str,
    used: Collection[str],
    recent_ids: Collection[str],
    equipment_filter: Sequence[str],
    seed: str,
) -> tuple[LibraryExercise | None, bool]:
    """
    Pick one exercise for a strength slot.

    Args:
        pool: Tier strength pool
        tag: Slot movement-pattern tag
        used: Exercise ids already placed in this session
        recent_ids: Exercise ids used recently by the athlete
        equipment_filter: Available equipment (empty = anything)
        seed: Slot seed string

    Returns:
        (exercise or None, selection_fallback)
    """
    rng = SeededRandom(seed)
    unused = [ex for ex in pool if ex.exercise_id not in used]

    strict = [
        ex
        for ex in unused
        if matches_tag(ex, tag)
        and equipment_ok(ex, equipment_filter)
        and ex.exercise_id not in recent_ids
    ]
    if strict:
        return rng.choice(strict), False

    allow_recent = [
        ex for ex in unused if matches_tag(ex, tag) and equipment_ok(ex, equipment_filter)
    ]
    if allow_recent:
        return rng.choice(allow_recent), True

    relaxed_tag = [
        ex
        for ex in unused
        if equipment_ok(ex, equipment_filter) and ex.exercise_id not in recent_ids
    ]
    if relaxed_tag:
        return rng.choice(relaxed_tag), True

    if unused:
        return rng.choice(unused), True

    return None, True


def select_cardio_exercise(
    pool: Sequence[LibraryExercise],
    used: Collection[str],
    recent_ids: Collection[str],
    equipment_filter: Sequence[str],
    seed: str,
) -> tuple[LibraryExercise | None, bool]:
    """Pick a cardio finisher: same ladder as strength minus the tag tier."""
    rng = SeededRandom(seed)
    unused = [ex for ex in pool if ex.exercise_id not in used]

    strict = [
        ex
        for ex in unused
        if equipment_ok(ex, equipment_filter) and ex.exercise_id not in recent_ids
    ]
    if strict:
        return rng.choice(strict), False

    allow_recent = [ex for ex in unused if equipment_ok(ex, equipment_filter)]
    if allow_recent:
        return rng.choice(allow_recent), True

    if unused:
        return rng.choice(unused), True

    return None, True


def scale_sets(base_sets: int, volume_multiplier: float) -> int:
    """Round base_sets * multiplier half up, never below one set."""
    return max(1, math.floor(base_sets * volume_multiplier + 0.5))


# =============================================================================
# SESSION ASSEMBLY
# =============================================================================


def _library_or_default(library: ExerciseLibrary | None) -> ExerciseLibrary:
    if library is not None:
        return library
    from .exercises.registry import EXERCISE_LIBRARY

    return EXERCISE_LIBRARY


def generate_exercises_for_session(
    session_type: SessionType,
    program: ProgramConfig,
    is_minimum_viable: bool,
    seed_base: str,
    options: GenerationOptions = DEFAULT_OPTIONS,
    library: ExerciseLibrary | None = None,
) -> list[Exercise]:
    """
    Warm-up, strength slots and cardio for one session.

    Args:
        session_type: A, B or C
        program: Program in force this week
        is_minimum_viable: Build the reduced session
        seed_base: Seed prefix unique to (user, week, session, variant)
        options: Template, style, recency and equipment choices
        library: Exercise library (default: bundled registry)

    Returns:
        Ordered exercise list
    """
    library = _library_or_default(library)
    intensity = program.intensity_tier
    volume = MINIMUM_VIABLE_VOLUME if is_minimum_viable else program.volume_multiplier
    variant = "mv" if is_minimum_viable else "full"
    slot_prefix = f"{session_type.value}-{variant}"
    recent = options.recent_exercise_ids
    equipment = options.equipment_filter

    exercises: list[Exercise] = list(WARMUP)
    used: set[str] = set()
    fallback_count = 0

    strength_pool = library.get_strength_pool(intensity)
    tags = get_template_slots(
        options.strength_template, options.session_style, intensity, is_minimum_viable
    )
    for index, tag in enumerate(tags):
        seed = f"{seed_base}:{slot_prefix}:{index + 1}:{tag}"
        picked, fallback = select_strength_exercise(
            strength_pool, tag, used, recent, equipment, seed
        )
        if fallback:
            fallback_count += 1
        if picked is None:
            continue
        used.add(picked.exercise_id)
        exercises.append(
            Exercise(
                id=picked.exercise_id,
                name=picked.name,
                category=ExerciseCategory.STRENGTH,
                sets=scale_sets(picked.sets, volume),
                reps=picked.reps,
                rest_seconds=picked.rest_seconds,
                notes=REDUCED_VOLUME_NOTE if volume < REDUCED_VOLUME_NOTE_BELOW else None,
                slot_id=f"{slot_prefix}-slot-{index + 1}",
                slot_tag=tag,
                movement_pattern=picked.movement_pattern,
                equipment=picked.equipment,
                selection_fallback=fallback,
            )
        )

    cardio_pool = library.get_cardio_pool(intensity)
    cardio_count = (
        2 if options.session_style == SessionStyle.CARDIO_FOCUS and not is_minimum_viable else 1
    )
    for i in range(cardio_count):
        picked, fallback = select_cardio_exercise(
            cardio_pool, used, recent, equipment, f"{seed_base}-cardio-{i}"
        )
        if fallback:
            fallback_count += 1
        if picked is None:
            continue
        used.add(picked.exercise_id)
        exercises.append(
            Exercise(
                id=picked.exercise_id,
                name=picked.name,
                category=ExerciseCategory.CARDIO,
                sets=CARDIO_SETS_MINIMUM_VIABLE if is_minimum_viable else CARDIO_SETS_FULL,
                reps=picked.reps,
                rest_seconds=picked.rest_seconds,
                slot_id=f"{session_type.value}-cardio-{i + 1}",
                slot_tag="cardio",
                movement_pattern=picked.movement_pattern,
                equipment=picked.equipment,
                selection_fallback=fallback,
            )
        )

    if fallback_count and options.log_selection_fallbacks:
        logger.warning(
            "Selection fallback used",
            seed_base=seed_base,
            session=slot_prefix,
            fallback_count=fallback_count,
        )

    return exercises


def minimum_viable_duration(duration_minutes: int) -> int:
    return math.floor(duration_minutes * MINIMUM_VIABLE_DURATION_FRACTION)


def generate_sessions(
    program: ProgramConfig,
    user_id: str,
    week_number: int,
    week_start: date,
    is_minimum_viable: bool = False,
    options: GenerationOptions | None = None,
    library: ExerciseLibrary | None = None,
) -> list[Session]:
    """
    Generate one week of sessions for a program.

    Sessions rotate A/B/C by count, are spaced two days apart from
    week_start, and are seeded from (user, week, session number, type,
    variant) so regenerating the same week yields identical content.

    Args:
        program: Program in force this week
        user_id: Athlete identifier (part of the seed)
        week_number: Absolute training week (part of the seed)
        week_start: Date of the first session
        is_minimum_viable: Build the reduced variants
        options: Generation options (default: full body, balanced)
        library: Exercise library (default: bundled registry)

    Returns:
        List of sessions, one per scheduled session
    """
    options = options or DEFAULT_OPTIONS
    rotation = SESSION_ROTATION.get(program.sessions_per_week, ())
    variant = "mv" if is_minimum_viable else "full"
    duration = (
        minimum_viable_duration(program.session_duration_minutes)
        if is_minimum_viable
        else program.session_duration_minutes
    )

    sessions: list[Session] = []
    for i, session_type in enumerate(rotation):
        session_number = i + 1
        session_date = (week_start + timedelta(days=i * SESSION_SPACING_DAYS)).isoformat()
        seed_base = f"{user_id}:{week_number}:{session_number}{session_type.value}:{variant}"
        sessions.append(
            Session(
                id=f"{session_date}-{session_type.value}",
                date=session_date,
                week_number=week_number,
                session_number=session_number,
                session_type=session_type,
                target_duration_minutes=duration,
                intensity_tier=program.intensity_tier,
                is_minimum_viable=is_minimum_viable,
                exercises=tuple(
                    generate_exercises_for_session(
                        session_type,
                        program,
                        is_minimum_viable,
                        seed_base,
                        options,
                        library,
                    )
                ),
            )
        )
    return sessions
