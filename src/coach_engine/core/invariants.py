"""
Invariant checks over assembled engine output.

These are post-conditions that never fail in a correct engine. A failure
raises immediately; nothing in the engine catches these errors and the
candidate state of the failing cycle must not be committed.

Use after building any WeeklyEngineOutput, after any simulation, and in
tests. Do not use for validating raw user input.
"""

from dataclasses import asdict
from enum import Enum
from typing import Any

from loguru import logger

from .config import (
    DURATION_MAX,
    DURATION_MIN,
    FATIGUE_SCORE_MAX,
    FREQUENCY_MAX,
    FREQUENCY_MIN,
    SUSPICIOUS_ADHERENCE,
    SUSPICIOUS_FATIGUE,
    VOLUME_MULTIPLIER_MAX,
    VOLUME_MULTIPLIER_MIN,
)
from .models import (
    EnergyContext,
    IntensityTier,
    TrainingDecision,
    TrainingPhase,
)
from .output import SimulationOutput, WeeklyEngineOutput


class EngineError(Exception):
    """Base class for fatal engine errors."""

    pass


class InvariantViolation(EngineError):
    """A post-condition of the weekly cycle does not hold."""

    def __init__(self, message: str, week: int | None = None, context: Any = None) -> None:
        super().__init__(message)
        self.week = week
        self.context = context


class ConfigurationMismatch(EngineError):
    """Generated content disagrees with the program (e.g. session count)."""

    def __init__(
        self,
        message: str,
        week: int | None = None,
        generated: int | None = None,
        target: int | None = None,
    ) -> None:
        super().__init__(message)
        self.week = week
        self.generated = generated
        self.target = target


def _in_enum(value: Any, enum_cls: type[Enum]) -> bool:
    try:
        enum_cls(value)
    except ValueError:
        return False
    return True


def validate_weekly_output(output: WeeklyEngineOutput) -> None:
    """
    Check one week's output.

    Raises:
        InvariantViolation: On the first failed check, carrying the week
            number and a dict snapshot of the output
    """
    week = output.week_number
    target = output.program.sessions_per_week
    completion = output.completion

    def fail(message: str) -> None:
        raise InvariantViolation(f"Week {week}: {message}", week=week, context=asdict(output))

    if completion.planned_sessions_completed > target:
        fail(f"Planned sessions ({completion.planned_sessions_completed}) > Target ({target})")

    if len(output.sessions) != target:
        fail(f"Generated {len(output.sessions)} sessions but target is {target}")

    if len(output.minimum_viable_sessions) != target:
        fail(
            f"Generated {len(output.minimum_viable_sessions)} minimum-viable sessions "
            f"but target is {target}"
        )

    expected_extra = max(0, completion.raw_sessions_completed - target)
    if completion.extra_sessions != expected_extra:
        fail(
            f"Extra sessions mismatch. Expected {expected_extra}, "
            f"got {completion.extra_sessions}"
        )

    expected_planned = min(completion.raw_sessions_completed, target)
    if completion.planned_sessions_completed != expected_planned:
        fail(
            f"Planned sessions should be {expected_planned}, "
            f"got {completion.planned_sessions_completed}"
        )

    if not 0.0 <= completion.adherence_this_week <= 1.0:
        fail(f"Adherence must be 0-1, got {completion.adherence_this_week}")

    if not 0.0 <= output.state.adherence_rate_2week <= 1.0:
        fail(f"Two-week adherence must be 0-1, got {output.state.adherence_rate_2week}")

    if not 0.0 <= output.state.fatigue_score <= FATIGUE_SCORE_MAX:
        fail(f"Fatigue must be 0-{FATIGUE_SCORE_MAX:g}, got {output.state.fatigue_score}")

    if not _in_enum(output.state.energy_context, EnergyContext):
        fail(f'Invalid energy context "{output.state.energy_context}"')

    if not _in_enum(output.program.intensity_tier, IntensityTier):
        fail(f'Invalid intensity "{output.program.intensity_tier}"')

    if not _in_enum(output.phase, TrainingPhase):
        fail(f'Invalid phase "{output.phase}"')

    if not _in_enum(output.decision.type, TrainingDecision):
        fail(f'Invalid decision "{output.decision.type}"')

    if not FREQUENCY_MIN <= target <= FREQUENCY_MAX:
        fail(f"Sessions per week must be {FREQUENCY_MIN}-{FREQUENCY_MAX}, got {target}")

    volume = output.program.volume_multiplier
    if not VOLUME_MULTIPLIER_MIN <= volume <= VOLUME_MULTIPLIER_MAX:
        fail(f"Volume multiplier out of range: {volume}")

    duration = output.program.session_duration_minutes
    if not DURATION_MIN <= duration <= DURATION_MAX:
        fail(f"Duration out of range: {duration}")


def validate_simulation(simulation: SimulationOutput) -> None:
    """
    Check a whole simulation: every week, plus totals and bookkeeping.

    Raises:
        InvariantViolation: On the first failed check
    """
    for week in simulation.weeks:
        validate_weekly_output(week)

    meta = simulation.simulation_metadata
    final = simulation.final_state

    if meta.total_weeks != len(simulation.weeks):
        raise InvariantViolation(
            f"Total weeks mismatch: metadata says {meta.total_weeks}, "
            f"array has {len(simulation.weeks)}"
        )

    for i, week in enumerate(simulation.weeks):
        expected = meta.first_week + i
        if week.week_number != expected:
            raise InvariantViolation(
                f"Week number mismatch at index {i}: expected {expected}, got {week.week_number}",
                week=week.week_number,
            )

    computed_raw = meta.initial_sessions_raw + sum(
        w.completion.raw_sessions_completed for w in simulation.weeks
    )
    if final.total_sessions_raw != computed_raw:
        raise InvariantViolation(
            f"Raw total mismatch: final state says {final.total_sessions_raw}, sum is {computed_raw}"
        )

    computed_planned = meta.initial_sessions_planned + sum(
        w.completion.planned_sessions_completed for w in simulation.weeks
    )
    if final.total_sessions_planned != computed_planned:
        raise InvariantViolation(
            f"Planned total mismatch: final state says {final.total_sessions_planned}, "
            f"sum is {computed_planned}"
        )

    run_raw = final.total_sessions_raw - meta.initial_sessions_raw
    run_planned = final.total_sessions_planned - meta.initial_sessions_planned
    if run_raw > run_planned:
        if not any(w.completion.extra_sessions > 0 for w in simulation.weeks):
            raise InvariantViolation(
                f"Raw ({run_raw}) > Planned ({run_planned}) in this run, "
                "but no weeks have extra sessions"
            )

    decision_sum = sum(meta.decisions_breakdown.values())
    if decision_sum != meta.total_weeks:
        raise InvariantViolation(
            f"Decision breakdown sum ({decision_sum}) doesn't match "
            f"total weeks ({meta.total_weeks})"
        )


def warn_if_suspicious(output: WeeklyEngineOutput) -> list[str]:
    """
    Log non-fatal warnings for outputs that are valid but look wrong.

    Returns:
        The warning messages (also sent to the logger)
    """
    week = output.week_number
    decision = output.decision.type
    warnings: list[str] = []

    if output.state.fatigue_score >= SUSPICIOUS_FATIGUE and decision != TrainingDecision.SCALE_BACK:
        warnings.append(
            f"Week {week}: High fatigue ({output.state.fatigue_score:.1f}) but no scale-back"
        )

    if (
        output.state.energy_context == EnergyContext.DEPLETED
        and decision != TrainingDecision.SCALE_BACK
    ):
        warnings.append(f"Week {week}: Depleted energy but no scale-back")

    adherence = output.completion.adherence_this_week
    if adherence < SUSPICIOUS_ADHERENCE and decision != TrainingDecision.SCALE_BACK:
        warnings.append(f"Week {week}: Very low adherence ({adherence:.0%}) but no scale-back")

    if output.state.has_active_injury and decision == TrainingDecision.PROGRESS:
        warnings.append(f"Week {week}: Progressing despite active injury")

    for message in warnings:
        logger.warning(message)
    return warnings
