"""
Program mutation under ratcheting constraints.

apply_decision_to_program() turns a decision into a new ProgramConfig and
updates the state's ProgramConstraints:

- maintain: no change.
- scale_back: fixed recovery program; constraints pinned to exactly it.
- progress: one step up a per-tier ladder (duration to tier base, then
  volume, then for challenging the duration ladder, then intensity).
  A program that changed relaxes the constraints by per-field maximum.

Constraints therefore only move down on scale-back and only move up on a
successful progression; phase duration templates are clamped by them.
"""

from dataclasses import dataclass, replace

from .config import (
    DURATION_BASE_LIGHT,
    DURATION_BASE_MODERATE,
    DURATION_CHALLENGING_LADDER,
    DURATION_MAX,
    DURATION_RECOVERING,
    FREQUENCY_MIN,
    VOLUME_CAP_LIGHT,
    VOLUME_CAP_MODERATE,
    VOLUME_LADDER,
    VOLUME_START,
    challenging_volume_cap,
)
from .models import (
    ChangeCause,
    IntensityTier,
    ProgramConfig,
    ProgramConstraints,
    TrainingDecision,
    TrainingState,
)

SCALE_BACK_PROGRAM = ProgramConfig(
    sessions_per_week=FREQUENCY_MIN,
    intensity_tier=IntensityTier.LIGHT,
    session_duration_minutes=DURATION_RECOVERING,
    volume_multiplier=VOLUME_START,
)

# Duration each tier starts from after an intensity step
TIER_BASE_DURATION: dict[IntensityTier, int] = {
    IntensityTier.LIGHT: DURATION_BASE_LIGHT,
    IntensityTier.MODERATE: DURATION_BASE_MODERATE,
    IntensityTier.CHALLENGING: DURATION_CHALLENGING_LADDER[0],
}


@dataclass(frozen=True)
class ProgramMutationResult:
    previous_program: ProgramConfig
    new_program: ProgramConfig
    change_description: str
    change_cause: ChangeCause
    is_intensity_reset: bool = False
    at_true_ceiling: bool = False

    @property
    def changed(self) -> bool:
        """True if any program field differs between previous and new."""
        return self.previous_program != self.new_program


def normalize_volume(value: float) -> float:
    """Snap a volume multiplier to the nearest ladder rung (after rounding to 0.1)."""
    rounded = round(value, 1)
    if rounded in VOLUME_LADDER:
        return rounded
    return min(VOLUME_LADDER, key=lambda rung: abs(rounded - rung))


def next_volume(current: float, cap: float) -> float | None:
    """
    Next ladder rung above current that does not exceed cap.

    Args:
        current: Current volume multiplier (normalized first)
        cap: Highest allowed multiplier

    Returns:
        The next rung, or None when no rung above current fits under cap
    """
    start = VOLUME_LADDER.index(normalize_volume(current))
    for rung in VOLUME_LADDER[start + 1:]:
        if rung <= cap:
            return rung
    return None


def next_challenging_duration(duration: int) -> int | None:
    """Next rung of the challenging duration ladder above duration, if any."""
    for rung in DURATION_CHALLENGING_LADDER:
        if rung > duration:
            return rung
    return None


def tier_volume_cap(tier: IntensityTier, duration: int) -> float:
    if tier == IntensityTier.LIGHT:
        return VOLUME_CAP_LIGHT
    if tier == IntensityTier.MODERATE:
        return VOLUME_CAP_MODERATE
    return challenging_volume_cap(duration)


def _unchanged(previous: ProgramConfig, description: str) -> ProgramMutationResult:
    return ProgramMutationResult(previous, previous, description, ChangeCause.NONE)


def _apply_scale_back(state: TrainingState, previous: ProgramConfig) -> ProgramMutationResult:
    new = SCALE_BACK_PROGRAM
    state.program = new
    state.program_constraints = ProgramConstraints.exactly(new)
    return ProgramMutationResult(
        previous,
        new,
        (
            f"Scaled back: {previous.sessions_per_week}->{new.sessions_per_week}/week, "
            f"{previous.intensity_tier.value}->{new.intensity_tier.value}, "
            f"{previous.session_duration_minutes}->{new.session_duration_minutes}min, "
            f"{previous.volume_multiplier:.1f}x->{new.volume_multiplier:.1f}x volume"
        ),
        ChangeCause.SCALE_BACK,
    )


def _progress(state: TrainingState, previous: ProgramConfig) -> ProgramMutationResult:
    """Find the single next progression step allowed by the constraints."""
    ceiling = state.program_constraints
    tier = previous.intensity_tier
    duration = previous.session_duration_minutes
    volume = normalize_volume(previous.volume_multiplier)

    # 1. Duration up to the tier's base
    base = TIER_BASE_DURATION[tier]
    if duration < base and duration < ceiling.max_duration_minutes:
        new_duration = min(base, ceiling.max_duration_minutes)
        return ProgramMutationResult(
            previous,
            replace(previous, session_duration_minutes=new_duration),
            f"Duration increased: {duration}min -> {new_duration}min",
            ChangeCause.PROGRESSION_DURATION,
        )

    # 2. Volume up one rung
    cap = min(tier_volume_cap(tier, duration), ceiling.max_volume_multiplier)
    stepped = next_volume(volume, cap)
    if stepped is not None:
        return ProgramMutationResult(
            previous,
            replace(previous, volume_multiplier=stepped),
            f"Volume increased: {volume:.1f}x -> {stepped:.1f}x",
            ChangeCause.PROGRESSION_VOLUME,
        )

    # 2b. Challenging: longer sessions, volume back to baseline
    if tier == IntensityTier.CHALLENGING:
        longer = next_challenging_duration(duration)
        if longer is not None and longer <= ceiling.max_duration_minutes:
            return ProgramMutationResult(
                previous,
                replace(previous, session_duration_minutes=longer, volume_multiplier=VOLUME_START),
                f"Duration increased: {duration}min -> {longer}min; "
                f"volume reset to {VOLUME_START:.1f}x",
                ChangeCause.PROGRESSION_DURATION,
            )

    # 3. Intensity up with a volume / duration reset
    harder = tier.next_tier()
    if harder is not None and harder.rank <= ceiling.max_intensity_tier.rank:
        new_duration = TIER_BASE_DURATION[harder]
        return ProgramMutationResult(
            previous,
            replace(
                previous,
                intensity_tier=harder,
                session_duration_minutes=new_duration,
                volume_multiplier=VOLUME_START,
            ),
            f"Intensity increased: {tier.value} -> {harder.value}; "
            f"duration set to {new_duration}min; volume reset to {VOLUME_START:.1f}x",
            ChangeCause.PROGRESSION_INTENSITY,
            is_intensity_reset=True,
        )

    # 4. Nothing left to change
    at_true_ceiling = (
        tier == IntensityTier.CHALLENGING
        and duration >= DURATION_MAX
        and volume <= VOLUME_START
    )
    if at_true_ceiling:
        return ProgramMutationResult(
            previous,
            previous,
            "At maximum training capacity (challenging intensity, max duration)",
            ChangeCause.AT_TRUE_CEILING,
            at_true_ceiling=True,
        )
    return ProgramMutationResult(
        previous,
        previous,
        "No progression available (blocked by constraints)",
        ChangeCause.BLOCKED_BY_CONSTRAINTS,
    )


def apply_decision_to_program(
    state: TrainingState, decision: TrainingDecision
) -> ProgramMutationResult:
    """
    Apply a decision to state.program and state.program_constraints.

    Args:
        state: Candidate state (mutated in place)
        decision: Evaluated decision

    Returns:
        ProgramMutationResult describing the change
    """
    previous = state.program

    if decision == TrainingDecision.MAINTAIN:
        return _unchanged(previous, "No program change")

    if decision == TrainingDecision.SCALE_BACK:
        return _apply_scale_back(state, previous)

    result = _progress(state, previous)
    if result.changed:
        state.program = result.new_program
        state.program_constraints = state.program_constraints.relaxed_to(result.new_program)
    return result


def apply_phase_duration_template(state: TrainingState, minutes: int) -> None:
    """Set the session duration to a phase template, clamped by the ceiling."""
    proposed = min(minutes, state.program_constraints.max_duration_minutes)
    state.program = replace(state.program, session_duration_minutes=proposed)
