"""
Phase transition machine.

    onboarding --> building <--> maintaining
         \            |              |
          `---------> recovering ---'   (any phase on scale_back)

Evaluated once per cycle after the decision is finalized. A transition
resets the week-in-phase counter and applies the new phase's duration
template, clamped by the program constraints.
"""

from dataclasses import dataclass

from loguru import logger

from .config import (
    BUILDING_EXIT_MIN_WEEKS,
    MAINTAINING_EXIT_MIN_WEEKS,
    ONBOARDING_EXIT_ADHERENCE,
    RECOVERING_EXIT_ADHERENCE,
    RECOVERING_EXIT_MIN_WEEKS,
    DEFAULT_SETTINGS,
    EngineSettings,
    phase_duration_template,
)
from .models import TrainingDecision, TrainingPhase, TrainingState
from .mutation import apply_phase_duration_template


@dataclass(frozen=True)
class PhaseTransition:
    from_phase: TrainingPhase
    to_phase: TrainingPhase
    previous_duration: int
    new_duration: int

    @property
    def duration_changed(self) -> bool:
        return self.previous_duration != self.new_duration


def evaluate_phase_transition(
    state: TrainingState,
    decision: TrainingDecision,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> TrainingPhase | None:
    """
    Decide whether the phase should change after this week.

    Args:
        state: Candidate state (post-mutation)
        decision: Finalized decision for the week
        settings: Thresholds shared with the evaluator

    Returns:
        The new phase, or None when the phase stays as it is
    """
    phase = state.current_phase
    week = state.week_number
    adherence = state.adherence_rate_2week
    fatigue = state.accumulated_fatigue_score

    target: TrainingPhase | None = None
    if decision == TrainingDecision.SCALE_BACK:
        target = TrainingPhase.RECOVERING
    elif phase == TrainingPhase.ONBOARDING:
        if week >= settings.onboarding_weeks and adherence >= ONBOARDING_EXIT_ADHERENCE:
            target = TrainingPhase.BUILDING
    elif phase == TrainingPhase.BUILDING:
        if (
            settings.adherence_low <= adherence < settings.adherence_stable
            and week >= BUILDING_EXIT_MIN_WEEKS
        ):
            target = TrainingPhase.MAINTAINING
    elif phase == TrainingPhase.RECOVERING:
        if (
            week >= RECOVERING_EXIT_MIN_WEEKS
            and adherence >= RECOVERING_EXIT_ADHERENCE
            and fatigue < settings.fatigue_maintain
        ):
            target = TrainingPhase.MAINTAINING
    elif phase == TrainingPhase.MAINTAINING:
        if (
            week >= MAINTAINING_EXIT_MIN_WEEKS
            and adherence >= settings.adherence_stable
            and fatigue < settings.fatigue_maintain
        ):
            target = TrainingPhase.BUILDING

    if target == phase:
        return None
    return target


def apply_phase_transition(
    state: TrainingState,
    decision: TrainingDecision,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> PhaseTransition | None:
    """
    Advance the phase machine by one week.

    On a transition the week counter restarts at 1 and the phase duration
    template is applied; otherwise the week counter increments.

    Returns:
        PhaseTransition when the phase changed, else None
    """
    new_phase = evaluate_phase_transition(state, decision, settings)
    if new_phase is None:
        state.week_number += 1
        return None

    previous_phase = state.current_phase
    previous_duration = state.program.session_duration_minutes
    state.current_phase = new_phase
    state.week_number = 1
    apply_phase_duration_template(state, phase_duration_template(new_phase.value))

    transition = PhaseTransition(
        from_phase=previous_phase,
        to_phase=new_phase,
        previous_duration=previous_duration,
        new_duration=state.program.session_duration_minutes,
    )
    logger.debug(
        "Phase transition {} -> {} (duration {} -> {})",
        previous_phase.value,
        new_phase.value,
        transition.previous_duration,
        transition.new_duration,
    )
    return transition
