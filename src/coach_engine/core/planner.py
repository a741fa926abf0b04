"""
Weekly cycle orchestration.

run_weekly_cycle() advances a TrainingState by one week:

  record inputs -> evaluate -> mutate program -> finalize decision
  -> generate sessions -> transition phase -> assemble output -> validate

All work happens on a deep copy of the caller's state. The candidate state
is returned alongside the output and is only meant to be stored by the
caller if the call returned normally; any EngineError leaves the caller's
state untouched.

A given state must be advanced by one cycle at a time.
"""

import copy
from dataclasses import dataclass

from loguru import logger

from .config import DEFAULT_SETTINGS, EngineSettings
from .evaluator import EvaluationResult, evaluate_training_decision, finalize_decision
from .exercises.base import ExerciseLibrary
from .invariants import ConfigurationMismatch, validate_weekly_output, warn_if_suspicious
from .models import (
    ChangeCause,
    EnergyContext,
    TrainingDecision,
    TrainingState,
    WeekInput,
)
from .mutation import ProgramMutationResult, apply_decision_to_program
from .output import (
    CompletionSummary,
    DecisionSummary,
    ProgramChange,
    StateSnapshot,
    WeeklyEngineOutput,
)
from .phase import PhaseTransition, apply_phase_transition
from .session_generator import GenerationOptions, generate_sessions
from .tracking import record_week


@dataclass(frozen=True)
class WeeklyCycleResult:
    """Everything one cycle produced. `state` is the candidate to commit."""

    state: TrainingState
    output: WeeklyEngineOutput
    evaluation: EvaluationResult
    mutation: ProgramMutationResult
    phase_transition: PhaseTransition | None


def collect_safety_notes(
    state: TrainingState, settings: EngineSettings = DEFAULT_SETTINGS
) -> list[str]:
    """
    User-facing safety notes for the week.

    Args:
        state: State after this week's inputs were recorded
        settings: Supplies the fatigue level worth flagging

    Returns:
        Notes for injury, recent pain, elevated fatigue and low energy
    """
    notes: list[str] = []
    if state.has_active_injury:
        notes.append("Active injury reported - training at reduced intensity")
    if state.pain_reports:
        notes.append(f"Recent pain: {'; '.join(state.pain_reports)}")
    if state.accumulated_fatigue_score >= settings.fatigue_maintain:
        notes.append(f"Fatigue {state.accumulated_fatigue_score:.1f}/10 - recovery priority")
    if state.energy_context in (EnergyContext.DEPLETED, EnergyContext.LOW):
        notes.append(f"Energy is {state.energy_context.value} - fuel & rest needed")
    return notes


def update_scale_back_counters(state: TrainingState, decision: TrainingDecision) -> None:
    """Counters that depend on the finalized decision."""
    if decision == TrainingDecision.SCALE_BACK:
        state.weeks_since_last_scale_back = 0
        state.consecutive_stable_weeks = 0
        state.consecutive_pain_free_weeks = 0
    elif state.weeks_since_last_scale_back is not None:
        state.weeks_since_last_scale_back += 1


def determine_change_cause(
    mutation: ProgramMutationResult,
    transition: PhaseTransition | None,
) -> ChangeCause:
    """Why next week's program is what it is."""
    if mutation.changed:
        return mutation.change_cause
    if transition is not None and transition.duration_changed:
        return ChangeCause.PHASE_TRANSITION
    if mutation.change_cause in (ChangeCause.AT_TRUE_CEILING, ChangeCause.BLOCKED_BY_CONSTRAINTS):
        return mutation.change_cause
    return ChangeCause.NONE


def run_weekly_cycle(
    state: TrainingState,
    week: WeekInput,
    options: GenerationOptions | None = None,
    settings: EngineSettings | None = None,
    library: ExerciseLibrary | None = None,
) -> WeeklyCycleResult:
    """
    Advance a training state by one week.

    Args:
        state: Committed state (not modified)
        week: This week's inputs
        options: Session generation options
        settings: Evaluator thresholds (default: built-in settings)
        library: Exercise library (default: bundled registry)

    Returns:
        WeeklyCycleResult with the candidate state and the validated output

    Raises:
        ConfigurationMismatch: Generated session count differs from the target
        InvariantViolation: The assembled output breaks a post-condition
    """
    settings = settings or DEFAULT_SETTINGS
    candidate = copy.deepcopy(state)

    record_week(candidate, week, settings)

    snapshot = StateSnapshot(
        fatigue_score=candidate.accumulated_fatigue_score,
        energy_context=candidate.energy_context,
        adherence_rate_2week=candidate.adherence_rate_2week,
        days_since_last_session=candidate.days_since_last_session,
        pain_flags=tuple(candidate.pain_reports),
        has_active_injury=candidate.has_active_injury,
    )
    safety_notes = collect_safety_notes(candidate, settings)

    evaluation = evaluate_training_decision(candidate, settings)
    mutation = apply_decision_to_program(candidate, evaluation.decision)
    final = finalize_decision(evaluation, mutation)
    logger.debug(
        "Week {} decision {} ({}): {}",
        week.week_number,
        final.decision.value,
        final.rule.value,
        final.reason,
    )
    if mutation.changed:
        logger.debug("Week {} program change: {}", week.week_number, mutation.change_description)

    update_scale_back_counters(candidate, final.decision)
    candidate.last_decision = final.decision
    candidate.last_decision_reason = final.reason

    program = candidate.program
    phase = candidate.current_phase
    phase_week = candidate.week_number

    sessions = generate_sessions(
        program, candidate.user_id, week.week_number, week.week_start, False, options, library
    )
    mv_sessions = generate_sessions(
        program, candidate.user_id, week.week_number, week.week_start, True, options, library
    )
    for label, generated in (("sessions", sessions), ("minimum-viable sessions", mv_sessions)):
        if len(generated) != program.sessions_per_week:
            raise ConfigurationMismatch(
                f"Week {week.week_number}: generated {len(generated)} {label} "
                f"but program requires {program.sessions_per_week}",
                week=week.week_number,
                generated=len(generated),
                target=program.sessions_per_week,
            )

    target = program.sessions_per_week
    planned = min(week.sessions_completed, target)
    extra = max(0, week.sessions_completed - target)
    candidate.total_sessions_completed_planned += planned

    transition = apply_phase_transition(candidate, final.decision, settings)
    cause = determine_change_cause(mutation, transition)

    if mutation.changed:
        change = ProgramChange(True, mutation.change_description, cause)
    elif cause == ChangeCause.PHASE_TRANSITION:
        change = ProgramChange(
            True,
            f"Phase transition to {transition.to_phase.value}: duration "
            f"{transition.previous_duration}min -> {transition.new_duration}min",
            cause,
        )
    else:
        change = ProgramChange(False, None, cause)

    output = WeeklyEngineOutput(
        week_number=week.week_number,
        week_start_iso=week.week_start.isoformat(),
        phase=phase,
        phase_week=phase_week,
        state=snapshot,
        program=program,
        sessions=tuple(sessions),
        minimum_viable_sessions=tuple(mv_sessions),
        completion=CompletionSummary(
            raw_sessions_completed=week.sessions_completed,
            planned_sessions_completed=planned,
            extra_sessions=extra,
            adherence_this_week=min(1.0, planned / target),
        ),
        decision=DecisionSummary(
            type=final.decision,
            reason=final.reason,
            coaching_message=final.user_message,
            coach_tone=final.coach_tone,
        ),
        program_change=change,
        safety_notes=tuple(safety_notes),
        next_week_program=candidate.program,
    )

    validate_weekly_output(output)
    warn_if_suspicious(output)

    return WeeklyCycleResult(
        state=candidate,
        output=output,
        evaluation=final,
        mutation=mutation,
        phase_transition=transition,
    )
