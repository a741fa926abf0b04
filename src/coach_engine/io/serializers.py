"""
JSON serialization for engine models.

Handles conversion between dataclasses and JSON-compatible dicts. Field
names match the dataclass attributes; enums render as their values.
TrainingState round-trips so a storage collaborator can persist it
between weekly cycles.
"""

import json
import re
from datetime import datetime
from typing import Any

from ..core.models import (
    EatingEnough,
    EnergyCheck,
    EnergyContext,
    EnergyLevel,
    Exercise,
    IntensityTier,
    ProgramConfig,
    ProgramConstraints,
    ReadinessLevel,
    Session,
    SleepQuality,
    StressLevel,
    TrainingDecision,
    TrainingPhase,
    TrainingState,
    WeeklyCheckIn,
)
from ..core.output import SimulationOutput, WeeklyEngineOutput


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_date(date_str: str) -> str:
    """
    Validate and normalize date string to ISO format.

    Args:
        date_str: Date string to validate

    Returns:
        Normalized YYYY-MM-DD string

    Raises:
        ValidationError: If date format is invalid
    """
    if not re.match(r"^\d{4}-\d{2}-\d{2}$", date_str):
        raise ValidationError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD")

    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as e:
        raise ValidationError(f"Invalid date: {date_str}") from e

    return date_str


def _enum(enum_cls, value: Any, field_name: str):
    """Parse an enum value, raising ValidationError on unknown members."""
    try:
        return enum_cls(value)
    except ValueError as e:
        valid = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field_name}: {value!r}. Must be one of: {valid}") from e


def _optional_enum(enum_cls, value: Any, field_name: str):
    return None if value is None else _enum(enum_cls, value, field_name)


def _require(data: dict, key: str, what: str) -> Any:
    if key not in data:
        raise ValidationError(f"Missing field '{key}' in {what}")
    return data[key]


# =============================================================================
# PROGRAM
# =============================================================================


def program_to_dict(program: ProgramConfig) -> dict[str, Any]:
    """Convert ProgramConfig to dict."""
    return {
        "sessions_per_week": program.sessions_per_week,
        "intensity_tier": program.intensity_tier.value,
        "session_duration_minutes": program.session_duration_minutes,
        "volume_multiplier": program.volume_multiplier,
    }


def program_from_dict(data: dict[str, Any]) -> ProgramConfig:
    """
    Create ProgramConfig from dict.

    Raises:
        ValidationError: On missing fields or out-of-range values
    """
    try:
        return ProgramConfig(
            sessions_per_week=int(_require(data, "sessions_per_week", "program")),
            intensity_tier=_enum(
                IntensityTier, _require(data, "intensity_tier", "program"), "intensity_tier"
            ),
            session_duration_minutes=int(_require(data, "session_duration_minutes", "program")),
            volume_multiplier=float(_require(data, "volume_multiplier", "program")),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid program: {e}") from e


def constraints_to_dict(constraints: ProgramConstraints) -> dict[str, Any]:
    """Convert ProgramConstraints to dict."""
    return {
        "max_sessions_per_week": constraints.max_sessions_per_week,
        "max_intensity_tier": constraints.max_intensity_tier.value,
        "max_duration_minutes": constraints.max_duration_minutes,
        "max_volume_multiplier": constraints.max_volume_multiplier,
    }


def constraints_from_dict(data: dict[str, Any]) -> ProgramConstraints:
    """Create ProgramConstraints from dict."""
    return ProgramConstraints(
        max_sessions_per_week=int(_require(data, "max_sessions_per_week", "constraints")),
        max_intensity_tier=_enum(
            IntensityTier,
            _require(data, "max_intensity_tier", "constraints"),
            "max_intensity_tier",
        ),
        max_duration_minutes=int(_require(data, "max_duration_minutes", "constraints")),
        max_volume_multiplier=float(_require(data, "max_volume_multiplier", "constraints")),
    )


# =============================================================================
# SELF-REPORTS
# =============================================================================


def checkin_to_dict(checkin: WeeklyCheckIn) -> dict[str, Any]:
    """Convert WeeklyCheckIn to dict."""
    return {
        "sleep_quality": checkin.sleep_quality.value if checkin.sleep_quality else None,
        "stress_level": checkin.stress_level.value if checkin.stress_level else None,
        "readiness_level": checkin.readiness_level.value if checkin.readiness_level else None,
        "reflection_note": checkin.reflection_note,
    }


def checkin_from_dict(data: dict[str, Any]) -> WeeklyCheckIn:
    """Create WeeklyCheckIn from dict."""
    return WeeklyCheckIn(
        sleep_quality=_optional_enum(SleepQuality, data.get("sleep_quality"), "sleep_quality"),
        stress_level=_optional_enum(StressLevel, data.get("stress_level"), "stress_level"),
        readiness_level=_optional_enum(
            ReadinessLevel, data.get("readiness_level"), "readiness_level"
        ),
        reflection_note=data.get("reflection_note"),
    )


def energy_check_to_dict(check: EnergyCheck) -> dict[str, Any]:
    """Convert EnergyCheck to dict."""
    return {
        "energy_level": check.energy_level.value,
        "eating_enough": check.eating_enough.value,
    }


def energy_check_from_dict(data: dict[str, Any]) -> EnergyCheck:
    """Create EnergyCheck from dict."""
    return EnergyCheck(
        energy_level=_enum(EnergyLevel, _require(data, "energy_level", "energy check"), "energy_level"),
        eating_enough=_enum(EatingEnough, data.get("eating_enough", "yes"), "eating_enough"),
    )


# =============================================================================
# TRAINING STATE
# =============================================================================


def state_to_dict(state: TrainingState) -> dict[str, Any]:
    """Convert TrainingState to dict."""
    return {
        "user_id": state.user_id,
        "current_phase": state.current_phase.value,
        "week_number": state.week_number,
        "program": program_to_dict(state.program),
        "program_constraints": constraints_to_dict(state.program_constraints),
        "weekly_session_history": list(state.weekly_session_history),
        "sessions_last_7_days": state.sessions_last_7_days,
        "sessions_last_14_days": state.sessions_last_14_days,
        "sessions_last_30_days": state.sessions_last_30_days,
        "adherence_rate_2week": state.adherence_rate_2week,
        "low_adherence_weeks_in_row": state.low_adherence_weeks_in_row,
        "accumulated_fatigue_score": state.accumulated_fatigue_score,
        "energy_context": state.energy_context.value,
        "recent_checkins": [checkin_to_dict(c) for c in state.recent_checkins],
        "recent_energy_checks": [energy_check_to_dict(e) for e in state.recent_energy_checks],
        "current_pain_flags": list(state.current_pain_flags),
        "recent_pain_flags": list(state.recent_pain_flags),
        "has_active_injury": state.has_active_injury,
        "has_pain_history": state.has_pain_history,
        "consecutive_pain_free_weeks": state.consecutive_pain_free_weeks,
        "days_since_last_session": state.days_since_last_session,
        "weeks_since_last_scale_back": state.weeks_since_last_scale_back,
        "consecutive_stable_weeks": state.consecutive_stable_weeks,
        "total_sessions_completed_raw": state.total_sessions_completed_raw,
        "total_sessions_completed_planned": state.total_sessions_completed_planned,
        "last_decision": state.last_decision.value,
        "last_decision_reason": state.last_decision_reason,
    }


def state_from_dict(data: dict[str, Any]) -> TrainingState:
    """
    Create TrainingState from dict.

    Missing counters take their fresh-state defaults; user_id, phase and
    program are required.

    Raises:
        ValidationError: If the data is malformed
    """
    if not isinstance(data, dict):
        raise ValidationError("Training state must be a JSON object")

    _require(data, "user_id", "training state")
    try:
        return TrainingState(
            user_id=data["user_id"],
            current_phase=_enum(
                TrainingPhase, _require(data, "current_phase", "training state"), "current_phase"
            ),
            week_number=int(data.get("week_number", 1)),
            program=program_from_dict(_require(data, "program", "training state")),
            program_constraints=(
                constraints_from_dict(data["program_constraints"])
                if data.get("program_constraints")
                else ProgramConstraints()
            ),
            weekly_session_history=[int(n) for n in data.get("weekly_session_history", [])],
            sessions_last_7_days=int(data.get("sessions_last_7_days", 0)),
            sessions_last_14_days=int(data.get("sessions_last_14_days", 0)),
            sessions_last_30_days=int(data.get("sessions_last_30_days", 0)),
            adherence_rate_2week=float(data.get("adherence_rate_2week", 0.0)),
            low_adherence_weeks_in_row=int(data.get("low_adherence_weeks_in_row", 0)),
            accumulated_fatigue_score=float(data.get("accumulated_fatigue_score", 0.0)),
            energy_context=_enum(
                EnergyContext, data.get("energy_context", "normal"), "energy_context"
            ),
            recent_checkins=[checkin_from_dict(c) for c in data.get("recent_checkins", [])],
            recent_energy_checks=[
                energy_check_from_dict(e) for e in data.get("recent_energy_checks", [])
            ],
            current_pain_flags=[str(p) for p in data.get("current_pain_flags", [])],
            recent_pain_flags=[str(p) for p in data.get("recent_pain_flags", [])],
            has_active_injury=bool(data.get("has_active_injury", False)),
            has_pain_history=bool(data.get("has_pain_history", False)),
            consecutive_pain_free_weeks=int(data.get("consecutive_pain_free_weeks", 0)),
            days_since_last_session=int(data.get("days_since_last_session", 0)),
            weeks_since_last_scale_back=data.get("weeks_since_last_scale_back"),
            consecutive_stable_weeks=int(data.get("consecutive_stable_weeks", 0)),
            total_sessions_completed_raw=int(data.get("total_sessions_completed_raw", 0)),
            total_sessions_completed_planned=int(data.get("total_sessions_completed_planned", 0)),
            last_decision=_enum(
                TrainingDecision, data.get("last_decision", "maintain"), "last_decision"
            ),
            last_decision_reason=data.get("last_decision_reason", "Initial state"),
        )
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid training state: {e}") from e


# =============================================================================
# SESSIONS AND OUTPUTS
# =============================================================================


def exercise_to_dict(exercise: Exercise) -> dict[str, Any]:
    """Convert Exercise to dict, omitting unset optional fields."""
    data: dict[str, Any] = {
        "name": exercise.name,
        "category": exercise.category.value,
        "sets": exercise.sets,
        "reps": exercise.reps,
    }
    for key in ("id", "rest_seconds", "notes", "slot_id", "slot_tag", "movement_pattern"):
        value = getattr(exercise, key)
        if value is not None:
            data[key] = value
    if exercise.equipment:
        data["equipment"] = list(exercise.equipment)
    if exercise.selection_fallback:
        data["selection_fallback"] = True
    return data


def session_to_dict(session: Session) -> dict[str, Any]:
    """Convert Session to dict."""
    return {
        "id": session.id,
        "date": session.date,
        "week_number": session.week_number,
        "session_number": session.session_number,
        "session_type": session.session_type.value,
        "target_duration_minutes": session.target_duration_minutes,
        "intensity_tier": session.intensity_tier.value,
        "is_minimum_viable": session.is_minimum_viable,
        "exercises": [exercise_to_dict(e) for e in session.exercises],
    }


def weekly_output_to_dict(output: WeeklyEngineOutput) -> dict[str, Any]:
    """Convert WeeklyEngineOutput to dict."""
    return {
        "week_number": output.week_number,
        "week_start_iso": output.week_start_iso,
        "phase": output.phase.value,
        "phase_week": output.phase_week,
        "state": {
            "fatigue_score": output.state.fatigue_score,
            "energy_context": output.state.energy_context.value,
            "adherence_rate_2week": output.state.adherence_rate_2week,
            "days_since_last_session": output.state.days_since_last_session,
            "pain_flags": list(output.state.pain_flags),
            "has_active_injury": output.state.has_active_injury,
        },
        "program": program_to_dict(output.program),
        "sessions": [session_to_dict(s) for s in output.sessions],
        "minimum_viable_sessions": [session_to_dict(s) for s in output.minimum_viable_sessions],
        "completion": {
            "raw_sessions_completed": output.completion.raw_sessions_completed,
            "planned_sessions_completed": output.completion.planned_sessions_completed,
            "extra_sessions": output.completion.extra_sessions,
            "adherence_this_week": output.completion.adherence_this_week,
        },
        "decision": {
            "type": output.decision.type.value,
            "reason": output.decision.reason,
            "coaching_message": output.decision.coaching_message,
            "coach_tone": output.decision.coach_tone.value,
        },
        "program_change": {
            "occurred": output.program_change.occurred,
            "description": output.program_change.description,
            "cause": output.program_change.cause.value,
        },
        "safety_notes": list(output.safety_notes),
        "next_week_program": (
            program_to_dict(output.next_week_program)
            if output.next_week_program is not None
            else None
        ),
    }


def simulation_to_dict(simulation: SimulationOutput) -> dict[str, Any]:
    """Convert SimulationOutput to dict."""
    final = simulation.final_state
    meta = simulation.simulation_metadata
    return {
        "scenario_name": simulation.scenario_name,
        "scenario_description": simulation.scenario_description,
        "weeks": [weekly_output_to_dict(w) for w in simulation.weeks],
        "final_state": {
            "phase": final.phase.value,
            "phase_week": final.phase_week,
            "total_sessions_raw": final.total_sessions_raw,
            "total_sessions_planned": final.total_sessions_planned,
            "current_program": program_to_dict(final.current_program),
            "weeks_since_scale_back": final.weeks_since_scale_back,
            "consecutive_stable_weeks": final.consecutive_stable_weeks,
            "consecutive_pain_free_weeks": final.consecutive_pain_free_weeks,
        },
        "simulation_metadata": {
            "total_weeks": meta.total_weeks,
            "first_week": meta.first_week,
            "decisions_breakdown": {d.value: n for d, n in meta.decisions_breakdown.items()},
            "phase_transitions": [
                {"week": t.week, "from": t.from_phase.value, "to": t.to_phase.value}
                for t in meta.phase_transitions
            ],
        },
    }


def to_json(data: dict[str, Any] | list[Any], indent: int | None = 2) -> str:
    """Render a serialized dict as JSON text."""
    return json.dumps(data, indent=indent, ensure_ascii=False)
