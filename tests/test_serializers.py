"""
Serializer tests: date validation, TrainingState persistence and the
JSON shape of weekly and simulation outputs.
"""

import json
from datetime import date, timedelta

import pytest

from coach_engine.core.models import (
    EatingEnough,
    EnergyCheck,
    EnergyLevel,
    IntensityTier,
    ProgramConfig,
    ReadinessLevel,
    SleepQuality,
    StressLevel,
    TrainingState,
    WeekInput,
    WeeklyCheckIn,
)
from coach_engine.core.planner import run_weekly_cycle
from coach_engine.core.simulation import run_simulation
from coach_engine.io.scenarios import get_scenario
from coach_engine.io.serializers import (
    ValidationError,
    program_from_dict,
    program_to_dict,
    simulation_to_dict,
    state_from_dict,
    state_to_dict,
    to_json,
    validate_date,
    weekly_output_to_dict,
)

START = date(2026, 1, 5)


def _state_after_weeks() -> TrainingState:
    """State after a few cycles with every kind of self-report."""
    state = TrainingState.new("athlete-1")
    weeks = [
        WeekInput(
            1, START, 3,
            checkin=WeeklyCheckIn(SleepQuality.GOOD, StressLevel.LOW, ReadinessLevel.GOOD, "felt fine"),
            energy_check=EnergyCheck(EnergyLevel.NORMAL, EatingEnough.YES),
        ),
        WeekInput(
            2, START + timedelta(weeks=1), 2,
            checkin=WeeklyCheckIn(SleepQuality.FAIR, None, ReadinessLevel.OKAY),
            pain_flag="Sore shoulder",
        ),
        WeekInput(3, START + timedelta(weeks=2), 4),
    ]
    for week in weeks:
        state = run_weekly_cycle(state, week).state
    return state


class TestValidateDate:
    """ISO date validation."""

    def test_valid_date(self):
        assert validate_date("2026-01-05") == "2026-01-05"

    @pytest.mark.parametrize("value", ["2026/01/05", "05-01-2026", "2026-1-5", ""])
    def test_bad_format(self, value):
        with pytest.raises(ValidationError, match="Invalid date format"):
            validate_date(value)

    def test_impossible_date(self):
        with pytest.raises(ValidationError, match="Invalid date"):
            validate_date("2026-02-30")


class TestProgramSerialization:
    """ProgramConfig dicts."""

    def test_enum_rendered_as_value(self):
        data = program_to_dict(ProgramConfig(3, IntensityTier.MODERATE, 30, 1.1))
        assert data == {
            "sessions_per_week": 3,
            "intensity_tier": "moderate",
            "session_duration_minutes": 30,
            "volume_multiplier": 1.1,
        }

    def test_missing_field(self):
        with pytest.raises(ValidationError, match="sessions_per_week"):
            program_from_dict({"intensity_tier": "light"})

    def test_unknown_tier(self):
        data = program_to_dict(ProgramConfig())
        data["intensity_tier"] = "brutal"
        with pytest.raises(ValidationError, match="intensity_tier"):
            program_from_dict(data)

    def test_out_of_range_value(self):
        data = program_to_dict(ProgramConfig())
        data["sessions_per_week"] = 9
        with pytest.raises(ValidationError, match="Invalid program"):
            program_from_dict(data)


class TestStateSerialization:
    """TrainingState survives a dict round trip between cycles."""

    def test_round_trip_after_cycles(self):
        state = _state_after_weeks()
        assert state_from_dict(state_to_dict(state)) == state

    def test_round_trip_is_json_safe(self):
        state = _state_after_weeks()
        restored = state_from_dict(json.loads(to_json(state_to_dict(state))))
        assert restored == state

    def test_fresh_state_defaults(self):
        data = {
            "user_id": "athlete-2",
            "current_phase": "onboarding",
            "program": program_to_dict(ProgramConfig()),
        }
        state = state_from_dict(data)
        assert state.week_number == 1
        assert state.last_decision_reason == "Initial state"
        assert state.weeks_since_last_scale_back is None

    def test_missing_user(self):
        with pytest.raises(ValidationError, match="user_id"):
            state_from_dict({"current_phase": "onboarding"})

    def test_bad_phase(self):
        data = state_to_dict(TrainingState.new("athlete-1"))
        data["current_phase"] = "resting"
        with pytest.raises(ValidationError, match="current_phase"):
            state_from_dict(data)

    def test_not_a_mapping(self):
        with pytest.raises(ValidationError):
            state_from_dict(["athlete-1"])


class TestOutputSerialization:
    """Stable output field names and enum values."""

    def test_weekly_output_shape(self):
        week = WeekInput(1, START, 3)
        data = weekly_output_to_dict(run_weekly_cycle(TrainingState.new("athlete-1"), week).output)
        assert list(data) == [
            "week_number",
            "week_start_iso",
            "phase",
            "phase_week",
            "state",
            "program",
            "sessions",
            "minimum_viable_sessions",
            "completion",
            "decision",
            "program_change",
            "safety_notes",
            "next_week_program",
        ]
        assert data["week_start_iso"] == "2026-01-05"
        assert data["phase"] == "onboarding"
        assert data["decision"]["type"] == "maintain"
        assert data["program_change"]["cause"] == "none"
        assert len(data["sessions"]) == 3

    def test_optional_exercise_fields_omitted(self):
        week = WeekInput(1, START, 3)
        data = weekly_output_to_dict(run_weekly_cycle(TrainingState.new("athlete-1"), week).output)
        warmup = data["sessions"][0]["exercises"][0]
        assert "id" not in warmup
        assert "selection_fallback" not in warmup
        assert warmup["category"] == "mobility"

    def test_simulation_is_json_serializable(self):
        simulation = run_simulation(get_scenario("Pain/Injury Episode"))
        data = json.loads(to_json(simulation_to_dict(simulation)))
        meta = data["simulation_metadata"]
        assert meta["total_weeks"] == 8
        assert set(meta["decisions_breakdown"]) == {"progress", "maintain", "scale_back"}
        assert {"week", "from", "to"} == set(meta["phase_transitions"][0])
        assert data["final_state"]["current_program"]["sessions_per_week"] >= 2
