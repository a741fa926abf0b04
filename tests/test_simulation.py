"""
Simulation tests over the bundled scenario library.
"""

from datetime import timedelta
from pathlib import Path

import pytest

from coach_engine.core.models import (
    DecisionRule,
    IntensityTier,
    TrainingDecision,
    TrainingPhase,
    TrainingState,
)
from coach_engine.core.planner import run_weekly_cycle
from coach_engine.core.session_generator import GenerationOptions
from coach_engine.core.simulation import (
    DEFAULT_START_DATE,
    DEFAULT_USER_ID,
    SimulationScenario,
    SimulationWeek,
    run_simulation,
)
from coach_engine.io.scenarios import get_scenario, load_scenarios
from coach_engine.io.serializers import ValidationError

EXPECTED_SCENARIOS = [
    "Perfect Adherence",
    "Moderate Adherence",
    "High Fatigue Episode",
    "Three-Week Gap",
    "Underfueling Pattern",
    "Persistent Low Adherence",
    "Recovery to Building",
    "Inconsistent Maintainer",
    "Pain/Injury Episode",
]


def _decisions(simulation) -> list[TrainingDecision]:
    return [w.decision.type for w in simulation.weeks]


# ===========================================================================
# Scenario library
# ===========================================================================

class TestScenarioLibrary:
    """Loading the bundled and custom scenario files."""

    def test_bundled_scenarios(self):
        assert [s.name for s in load_scenarios()] == EXPECTED_SCENARIOS

    def test_lookup_is_case_insensitive(self):
        assert get_scenario("three-week gap").name == "Three-Week Gap"

    def test_unknown_scenario(self):
        with pytest.raises(KeyError):
            get_scenario("Nope")

    def test_week_fields_are_parsed(self):
        scenario = get_scenario("Pain/Injury Episode")
        assert scenario.weeks[2].pain_flag == "Knee discomfort during squats"
        assert scenario.weeks[4].active_injury is True
        underfed = get_scenario("Underfueling Pattern").weeks[1]
        assert underfed.energy_level.value == "low"
        assert underfed.eating_enough.value == "not_sure"

    def test_custom_file(self, tmp_path: Path):
        path = tmp_path / "mine.yaml"
        path.write_text(
            "scenarios:\n"
            "  - name: Tiny\n"
            "    weeks:\n"
            "      - {sessions: 3, sleep: good}\n"
            "      - {sessions: 2, energy: high}\n"
        )
        [scenario] = load_scenarios(path)
        assert scenario.name == "Tiny"
        assert len(scenario.weeks) == 2

    def test_bad_enum_value_rejected(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("scenarios:\n  - name: Bad\n    weeks:\n      - {sessions: 3, sleep: amazing}\n")
        with pytest.raises(ValidationError, match="invalid sleep"):
            load_scenarios(path)

    def test_unknown_week_key_rejected(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("scenarios:\n  - name: Bad\n    weeks:\n      - {sessions: 3, mood: ok}\n")
        with pytest.raises(ValidationError, match="unknown keys"):
            load_scenarios(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ValidationError):
            load_scenarios(tmp_path / "missing.yaml")


# ===========================================================================
# Running scenarios
# ===========================================================================

class TestRunAllScenarios:
    """Every bundled scenario runs clean and keeps its bookkeeping."""

    @pytest.mark.parametrize("scenario", load_scenarios(), ids=lambda s: s.name)
    def test_scenario_runs(self, scenario):
        simulation = run_simulation(scenario)
        meta = simulation.simulation_metadata
        assert meta.total_weeks == len(scenario.weeks)
        assert sum(meta.decisions_breakdown.values()) == meta.total_weeks
        assert set(meta.decisions_breakdown) == set(TrainingDecision)
        for i, week in enumerate(simulation.weeks):
            assert week.week_number == i + 1
            assert len(week.sessions) == week.program.sessions_per_week
            assert len(week.minimum_viable_sessions) == week.program.sessions_per_week

    @pytest.mark.parametrize("scenario", load_scenarios(), ids=lambda s: s.name)
    def test_scenario_is_deterministic(self, scenario):
        assert run_simulation(scenario) == run_simulation(scenario)

    def test_equipment_and_template_options(self):
        options = GenerationOptions(strength_template="upper", equipment_filter=("bodyweight",))
        simulation = run_simulation(get_scenario("Perfect Adherence"), options=options)
        assert simulation.simulation_metadata.total_weeks == 8


class TestScenarioOutcomes:
    """Headline behaviour of individual scenarios."""

    def test_perfect_adherence_progresses(self):
        simulation = run_simulation(get_scenario("Perfect Adherence"))
        decisions = _decisions(simulation)
        assert decisions[:3] == [TrainingDecision.MAINTAIN] * 3
        assert simulation.simulation_metadata.decisions_breakdown[TrainingDecision.PROGRESS] >= 2
        assert simulation.final_state.current_program.intensity_tier != IntensityTier.LIGHT
        first = simulation.simulation_metadata.phase_transitions[0]
        assert (first.week, first.to_phase) == (3, TrainingPhase.BUILDING)

    def test_moderate_adherence_never_progresses(self):
        simulation = run_simulation(get_scenario("Moderate Adherence"))
        assert TrainingDecision.PROGRESS not in _decisions(simulation)

    def test_high_fatigue_scales_back(self):
        simulation = run_simulation(get_scenario("High Fatigue Episode"))
        assert TrainingDecision.SCALE_BACK in _decisions(simulation)

    def test_three_week_gap_scales_back(self):
        simulation = run_simulation(get_scenario("Three-Week Gap"))
        assert TrainingDecision.SCALE_BACK in _decisions(simulation)
        assert simulation.final_state.current_program.sessions_per_week == 2

    def test_underfueling_detected(self):
        simulation = run_simulation(get_scenario("Underfueling Pattern"))
        week3 = simulation.weeks[2]
        assert week3.decision.type == TrainingDecision.SCALE_BACK
        assert week3.decision.reason == "Energy context is depleted (likely underfueling)"

    def test_pain_injury_episode(self):
        simulation = run_simulation(get_scenario("Pain/Injury Episode"))
        decisions = _decisions(simulation)
        assert decisions[3] == TrainingDecision.MAINTAIN
        assert decisions[4] == TrainingDecision.SCALE_BACK
        assert TrainingDecision.PROGRESS not in decisions[:6]
        to_phases = [t.to_phase for t in simulation.simulation_metadata.phase_transitions]
        assert TrainingPhase.RECOVERING in to_phases

    def test_week_dates_follow_start(self):
        simulation = run_simulation(get_scenario("Moderate Adherence"))
        assert simulation.weeks[0].week_start_iso == DEFAULT_START_DATE.isoformat()
        assert simulation.weeks[1].week_start_iso == "2026-01-12"


class TestSimulationWeek:
    """Scripted week validation and conversion."""

    def test_negative_sessions_rejected(self):
        with pytest.raises(ValueError):
            SimulationWeek(-1)

    def test_empty_checkin_becomes_none(self):
        week = SimulationWeek(3).to_week_input(1, DEFAULT_START_DATE)
        assert week.checkin is None
        assert week.energy_check is None

    def test_short_custom_scenario(self):
        scenario = SimulationScenario("Two", weeks=(SimulationWeek(3), SimulationWeek(3)))
        simulation = run_simulation(scenario, user_id="someone-else")
        assert simulation.weeks[0].sessions[0].id.startswith("2026-01-05")
        assert simulation.final_state.phase_week == 3

    def test_first_onboarding_week_rule(self):
        scenario = SimulationScenario("One", weeks=(SimulationWeek(3),))
        simulation = run_simulation(scenario)
        assert simulation.weeks[0].decision.reason == "Onboarding phase (week 1/3)"
        assert DecisionRule.ONBOARDING.value == "onboarding"


class TestResumeFromState:
    """Simulating on top of a state that has already trained."""

    @pytest.fixture
    def trained_state(self):
        """State after one full week, as a caller would have stored it."""
        week = SimulationWeek(3).to_week_input(1, DEFAULT_START_DATE)
        return run_weekly_cycle(TrainingState.new(DEFAULT_USER_ID), week).state

    def test_totals_carry_over(self, trained_state):
        scenario = SimulationScenario("More", weeks=(SimulationWeek(3), SimulationWeek(3)))
        simulation = run_simulation(
            scenario,
            start_date=DEFAULT_START_DATE + timedelta(weeks=1),
            initial_state=trained_state,
        )
        assert simulation.final_state.total_sessions_raw == 9
        assert simulation.simulation_metadata.initial_sessions_raw == 3
        assert sum(w.completion.raw_sessions_completed for w in simulation.weeks) == 6

    def test_week_numbers_continue(self, trained_state):
        scenario = SimulationScenario("More", weeks=(SimulationWeek(3), SimulationWeek(3)))
        simulation = run_simulation(
            scenario,
            start_date=DEFAULT_START_DATE + timedelta(weeks=1),
            initial_state=trained_state,
        )
        assert simulation.simulation_metadata.first_week == 2
        assert [w.week_number for w in simulation.weeks] == [2, 3]
        assert [s.week_number for s in simulation.weeks[0].sessions] == [2, 2, 2]

    def test_resumed_run_matches_continuous_run(self, trained_state):
        continuous = run_simulation(
            SimulationScenario("All", weeks=(SimulationWeek(3),) * 3)
        )
        resumed = run_simulation(
            SimulationScenario("Rest", weeks=(SimulationWeek(3),) * 2),
            start_date=DEFAULT_START_DATE + timedelta(weeks=1),
            initial_state=trained_state,
        )
        assert resumed.weeks == continuous.weeks[1:]
        assert resumed.final_state == continuous.final_state
