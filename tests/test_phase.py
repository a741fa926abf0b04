"""Phase transition machine tests."""

from coach_engine.core.models import (
    IntensityTier,
    ProgramConfig,
    ProgramConstraints,
    TrainingDecision,
    TrainingPhase,
    TrainingState,
)
from coach_engine.core.phase import apply_phase_transition, evaluate_phase_transition


def _state(phase: TrainingPhase, week: int, adherence: float, fatigue: float = 1.0) -> TrainingState:
    return TrainingState(
        user_id="athlete-1",
        current_phase=phase,
        week_number=week,
        adherence_rate_2week=adherence,
        accumulated_fatigue_score=fatigue,
    )


class TestEvaluatePhaseTransition:
    """Transition table, one edge per test."""

    def test_onboarding_exits_to_building(self):
        state = _state(TrainingPhase.ONBOARDING, 3, 0.6)
        assert evaluate_phase_transition(state, TrainingDecision.MAINTAIN) == TrainingPhase.BUILDING

    def test_onboarding_needs_enough_weeks(self):
        state = _state(TrainingPhase.ONBOARDING, 2, 1.0)
        assert evaluate_phase_transition(state, TrainingDecision.MAINTAIN) is None

    def test_onboarding_needs_adherence(self):
        state = _state(TrainingPhase.ONBOARDING, 3, 0.5)
        assert evaluate_phase_transition(state, TrainingDecision.MAINTAIN) is None

    def test_scale_back_always_recovers(self):
        for phase in (TrainingPhase.ONBOARDING, TrainingPhase.BUILDING, TrainingPhase.MAINTAINING):
            state = _state(phase, 1, 1.0)
            assert (
                evaluate_phase_transition(state, TrainingDecision.SCALE_BACK)
                == TrainingPhase.RECOVERING
            )

    def test_scale_back_while_recovering_is_not_a_transition(self):
        state = _state(TrainingPhase.RECOVERING, 1, 0.2)
        assert evaluate_phase_transition(state, TrainingDecision.SCALE_BACK) is None

    def test_building_to_maintaining(self):
        state = _state(TrainingPhase.BUILDING, 4, 0.5)
        assert (
            evaluate_phase_transition(state, TrainingDecision.MAINTAIN)
            == TrainingPhase.MAINTAINING
        )

    def test_building_stays_with_high_adherence(self):
        state = _state(TrainingPhase.BUILDING, 6, 1.0)
        assert evaluate_phase_transition(state, TrainingDecision.PROGRESS) is None

    def test_recovering_to_maintaining(self):
        state = _state(TrainingPhase.RECOVERING, 2, 0.5, fatigue=4.0)
        assert (
            evaluate_phase_transition(state, TrainingDecision.MAINTAIN)
            == TrainingPhase.MAINTAINING
        )

    def test_recovering_waits_for_low_fatigue(self):
        state = _state(TrainingPhase.RECOVERING, 3, 1.0, fatigue=5.0)
        assert evaluate_phase_transition(state, TrainingDecision.MAINTAIN) is None

    def test_maintaining_to_building(self):
        state = _state(TrainingPhase.MAINTAINING, 4, 0.75)
        assert evaluate_phase_transition(state, TrainingDecision.MAINTAIN) == TrainingPhase.BUILDING


class TestApplyPhaseTransition:
    """Week counter and duration template."""

    def test_no_transition_increments_week(self):
        state = _state(TrainingPhase.BUILDING, 2, 1.0)
        assert apply_phase_transition(state, TrainingDecision.MAINTAIN) is None
        assert state.week_number == 3
        assert state.current_phase == TrainingPhase.BUILDING

    def test_transition_resets_week_and_applies_template(self):
        state = _state(TrainingPhase.ONBOARDING, 3, 1.0)
        transition = apply_phase_transition(state, TrainingDecision.MAINTAIN)
        assert transition is not None
        assert transition.from_phase == TrainingPhase.ONBOARDING
        assert transition.to_phase == TrainingPhase.BUILDING
        assert state.week_number == 1
        assert state.program.session_duration_minutes == 30
        assert transition.duration_changed

    def test_template_never_exceeds_constraints(self):
        state = _state(TrainingPhase.RECOVERING, 2, 1.0)
        state.program = ProgramConfig(2, IntensityTier.LIGHT, 20, 1.0)
        state.program_constraints = ProgramConstraints.exactly(state.program)
        transition = apply_phase_transition(state, TrainingDecision.MAINTAIN)
        assert transition is not None
        assert transition.to_phase == TrainingPhase.MAINTAINING
        assert state.program.session_duration_minutes == 20
        assert not transition.duration_changed
