"""
Scenario simulation.

Runs consecutive weekly cycles over a scripted SimulationScenario, commits
each candidate state, records phase transitions, and validates the whole
run. Used by the CLI and by the test-suite to exercise the engine end to
end.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta

from loguru import logger

from .config import DEFAULT_SETTINGS, EngineSettings
from .exercises.base import ExerciseLibrary
from .invariants import validate_simulation
from .models import (
    EatingEnough,
    EnergyCheck,
    EnergyLevel,
    ReadinessLevel,
    SleepQuality,
    StressLevel,
    TrainingDecision,
    TrainingState,
    WeekInput,
    WeeklyCheckIn,
)
from .output import (
    FinalStateSummary,
    PhaseTransitionRecord,
    SimulationMetadata,
    SimulationOutput,
    WeeklyEngineOutput,
)
from .planner import run_weekly_cycle
from .session_generator import GenerationOptions

DEFAULT_START_DATE = date(2026, 1, 5)  # a Monday
DEFAULT_USER_ID = "sim-user"


@dataclass(frozen=True)
class SimulationWeek:
    """Scripted inputs for one simulated week."""

    sessions_completed: int
    sleep_quality: SleepQuality | None = None
    stress_level: StressLevel | None = None
    readiness_level: ReadinessLevel | None = None
    energy_level: EnergyLevel | None = None
    eating_enough: EatingEnough | None = None
    pain_flag: str | None = None
    active_injury: bool = False

    def __post_init__(self) -> None:
        """Validate scripted week."""
        if self.sessions_completed < 0:
            raise ValueError("sessions_completed must be non-negative")

    def to_week_input(self, week_number: int, week_start: date) -> WeekInput:
        """Build the engine input for this week."""
        checkin = WeeklyCheckIn(self.sleep_quality, self.stress_level, self.readiness_level)
        energy = None
        if self.energy_level is not None:
            energy = EnergyCheck(self.energy_level, self.eating_enough or EatingEnough.YES)
        return WeekInput(
            week_number=week_number,
            week_start=week_start,
            sessions_completed=self.sessions_completed,
            checkin=None if checkin.is_empty() else checkin,
            energy_check=energy,
            pain_flag=self.pain_flag,
            active_injury=self.active_injury,
        )


@dataclass(frozen=True)
class SimulationScenario:
    name: str
    description: str = ""
    weeks: tuple[SimulationWeek, ...] = field(default_factory=tuple)


def run_simulation(
    scenario: SimulationScenario,
    user_id: str = DEFAULT_USER_ID,
    start_date: date = DEFAULT_START_DATE,
    options: GenerationOptions | None = None,
    settings: EngineSettings | None = None,
    library: ExerciseLibrary | None = None,
    initial_state: TrainingState | None = None,
) -> SimulationOutput:
    """
    Simulate a scenario week by week from a fresh (or given) state.

    Args:
        scenario: Scripted weeks
        user_id: Athlete id used for seeding
        start_date: Start date of the first simulated week
        options: Session generation options
        settings: Evaluator thresholds
        library: Exercise library (default: bundled registry)
        initial_state: Starting state (default: TrainingState.new(user_id)).
            Week numbering continues after the weeks already in its history
            and its session totals are carried into the run.

    Returns:
        Validated SimulationOutput

    Raises:
        InvariantViolation / ConfigurationMismatch: On any engine failure
    """
    settings = settings or DEFAULT_SETTINGS
    state = initial_state or TrainingState.new(user_id)
    first_week = len(state.weekly_session_history) + 1
    initial_raw = state.total_sessions_completed_raw
    initial_planned = state.total_sessions_completed_planned
    outputs: list[WeeklyEngineOutput] = []
    transitions: list[PhaseTransitionRecord] = []

    logger.info("Simulating scenario", scenario=scenario.name, weeks=len(scenario.weeks))

    for index, sim_week in enumerate(scenario.weeks):
        week_number = first_week + index
        week_start = start_date + timedelta(weeks=index)
        result = run_weekly_cycle(
            state,
            sim_week.to_week_input(week_number, week_start),
            options=options,
            settings=settings,
            library=library,
        )
        state = result.state
        outputs.append(result.output)
        if result.phase_transition is not None:
            transitions.append(
                PhaseTransitionRecord(
                    week=week_number,
                    from_phase=result.phase_transition.from_phase,
                    to_phase=result.phase_transition.to_phase,
                )
            )

    breakdown = {decision: 0 for decision in TrainingDecision}
    for output in outputs:
        breakdown[output.decision.type] += 1

    simulation = SimulationOutput(
        scenario_name=scenario.name,
        scenario_description=scenario.description,
        weeks=tuple(outputs),
        final_state=FinalStateSummary(
            phase=state.current_phase,
            phase_week=state.week_number,
            total_sessions_raw=state.total_sessions_completed_raw,
            total_sessions_planned=state.total_sessions_completed_planned,
            current_program=state.program,
            weeks_since_scale_back=state.weeks_since_last_scale_back,
            consecutive_stable_weeks=state.consecutive_stable_weeks,
            consecutive_pain_free_weeks=state.consecutive_pain_free_weeks,
        ),
        simulation_metadata=SimulationMetadata(
            total_weeks=len(outputs),
            decisions_breakdown=breakdown,
            phase_transitions=tuple(transitions),
            first_week=first_week,
            initial_sessions_raw=initial_raw,
            initial_sessions_planned=initial_planned,
        ),
    )
    validate_simulation(simulation)
    return simulation
