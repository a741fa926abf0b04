"""
Canonical weekly output.

WeeklyEngineOutput is the self-contained snapshot of one weekly cycle that
UI and storage collaborators consume. Field names and enum values are
stable; io/serializers.py renders them to plain dicts / JSON.

SimulationOutput summarises a multi-week scenario run.
"""

from dataclasses import dataclass, field

from .models import (
    ChangeCause,
    CoachTone,
    EnergyContext,
    ProgramConfig,
    Session,
    TrainingDecision,
    TrainingPhase,
)


@dataclass(frozen=True)
class StateSnapshot:
    """Signals the decision was made on."""

    fatigue_score: float
    energy_context: EnergyContext
    adherence_rate_2week: float
    days_since_last_session: int
    pain_flags: tuple[str, ...]
    has_active_injury: bool


@dataclass(frozen=True)
class CompletionSummary:
    raw_sessions_completed: int
    planned_sessions_completed: int  # min(raw, target)
    extra_sessions: int  # max(0, raw - target)
    adherence_this_week: float


@dataclass(frozen=True)
class DecisionSummary:
    type: TrainingDecision
    reason: str
    coaching_message: str
    coach_tone: CoachTone


@dataclass(frozen=True)
class ProgramChange:
    occurred: bool
    description: str | None = None
    cause: ChangeCause = ChangeCause.NONE


@dataclass(frozen=True)
class WeeklyEngineOutput:
    week_number: int
    week_start_iso: str

    phase: TrainingPhase
    phase_week: int

    state: StateSnapshot
    program: ProgramConfig  # program used this week (post-mutation)

    sessions: tuple[Session, ...]
    minimum_viable_sessions: tuple[Session, ...]

    completion: CompletionSummary
    decision: DecisionSummary
    program_change: ProgramChange

    safety_notes: tuple[str, ...] = ()
    next_week_program: ProgramConfig | None = None


@dataclass(frozen=True)
class PhaseTransitionRecord:
    week: int
    from_phase: TrainingPhase
    to_phase: TrainingPhase


@dataclass(frozen=True)
class FinalStateSummary:
    phase: TrainingPhase
    phase_week: int
    total_sessions_raw: int
    total_sessions_planned: int
    current_program: ProgramConfig
    weeks_since_scale_back: int | None
    consecutive_stable_weeks: int
    consecutive_pain_free_weeks: int


@dataclass(frozen=True)
class SimulationMetadata:
    total_weeks: int
    decisions_breakdown: dict[TrainingDecision, int]
    phase_transitions: tuple[PhaseTransitionRecord, ...] = field(default_factory=tuple)
    first_week: int = 1  # absolute number of the first simulated week
    initial_sessions_raw: int = 0  # totals carried in by the starting state
    initial_sessions_planned: int = 0


@dataclass(frozen=True)
class SimulationOutput:
    scenario_name: str
    scenario_description: str
    weeks: tuple[WeeklyEngineOutput, ...]
    final_state: FinalStateSummary
    simulation_metadata: SimulationMetadata
