"""
Data models for coach-engine.

Closed enumerations for every categorical value the engine reads or
writes, the program configuration and its ratchet constraints, the
weekly inputs, the long-lived per-user TrainingState, and the immutable
Session / Exercise artifacts produced each week.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from .config import (
    DURATION_MAX,
    DURATION_MIN,
    DURATION_ONBOARDING,
    FREQUENCY_DEFAULT,
    FREQUENCY_MAX,
    FREQUENCY_MIN,
    PAIN_FLAG_WINDOW,
    VOLUME_CAP,
    VOLUME_START,
)


class TrainingPhase(str, Enum):
    ONBOARDING = "onboarding"
    BUILDING = "building"
    MAINTAINING = "maintaining"
    RECOVERING = "recovering"


class IntensityTier(str, Enum):
    """Exercise difficulty tier. Ordered: light < moderate < challenging."""

    LIGHT = "light"
    MODERATE = "moderate"
    CHALLENGING = "challenging"

    @property
    def rank(self) -> int:
        return list(IntensityTier).index(self)

    def next_tier(self) -> "IntensityTier | None":
        """Return the next harder tier, or None at the top."""
        tiers = list(IntensityTier)
        idx = tiers.index(self)
        return tiers[idx + 1] if idx + 1 < len(tiers) else None


class EnergyContext(str, Enum):
    DEPLETED = "depleted"
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class TrainingDecision(str, Enum):
    PROGRESS = "progress"
    MAINTAIN = "maintain"
    SCALE_BACK = "scale_back"


class CoachTone(str, Enum):
    ENCOURAGING = "encouraging"
    STEADY = "steady"
    GENTLE = "gentle"
    CELEBRATORY = "celebratory"


class SleepQuality(str, Enum):
    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"
    GREAT = "great"


class StressLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    OVERWHELMING = "overwhelming"


class ReadinessLevel(str, Enum):
    DRAG = "drag"
    OKAY = "okay"
    GOOD = "good"
    STRONG = "strong"


class EnergyLevel(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class EatingEnough(str, Enum):
    NOT_SURE = "not_sure"
    PROBABLY = "probably"
    YES = "yes"
    MORE_THAN_USUAL = "more_than_usual"


class ChangeCause(str, Enum):
    """Why next week's program differs (or not) from this week's."""

    SCALE_BACK = "scale_back"
    PROGRESSION_DURATION = "progression_duration"
    PROGRESSION_VOLUME = "progression_volume"
    PROGRESSION_INTENSITY = "progression_intensity"
    PHASE_TRANSITION = "phase_transition"
    AT_TRUE_CEILING = "at_true_ceiling"
    BLOCKED_BY_CONSTRAINTS = "blocked_by_constraints"
    NONE = "none"


class DecisionRule(str, Enum):
    """Identifier of the evaluator branch that produced a decision."""

    ACTIVE_INJURY = "active_injury"
    PAIN_REPORTS = "pain_reports"
    HIGH_FATIGUE = "high_fatigue"
    ENERGY_DEPLETED = "energy_depleted"
    LOW_ADHERENCE = "low_adherence"
    INACTIVITY = "inactivity"
    RECENT_INACTIVITY = "recent_inactivity"
    ONBOARDING = "onboarding"
    RECENT_PAIN = "recent_pain"
    PAIN_FREE_GATE = "pain_free_gate"
    POST_SCALE_BACK = "post_scale_back"
    MODERATE_ADHERENCE = "moderate_adherence"
    MODERATE_FATIGUE = "moderate_fatigue"
    LOW_ENERGY = "low_energy"
    MIN_WEEKS_AT_LEVEL = "min_weeks_at_level"
    STABILITY_GATE = "stability_gate"
    PROGRESS = "progress"
    DEFAULT = "default"
    AT_CEILING = "at_ceiling"
    BLOCKED = "blocked"


class StrengthTemplate(str, Enum):
    FULL_BODY = "full_body"
    UPPER = "upper"
    LOWER = "lower"
    STRENGTH_CONDITIONING = "strength_conditioning"


class SessionStyle(str, Enum):
    STRENGTH_FOCUS = "strength_focus"
    CARDIO_FOCUS = "cardio_focus"
    BALANCED = "balanced"
    RECOVERY_MOBILITY = "recovery_mobility"


class SessionType(str, Enum):
    A = "A"
    B = "B"
    C = "C"


class ExerciseCategory(str, Enum):
    STRENGTH = "strength"
    CARDIO = "cardio"
    MOBILITY = "mobility"


@dataclass(frozen=True)
class ProgramConfig:
    """
    What is currently prescribed.

    Replaced wholesale on scale-back, adjusted one field at a time on
    progress (via dataclasses.replace).
    """

    sessions_per_week: int = FREQUENCY_DEFAULT
    intensity_tier: IntensityTier = IntensityTier.LIGHT
    session_duration_minutes: int = DURATION_ONBOARDING
    volume_multiplier: float = VOLUME_START

    def __post_init__(self) -> None:
        """Validate program values."""
        if not FREQUENCY_MIN <= self.sessions_per_week <= FREQUENCY_MAX:
            raise ValueError(
                f"sessions_per_week must be in [{FREQUENCY_MIN}, {FREQUENCY_MAX}]"
            )
        if not DURATION_MIN <= self.session_duration_minutes <= DURATION_MAX:
            raise ValueError(
                f"session_duration_minutes must be in [{DURATION_MIN}, {DURATION_MAX}]"
            )
        if self.volume_multiplier <= 0:
            raise ValueError("volume_multiplier must be positive")
        object.__setattr__(self, "intensity_tier", IntensityTier(self.intensity_tier))

    def summary(self) -> str:
        """One-line human readable summary, e.g. '3/week, light, 25min, 1.0x'."""
        return (
            f"{self.sessions_per_week}/week, {self.intensity_tier.value}, "
            f"{self.session_duration_minutes}min, {self.volume_multiplier:.1f}x"
        )


@dataclass(frozen=True)
class ProgramConstraints:
    """
    Ceiling per ProgramConfig field.

    Tightened to exactly the scaled-back program on scale-back, relaxed by
    per-field maximum after a successful progression. Survives phase
    transitions.
    """

    max_sessions_per_week: int = FREQUENCY_MAX
    max_intensity_tier: IntensityTier = IntensityTier.CHALLENGING
    max_duration_minutes: int = DURATION_MAX
    max_volume_multiplier: float = VOLUME_CAP

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "max_intensity_tier", IntensityTier(self.max_intensity_tier)
        )

    @classmethod
    def exactly(cls, program: ProgramConfig) -> "ProgramConstraints":
        """Constraints pinned to the given program's values."""
        return cls(
            max_sessions_per_week=program.sessions_per_week,
            max_intensity_tier=program.intensity_tier,
            max_duration_minutes=program.session_duration_minutes,
            max_volume_multiplier=program.volume_multiplier,
        )

    def relaxed_to(self, program: ProgramConfig) -> "ProgramConstraints":
        """Per-field maximum of these ceilings and the given program."""
        tier = max(self.max_intensity_tier, program.intensity_tier, key=lambda t: t.rank)
        return ProgramConstraints(
            max_sessions_per_week=max(self.max_sessions_per_week, program.sessions_per_week),
            max_intensity_tier=tier,
            max_duration_minutes=max(self.max_duration_minutes, program.session_duration_minutes),
            max_volume_multiplier=max(self.max_volume_multiplier, program.volume_multiplier),
        )


@dataclass(frozen=True)
class WeeklyCheckIn:
    """Weekly sleep / stress / readiness self-report. Missing answers score 0."""

    sleep_quality: SleepQuality | None = None
    stress_level: StressLevel | None = None
    readiness_level: ReadinessLevel | None = None
    reflection_note: str | None = None

    def is_empty(self) -> bool:
        return (
            self.sleep_quality is None
            and self.stress_level is None
            and self.readiness_level is None
        )


@dataclass(frozen=True)
class EnergyCheck:
    """Energy and eating-sufficiency self-report."""

    energy_level: EnergyLevel
    eating_enough: EatingEnough = EatingEnough.YES


@dataclass
class WeekInput:
    """External input for one weekly cycle."""

    week_number: int  # absolute, 1-based
    week_start: date
    sessions_completed: int
    checkin: WeeklyCheckIn | None = None
    energy_check: EnergyCheck | None = None
    pain_flag: str | None = None
    active_injury: bool = False

    def __post_init__(self) -> None:
        """Validate week input."""
        if self.week_number < 1:
            raise ValueError("week_number must be >= 1")
        if self.sessions_completed < 0:
            raise ValueError("sessions_completed must be non-negative")

    @property
    def has_pain_signal(self) -> bool:
        return bool(self.pain_flag) or self.active_injury


@dataclass
class TrainingState:
    """
    Per-user record advanced once per weekly cycle.

    week_number here is the week within the current phase (1-based), not
    the absolute training week.
    """

    user_id: str
    current_phase: TrainingPhase = TrainingPhase.ONBOARDING
    week_number: int = 1
    program: ProgramConfig = field(default_factory=ProgramConfig)
    program_constraints: ProgramConstraints = field(default_factory=ProgramConstraints)

    weekly_session_history: list[int] = field(default_factory=list)  # capped counts
    sessions_last_7_days: int = 0
    sessions_last_14_days: int = 0
    sessions_last_30_days: int = 0
    adherence_rate_2week: float = 0.0
    low_adherence_weeks_in_row: int = 0

    accumulated_fatigue_score: float = 0.0
    energy_context: EnergyContext = EnergyContext.NORMAL
    recent_checkins: list[WeeklyCheckIn] = field(default_factory=list)
    recent_energy_checks: list[EnergyCheck] = field(default_factory=list)

    current_pain_flags: list[str] = field(default_factory=list)  # this week's report
    recent_pain_flags: list[str] = field(default_factory=list)  # preceding pain weeks
    has_active_injury: bool = False
    has_pain_history: bool = False
    consecutive_pain_free_weeks: int = 0

    days_since_last_session: int = 0
    weeks_since_last_scale_back: int | None = None  # None until first scale-back
    consecutive_stable_weeks: int = 0

    total_sessions_completed_raw: int = 0
    total_sessions_completed_planned: int = 0

    last_decision: TrainingDecision = TrainingDecision.MAINTAIN
    last_decision_reason: str = "Initial state"

    def __post_init__(self) -> None:
        """Validate state invariants."""
        if not self.user_id:
            raise ValueError("user_id must be non-empty")
        if self.week_number < 1:
            raise ValueError("week_number must be >= 1")
        if not 0.0 <= self.adherence_rate_2week <= 1.0:
            raise ValueError("adherence_rate_2week must be in [0, 1]")
        if not 0.0 <= self.accumulated_fatigue_score <= 10.0:
            raise ValueError("accumulated_fatigue_score must be in [0, 10]")
        if len(self.recent_pain_flags) > PAIN_FLAG_WINDOW:
            raise ValueError(f"recent_pain_flags holds at most {PAIN_FLAG_WINDOW} reports")

    @classmethod
    def new(cls, user_id: str) -> "TrainingState":
        """Fresh onboarding state with the default program and open constraints."""
        return cls(user_id=user_id)

    @property
    def pain_reports(self) -> list[str]:
        """Retained pain reports, oldest first, bounded to the report window."""
        return (self.recent_pain_flags + self.current_pain_flags)[-PAIN_FLAG_WINDOW:]


@dataclass(frozen=True)
class Exercise:
    """One prescribed exercise inside a session."""

    name: str
    category: ExerciseCategory
    sets: int
    reps: str
    id: str | None = None
    rest_seconds: int | None = None
    notes: str | None = None
    slot_id: str | None = None
    slot_tag: str | None = None
    movement_pattern: str | None = None
    equipment: tuple[str, ...] = ()
    selection_fallback: bool = False


@dataclass(frozen=True)
class Session:
    """One generated workout (standard or minimum-viable)."""

    id: str
    date: str  # ISO YYYY-MM-DD
    week_number: int
    session_number: int
    session_type: SessionType
    target_duration_minutes: int
    intensity_tier: IntensityTier
    is_minimum_viable: bool
    exercises: tuple[Exercise, ...]
