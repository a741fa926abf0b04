"""
Configuration constants for the weekly coaching engine.

All adjustable parameters are centralized here for easy tuning.
Evaluator thresholds live on EngineSettings so they can be overridden
from YAML (see core/engine/config_loader.py); the progression ladders and
validator bounds are fixed.
"""

from dataclasses import dataclass
from typing import Final

# =============================================================================
# ONBOARDING
# =============================================================================

ONBOARDING_WEEKS: Final[int] = 3

# =============================================================================
# VOLUME PROGRESSION
# =============================================================================

VOLUME_START: Final[float] = 1.0  # Baseline multiplier (also the reset value)
VOLUME_LADDER: Final[tuple[float, ...]] = (1.0, 1.1, 1.2, 1.3, 1.4, 1.5)
VOLUME_CAP: Final[float] = 1.5  # Default ceiling for a fresh state
VOLUME_CAP_LIGHT: Final[float] = 1.2
VOLUME_CAP_MODERATE: Final[float] = 1.3

# =============================================================================
# DURATION (minutes)
# =============================================================================

DURATION_ONBOARDING: Final[int] = 25
DURATION_BUILDING: Final[int] = 30
DURATION_MAINTAINING: Final[int] = 30
DURATION_RECOVERING: Final[int] = 20

DURATION_BASE_LIGHT: Final[int] = 25
DURATION_BASE_MODERATE: Final[int] = 30
DURATION_CHALLENGING_LADDER: Final[tuple[int, ...]] = (35, 40, 45, 50, 55, 60)

DURATION_MIN: Final[int] = 15
DURATION_MAX: Final[int] = 60

# =============================================================================
# SESSION FREQUENCY (never auto-increased)
# =============================================================================

FREQUENCY_MIN: Final[int] = 2
FREQUENCY_DEFAULT: Final[int] = 3
FREQUENCY_MAX: Final[int] = 4

# =============================================================================
# WEEKLY TRACKING
# =============================================================================

FATIGUE_WINDOW_CHECKINS: Final[int] = 2  # Trailing weekly check-ins used
ENERGY_WINDOW_CHECKS: Final[int] = 4  # ~2 checks per week over two weeks
PAIN_FLAG_WINDOW: Final[int] = 2  # Retained pain reports
LOW_ADHERENCE_WEEK_FRACTION: Final[float] = 0.5  # capped/target below this = low week
DAYS_PER_WEEK: Final[int] = 7

FATIGUE_SCORE_MAX: Final[float] = 10.0

# =============================================================================
# PHASE TRANSITIONS
# =============================================================================

ONBOARDING_EXIT_ADHERENCE: Final[float] = 0.6
BUILDING_EXIT_MIN_WEEKS: Final[int] = 4
RECOVERING_EXIT_MIN_WEEKS: Final[int] = 2
RECOVERING_EXIT_ADHERENCE: Final[float] = 0.5
MAINTAINING_EXIT_MIN_WEEKS: Final[int] = 4

# =============================================================================
# MINIMUM-VIABLE SESSIONS
# =============================================================================

MINIMUM_VIABLE_VOLUME: Final[float] = 0.5
MINIMUM_VIABLE_DURATION_FRACTION: Final[float] = 0.6
REDUCED_VOLUME_NOTE_BELOW: Final[float] = 0.6
SESSION_SPACING_DAYS: Final[int] = 2

# =============================================================================
# INVARIANT BOUNDS (absolute sanity limits, not tier caps)
# =============================================================================

VOLUME_MULTIPLIER_MIN: Final[float] = 0.5
VOLUME_MULTIPLIER_MAX: Final[float] = 2.0

# Non-fatal warning thresholds
SUSPICIOUS_FATIGUE: Final[float] = 8.0
SUSPICIOUS_ADHERENCE: Final[float] = 0.3


@dataclass(frozen=True)
class EngineSettings:
    """Thresholds consulted by the decision evaluator and weekly tracking."""

    fatigue_scale_back: float = 7.0  # fatigue >= this scales back
    fatigue_maintain: float = 5.0  # fatigue >= this holds steady
    adherence_low: float = 0.4
    adherence_stable: float = 0.75
    required_stable_weeks: int = 2
    required_pain_free_weeks: int = 2
    post_scale_back_weeks: int = 2
    min_weeks_at_level: int = 2
    pain_reports_scale_back: int = 2
    inactivity_scale_back_weeks: int = 3
    inactivity_scale_back_days: int | None = None  # day-precision override
    onboarding_weeks: int = ONBOARDING_WEEKS

    def __post_init__(self) -> None:
        """Validate threshold ordering."""
        if not 0.0 <= self.fatigue_maintain <= self.fatigue_scale_back <= FATIGUE_SCORE_MAX:
            raise ValueError(
                "fatigue thresholds must satisfy 0 <= fatigue_maintain <= "
                f"fatigue_scale_back <= {FATIGUE_SCORE_MAX}"
            )
        if not 0.0 <= self.adherence_low <= self.adherence_stable <= 1.0:
            raise ValueError(
                "adherence thresholds must satisfy 0 <= adherence_low <= adherence_stable <= 1"
            )
        for name in (
            "required_stable_weeks",
            "required_pain_free_weeks",
            "post_scale_back_weeks",
            "min_weeks_at_level",
            "pain_reports_scale_back",
            "inactivity_scale_back_weeks",
            "onboarding_weeks",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        if self.inactivity_scale_back_days is not None and self.inactivity_scale_back_days < 1:
            raise ValueError("inactivity_scale_back_days must be positive when set")
        if self.pain_reports_scale_back > PAIN_FLAG_WINDOW:
            raise ValueError(
                f"pain_reports_scale_back must be at most {PAIN_FLAG_WINDOW} "
                "(the number of retained pain reports)"
            )


DEFAULT_SETTINGS: Final[EngineSettings] = EngineSettings()


def challenging_volume_cap(duration_minutes: int) -> float:
    """
    Volume ceiling for the challenging tier at a given session length.

    Longer sessions allow more volume up to 50 minutes; from 55 minutes on
    the extra time *is* the progression, so volume stays at baseline.

    Args:
        duration_minutes: Current session duration

    Returns:
        Maximum volume multiplier (1.0 to 1.5)
    """
    if duration_minutes >= 55:
        return 1.0
    if duration_minutes >= 50:
        return 1.5
    if duration_minutes >= 45:
        return 1.4
    if duration_minutes >= 40:
        return 1.3
    return 1.2


def phase_duration_template(phase: str) -> int:
    """Default session duration a phase starts with (before constraint clamping)."""
    templates = {
        "onboarding": DURATION_ONBOARDING,
        "building": DURATION_BUILDING,
        "maintaining": DURATION_MAINTAINING,
        "recovering": DURATION_RECOVERING,
    }
    return templates[phase]
