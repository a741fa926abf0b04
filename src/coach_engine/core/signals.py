"""
Signal aggregators.

Pure functions that turn the trailing windows of raw self-reports into
the two modulators the evaluator reads: a 0-10 fatigue score and a
categorical energy context.
"""

from collections.abc import Sequence

from .config import ENERGY_WINDOW_CHECKS, FATIGUE_SCORE_MAX, FATIGUE_WINDOW_CHECKINS
from .models import (
    EatingEnough,
    EnergyCheck,
    EnergyContext,
    EnergyLevel,
    ReadinessLevel,
    SleepQuality,
    StressLevel,
    WeeklyCheckIn,
)

# =============================================================================
# FATIGUE PENALTY TABLES
# =============================================================================

SLEEP_PENALTY: dict[SleepQuality, int] = {
    SleepQuality.POOR: 4,
    SleepQuality.FAIR: 2,
    SleepQuality.GOOD: 1,
    SleepQuality.GREAT: 0,
}

STRESS_PENALTY: dict[StressLevel, int] = {
    StressLevel.LOW: 0,
    StressLevel.MODERATE: 1,
    StressLevel.HIGH: 3,
    StressLevel.OVERWHELMING: 4,
}

READINESS_PENALTY: dict[ReadinessLevel, int] = {
    ReadinessLevel.STRONG: 0,
    ReadinessLevel.GOOD: 0,
    ReadinessLevel.OKAY: 1,
    ReadinessLevel.DRAG: 2,
}

# Eating answers that count towards the underfueling pattern
UNCERTAIN_EATING: frozenset[EatingEnough] = frozenset(
    {EatingEnough.NOT_SURE, EatingEnough.PROBABLY}
)

UNDERFUELED_CHECKS_FOR_DEPLETED = 2
LOW_CHECKS_FOR_LOW = 3
HIGH_CHECKS_FOR_HIGH = 3


def _assert_exhaustive() -> None:
    for enum_cls, table in (
        (SleepQuality, SLEEP_PENALTY),
        (StressLevel, STRESS_PENALTY),
        (ReadinessLevel, READINESS_PENALTY),
    ):
        missing = set(enum_cls) - set(table)
        if missing:
            raise RuntimeError(
                f"{enum_cls.__name__} penalty table is missing {sorted(m.value for m in missing)}"
            )


_assert_exhaustive()


def checkin_penalty(checkin: WeeklyCheckIn) -> int:
    """
    Fatigue points contributed by a single check-in.

    Args:
        checkin: Weekly check-in; unanswered questions contribute 0

    Returns:
        Sum of sleep, stress and readiness penalties (0-10)
    """
    total = 0
    if checkin.sleep_quality is not None:
        total += SLEEP_PENALTY[checkin.sleep_quality]
    if checkin.stress_level is not None:
        total += STRESS_PENALTY[checkin.stress_level]
    if checkin.readiness_level is not None:
        total += READINESS_PENALTY[checkin.readiness_level]
    return total


def calculate_fatigue_score(checkins: Sequence[WeeklyCheckIn]) -> float:
    """
    Accumulated fatigue from the most recent check-ins.

    Averages the per-check-in penalty over the trailing window (the last
    two check-ins) and clamps to 10.

    Args:
        checkins: Check-ins in chronological order

    Returns:
        Fatigue score in [0, 10]; 0.0 when there are no check-ins
    """
    window = list(checkins)[-FATIGUE_WINDOW_CHECKINS:]
    if not window:
        return 0.0
    avg = sum(checkin_penalty(c) for c in window) / len(window)
    return min(FATIGUE_SCORE_MAX, avg)


def determine_energy_context(checks: Sequence[EnergyCheck]) -> EnergyContext:
    """
    Classify fueling / energy adequacy from the trailing energy checks.

    Rules, first match wins over the last four checks:
    - depleted: >= 2 low-energy checks paired with uncertain eating
    - low: >= 3 low-energy checks
    - high: >= 3 high-energy checks
    - normal otherwise (including no data)

    Args:
        checks: Energy checks in chronological order

    Returns:
        EnergyContext
    """
    window = list(checks)[-ENERGY_WINDOW_CHECKS:]
    if not window:
        return EnergyContext.NORMAL

    low_count = sum(1 for c in window if c.energy_level == EnergyLevel.LOW)
    high_count = sum(1 for c in window if c.energy_level == EnergyLevel.HIGH)
    underfed = sum(
        1
        for c in window
        if c.energy_level == EnergyLevel.LOW and c.eating_enough in UNCERTAIN_EATING
    )

    if underfed >= UNDERFUELED_CHECKS_FOR_DEPLETED:
        return EnergyContext.DEPLETED
    if low_count >= LOW_CHECKS_FOR_LOW:
        return EnergyContext.LOW
    if high_count >= HIGH_CHECKS_FOR_HIGH:
        return EnergyContext.HIGH
    return EnergyContext.NORMAL
