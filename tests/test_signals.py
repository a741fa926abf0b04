"""
Unit tests for the fatigue and energy signal aggregators.

Values are hand-computed from the penalty tables in core/signals.py.
"""

import pytest

from coach_engine.core.models import (
    EatingEnough,
    EnergyCheck,
    EnergyContext,
    EnergyLevel,
    ReadinessLevel,
    SleepQuality,
    StressLevel,
    WeeklyCheckIn,
)
from coach_engine.core.signals import (
    calculate_fatigue_score,
    checkin_penalty,
    determine_energy_context,
)

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _checkin(sleep: str | None, stress: str | None, readiness: str | None) -> WeeklyCheckIn:
    return WeeklyCheckIn(
        sleep_quality=SleepQuality(sleep) if sleep else None,
        stress_level=StressLevel(stress) if stress else None,
        readiness_level=ReadinessLevel(readiness) if readiness else None,
    )


def _energy(level: str, eating: str = "yes") -> EnergyCheck:
    return EnergyCheck(EnergyLevel(level), EatingEnough(eating))


# ===========================================================================
# Check-in penalty
# ===========================================================================

class TestCheckinPenalty:
    """Sum of the sleep, stress and readiness penalties."""

    def test_worst_answers_score_ten(self):
        assert checkin_penalty(_checkin("poor", "overwhelming", "drag")) == 10

    def test_best_answers_score_zero(self):
        assert checkin_penalty(_checkin("great", "low", "strong")) == 0

    def test_typical_week(self):
        """fair (2) + moderate (1) + okay (1) = 4."""
        assert checkin_penalty(_checkin("fair", "moderate", "okay")) == 4

    def test_missing_answers_contribute_nothing(self):
        assert checkin_penalty(_checkin("poor", None, None)) == 4
        assert checkin_penalty(WeeklyCheckIn()) == 0


# ===========================================================================
# Fatigue score
# ===========================================================================

class TestFatigueScore:
    """Average penalty over the last two check-ins, clamped to 10."""

    def test_no_checkins_is_zero(self):
        assert calculate_fatigue_score([]) == 0.0

    def test_single_checkin(self):
        assert calculate_fatigue_score([_checkin("good", "low", "good")]) == pytest.approx(1.0)

    def test_average_of_last_two(self):
        checkins = [
            _checkin("great", "low", "strong"),  # 0, outside the window
            _checkin("poor", "overwhelming", "drag"),  # 10
            _checkin("fair", "moderate", "okay"),  # 4
        ]
        assert calculate_fatigue_score(checkins) == pytest.approx(7.0)

    def test_score_stays_in_range(self):
        checkins = [_checkin("poor", "overwhelming", "drag")] * 5
        score = calculate_fatigue_score(checkins)
        assert 0.0 <= score <= 10.0
        assert score == pytest.approx(10.0)


# ===========================================================================
# Energy context
# ===========================================================================

class TestEnergyContext:
    """First matching rule over the last four checks wins."""

    def test_no_checks_is_normal(self):
        assert determine_energy_context([]) == EnergyContext.NORMAL

    def test_two_underfueled_checks_are_depleted(self):
        checks = [_energy("low", "not_sure"), _energy("low", "probably")]
        assert determine_energy_context(checks) == EnergyContext.DEPLETED

    def test_low_energy_while_eating_enough_is_not_depleted(self):
        checks = [_energy("low", "yes"), _energy("low", "yes")]
        assert determine_energy_context(checks) == EnergyContext.NORMAL

    def test_three_low_checks_are_low(self):
        checks = [_energy("low"), _energy("low"), _energy("low")]
        assert determine_energy_context(checks) == EnergyContext.LOW

    def test_three_high_checks_are_high(self):
        checks = [_energy("high"), _energy("normal"), _energy("high"), _energy("high")]
        assert determine_energy_context(checks) == EnergyContext.HIGH

    def test_depleted_wins_over_low(self):
        checks = [_energy("low", "not_sure"), _energy("low", "not_sure"), _energy("low")]
        assert determine_energy_context(checks) == EnergyContext.DEPLETED

    def test_only_last_four_checks_count(self):
        checks = [_energy("low", "not_sure"), _energy("low", "not_sure")] + [
            _energy("normal")
        ] * 4
        assert determine_energy_context(checks) == EnergyContext.NORMAL
