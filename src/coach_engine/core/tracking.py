"""
Weekly ingestion.

record_week() folds one WeekInput into a candidate TrainingState before
the decision is evaluated: completion history and rolling sums, clamped
adherence, inactivity and low-adherence streaks, pain tracking, the
check-in windows and the derived fatigue / energy signals, and the
stable-week streak.

Completion is capped at the program target in force *before* this
week's mutation.
"""

from .config import (
    DAYS_PER_WEEK,
    DEFAULT_SETTINGS,
    ENERGY_WINDOW_CHECKS,
    FATIGUE_WINDOW_CHECKINS,
    LOW_ADHERENCE_WEEK_FRACTION,
    PAIN_FLAG_WINDOW,
    EngineSettings,
)
from .evaluator import is_stable_week
from .models import TrainingState, WeekInput
from .signals import calculate_fatigue_score, determine_energy_context


def rolling_windows(history: list[int]) -> tuple[int, int, int]:
    """
    Session sums over the last 1, 2 and 4 weeks.

    Args:
        history: Capped weekly session counts, chronological

    Returns:
        (last_7_days, last_14_days, last_30_days)
    """
    return sum(history[-1:]), sum(history[-2:]), sum(history[-4:])


def _record_completion(state: TrainingState, week: WeekInput) -> None:
    target = state.program.sessions_per_week
    capped = min(week.sessions_completed, target)

    state.weekly_session_history.append(capped)
    (
        state.sessions_last_7_days,
        state.sessions_last_14_days,
        state.sessions_last_30_days,
    ) = rolling_windows(state.weekly_session_history)
    state.adherence_rate_2week = min(1.0, state.sessions_last_14_days / (target * 2))

    # Zero weeks are tracked by days_since_last_session instead
    if capped > 0:
        if capped < target * LOW_ADHERENCE_WEEK_FRACTION:
            state.low_adherence_weeks_in_row += 1
        else:
            state.low_adherence_weeks_in_row = 0
        state.days_since_last_session = 0
    else:
        state.days_since_last_session += DAYS_PER_WEEK

    state.total_sessions_completed_raw += week.sessions_completed


def _record_pain(state: TrainingState, week: WeekInput) -> None:
    if week.has_pain_signal:
        state.recent_pain_flags = (state.recent_pain_flags + state.current_pain_flags)[
            -PAIN_FLAG_WINDOW:
        ]
        state.current_pain_flags = [week.pain_flag] if week.pain_flag else []
        state.has_active_injury = week.active_injury
        state.has_pain_history = True
        state.consecutive_pain_free_weeks = 0
    else:
        state.current_pain_flags = []
        state.recent_pain_flags = []
        state.has_active_injury = False
        state.consecutive_pain_free_weeks += 1


def _record_signals(state: TrainingState, week: WeekInput) -> None:
    if week.checkin is not None and not week.checkin.is_empty():
        state.recent_checkins = (state.recent_checkins + [week.checkin])[
            -FATIGUE_WINDOW_CHECKINS:
        ]
    if week.energy_check is not None:
        state.recent_energy_checks = (state.recent_energy_checks + [week.energy_check])[
            -ENERGY_WINDOW_CHECKS:
        ]
    state.accumulated_fatigue_score = calculate_fatigue_score(state.recent_checkins)
    state.energy_context = determine_energy_context(state.recent_energy_checks)


def record_week(
    state: TrainingState,
    week: WeekInput,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> None:
    """
    Fold one week of inputs into the candidate state (in place).

    Args:
        state: Candidate state for this cycle
        week: This week's inputs
        settings: Thresholds for the stable-week streak
    """
    _record_completion(state, week)
    _record_pain(state, week)
    _record_signals(state, week)

    if is_stable_week(
        state.adherence_rate_2week,
        state.accumulated_fatigue_score,
        state.energy_context,
        settings,
    ):
        state.consecutive_stable_weeks += 1
    else:
        state.consecutive_stable_weeks = 0
