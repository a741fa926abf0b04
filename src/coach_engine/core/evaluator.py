"""
Weekly decision evaluator.

A stateless rule table over TrainingState. Rules are checked in strict
priority order (safety scale-backs, then stability holds, then the
progression gate) and the first match wins. Each branch carries a fixed
reason / message / tone triple that is passed through verbatim to the
weekly output.

The evaluator never touches the program; applying a decision is the job
of core/mutation.py.
"""

from dataclasses import dataclass, replace

from .config import DEFAULT_SETTINGS, DAYS_PER_WEEK, EngineSettings
from .models import (
    CoachTone,
    DecisionRule,
    EnergyContext,
    TrainingDecision,
    TrainingPhase,
    TrainingState,
)
from .mutation import ProgramMutationResult

GOOD_ENERGY: frozenset[EnergyContext] = frozenset({EnergyContext.NORMAL, EnergyContext.HIGH})

AT_CEILING_MESSAGE = "You're at maximum training capacity. Maintaining excellence."
BLOCKED_MESSAGE = "Holding steady due to current constraints."


@dataclass(frozen=True)
class EvaluationResult:
    """Decision plus the reasoning shown to the user."""

    decision: TrainingDecision
    reason: str
    user_message: str
    coach_tone: CoachTone
    rule: DecisionRule


def clamped_adherence(state: TrainingState) -> float:
    """
    Two-week adherence used by the rule table.

    Sessions in the trailing 14 days are capped at twice the *current*
    weekly target so over-completion cannot accelerate progression.
    """
    target_in_window = state.program.sessions_per_week * 2
    return min(state.sessions_last_14_days, target_in_window) / target_in_window


def is_stable_week(
    adherence: float,
    fatigue: float,
    energy: EnergyContext,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> bool:
    """High adherence, low fatigue and good energy at the same time."""
    return (
        adherence >= settings.adherence_stable
        and fatigue < settings.fatigue_maintain
        and energy in GOOD_ENERGY
    )


def _scale_back(reason: str, message: str, rule: DecisionRule) -> EvaluationResult:
    return EvaluationResult(TrainingDecision.SCALE_BACK, reason, message, CoachTone.GENTLE, rule)


def _maintain(
    reason: str,
    message: str,
    rule: DecisionRule,
    tone: CoachTone = CoachTone.STEADY,
) -> EvaluationResult:
    return EvaluationResult(TrainingDecision.MAINTAIN, reason, message, tone, rule)


def _check_scale_back(
    state: TrainingState, adherence: float, settings: EngineSettings
) -> EvaluationResult | None:
    """Safety gates. Any match scales the program back."""
    if state.has_active_injury or len(state.recent_pain_flags) >= settings.pain_reports_scale_back:
        if state.has_active_injury:
            reason, rule = "Active injury flag present", DecisionRule.ACTIVE_INJURY
        else:
            reason, rule = "Multiple pain reports in recent weeks", DecisionRule.PAIN_REPORTS
        return _scale_back(
            reason,
            "You've reported pain recently. This week is lighter so you can keep "
            "moving while things settle.",
            rule,
        )

    if state.accumulated_fatigue_score >= settings.fatigue_scale_back:
        return _scale_back(
            f"Fatigue score is high (>={settings.fatigue_scale_back:g}/10)",
            "Fatigue is running high. This week is lighter to help you recover "
            "and come back stronger.",
            DecisionRule.HIGH_FATIGUE,
        )

    if state.energy_context == EnergyContext.DEPLETED:
        return _scale_back(
            "Energy context is depleted (likely underfueling)",
            "Energy looks low right now. We'll keep this week lighter so training "
            "stays sustainable while you refuel.",
            DecisionRule.ENERGY_DEPLETED,
        )

    if adherence < settings.adherence_low and state.low_adherence_weeks_in_row >= 2:
        return _scale_back(
            f"Adherence below {settings.adherence_low:.0%} for 2+ consecutive weeks",
            "Let's make this more doable. This week is lighter so consistency is "
            "easier to protect.",
            DecisionRule.LOW_ADHERENCE,
        )

    days = state.days_since_last_session
    inactive_weeks = days // DAYS_PER_WEEK
    welcome_back = (
        "Welcome back. This week is an ease-in week: light, repeatable, and "
        "focused on rebuilding the habit."
    )
    if inactive_weeks >= settings.inactivity_scale_back_weeks:
        return _scale_back(
            f"Inactive for {settings.inactivity_scale_back_weeks}+ weeks",
            welcome_back,
            DecisionRule.INACTIVITY,
        )
    if (
        settings.inactivity_scale_back_days is not None
        and days >= settings.inactivity_scale_back_days
    ):
        return _scale_back(
            f"Inactive for {settings.inactivity_scale_back_days}+ days",
            welcome_back,
            DecisionRule.INACTIVITY,
        )

    return None


def _check_maintain(
    state: TrainingState, adherence: float, settings: EngineSettings
) -> EvaluationResult | None:
    """Stability gates. Any match holds the program steady."""
    inactive_weeks = state.days_since_last_session // DAYS_PER_WEEK
    if inactive_weeks >= 1:
        plural = "s" if inactive_weeks > 1 else ""
        return _maintain(
            f"Recent inactivity ({inactive_weeks} week{plural} since last session)",
            "You've had a short break. After a week or two away, we'll keep things "
            "steady to rebuild rhythm.",
            DecisionRule.RECENT_INACTIVITY,
        )

    if state.current_phase == TrainingPhase.ONBOARDING:
        return _maintain(
            f"Onboarding phase (week {state.week_number}/{settings.onboarding_weeks})",
            "We're keeping it easy while you learn the flow and build the habit. "
            "Show up, that's the goal.",
            DecisionRule.ONBOARDING,
            tone=CoachTone.ENCOURAGING,
        )

    if (state.current_pain_flags or state.recent_pain_flags) and not state.has_active_injury:
        return _maintain(
            "Recent pain report - monitoring before progression",
            "We'll keep things steady while we watch how you feel. No need to push "
            "this week.",
            DecisionRule.RECENT_PAIN,
        )

    required_pain_free = settings.required_pain_free_weeks
    if state.consecutive_pain_free_weeks < required_pain_free and state.has_pain_history:
        return _maintain(
            f"Waiting for {required_pain_free} pain-free weeks before progression "
            f"({state.consecutive_pain_free_weeks}/{required_pain_free})",
            f"Let's stay steady until you've had {required_pain_free} pain-free weeks. "
            "Then we'll progress.",
            DecisionRule.PAIN_FREE_GATE,
        )

    since = state.weeks_since_last_scale_back
    if since is not None and since < settings.post_scale_back_weeks:
        return _maintain(
            f"Stabilizing after scale-back ({since}/{settings.post_scale_back_weeks} weeks)",
            "You're rebuilding after a lighter week. Keep this steady and repeatable.",
            DecisionRule.POST_SCALE_BACK,
        )

    if settings.adherence_low <= adherence < settings.adherence_stable:
        return _maintain(
            f"Adherence in {settings.adherence_low:.0%}-{settings.adherence_stable:.0%} "
            "range (stability zone)",
            "You're showing up. Keep the sessions steady, consistency is the win this week.",
            DecisionRule.MODERATE_ADHERENCE,
        )

    fatigue = state.accumulated_fatigue_score
    if settings.fatigue_maintain <= fatigue < settings.fatigue_scale_back:
        return _maintain(
            f"Fatigue in moderate range ({settings.fatigue_maintain:g}-"
            f"{settings.fatigue_scale_back:g}/10)",
            "Fatigue is moderate. Holding steady this week gives you room to recover.",
            DecisionRule.MODERATE_FATIGUE,
        )

    if state.energy_context == EnergyContext.LOW:
        return _maintain(
            "Energy context is low",
            "Energy is lower than usual. Steady training beats pushing right now.",
            DecisionRule.LOW_ENERGY,
        )

    if state.week_number < settings.min_weeks_at_level:
        return _maintain(
            f"Less than {settings.min_weeks_at_level} weeks at current level",
            "Let's hold this level for another week or two so it sticks.",
            DecisionRule.MIN_WEEKS_AT_LEVEL,
        )

    return None


def evaluate_training_decision(
    state: TrainingState,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> EvaluationResult:
    """
    Choose this week's decision for the given state.

    Args:
        state: Training state after this week's inputs were recorded
        settings: Evaluator thresholds

    Returns:
        EvaluationResult with decision, reason, user message, tone and rule
    """
    adherence = clamped_adherence(state)

    result = _check_scale_back(state, adherence, settings)
    if result is not None:
        return result

    result = _check_maintain(state, adherence, settings)
    if result is not None:
        return result

    stable = is_stable_week(
        adherence, state.accumulated_fatigue_score, state.energy_context, settings
    )
    required_stable = settings.required_stable_weeks

    if stable and state.consecutive_stable_weeks < required_stable:
        return _maintain(
            f"Stable week {state.consecutive_stable_weeks}/{required_stable} before progression",
            "You're doing well. One more steady week and we'll look to progress.",
            DecisionRule.STABILITY_GATE,
        )

    can_progress = (
        stable
        and state.week_number >= settings.min_weeks_at_level
        and state.consecutive_stable_weeks >= required_stable
        and not state.current_pain_flags
        and state.consecutive_pain_free_weeks >= settings.required_pain_free_weeks
    )
    if can_progress:
        return EvaluationResult(
            TrainingDecision.PROGRESS,
            "High adherence, low fatigue, good energy, stable weeks and pain-free",
            "You've been consistent and recovering well. Let's build on that.",
            CoachTone.CELEBRATORY,
            DecisionRule.PROGRESS,
        )

    return _maintain(
        "Default: no clear trigger for progress or scale-back",
        "No clear signal to progress or scale back this week. Holding steady.",
        DecisionRule.DEFAULT,
    )


def finalize_decision(
    evaluation: EvaluationResult, mutation: ProgramMutationResult
) -> EvaluationResult:
    """
    Downgrade a progress decision that could not change the program.

    A progress whose mutation was a no-op becomes maintain, with the
    mutation's description as the reason and the ceiling / blocked message.
    Every other evaluation is returned unchanged.
    """
    if evaluation.decision != TrainingDecision.PROGRESS or mutation.changed:
        return evaluation

    if mutation.at_true_ceiling:
        return replace(
            evaluation,
            decision=TrainingDecision.MAINTAIN,
            reason=mutation.change_description,
            user_message=AT_CEILING_MESSAGE,
            rule=DecisionRule.AT_CEILING,
        )
    return replace(
        evaluation,
        decision=TrainingDecision.MAINTAIN,
        reason=mutation.change_description,
        user_message=BLOCKED_MESSAGE,
        coach_tone=CoachTone.STEADY,
        rule=DecisionRule.BLOCKED,
    )
