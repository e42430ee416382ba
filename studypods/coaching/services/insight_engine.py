"""
Coaching insight engine.

Deterministic, rule-based heuristics over streak state and recent weekly
reviews. Every rule is evaluated independently and all firing insights are
returned; prioritizing them is left to the consumer.
"""

import logging
import statistics
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from studypods.checkin.models import Mood
from studypods.coaching.models import (
    CoachingConfig,
    CoachingContext,
    CoachingInsight,
    InsightKind,
)
from studypods.reviews.models import Target, WeeklyReview
from studypods.streaks.models import StreakState

logger = logging.getLogger(__name__)

Rule = Callable[[CoachingContext], Optional[CoachingInsight]]


# ─────────────────────────────────────────────────────────────────
# Rules
# ─────────────────────────────────────────────────────────────────

def warn_drop_off(context: CoachingContext) -> Optional[CoachingInsight]:
    """Participation fell in each of the last two consecutive finalized weeks."""
    finalized = [r for r in _window(context) if r.finalized]
    if len(finalized) < 3:
        return None

    first, second, third = finalized[-3:]
    if second.week != third.week.previous() or first.week != second.week.previous():
        return None

    if not (first.participation_rate > second.participation_rate > third.participation_rate):
        return None

    return CoachingInsight(
        kind=InsightKind.WARN_DROP_OFF,
        target=context.target,
        message="Participation has dropped two weeks in a row. A quick check-in with your pod can help.",
        generated_at=context.generated_at,
        evidence={
            "weeks": [r.week.key for r in (first, second, third)],
            "participationRates": [
                round(r.participation_rate, 4) for r in (first, second, third)
            ],
        },
    )


def encourage_milestone(context: CoachingContext) -> Optional[CoachingInsight]:
    """Current streak just reached a milestone."""
    streak = context.streak
    if streak is None or streak.current_streak not in context.config.streak_milestones:
        return None

    return CoachingInsight(
        kind=InsightKind.ENCOURAGE,
        target=context.target,
        message=f"{streak.current_streak} days in a row. Keep the streak going!",
        generated_at=context.generated_at,
        evidence={
            "currentStreak": streak.current_streak,
            "milestone": streak.current_streak,
            "longestStreak": streak.longest_streak,
        },
    )


def suggest_schedule(context: CoachingContext) -> Optional[CoachingInsight]:
    """Mostly struggling moods and study time below the pod median."""
    if context.pod_median_minutes is None:
        return None

    window = _window(context)
    total_moods = sum(sum(r.mood_counts.values()) for r in window)
    struggling = sum(r.mood_counts.get(Mood.STRUGGLING.value, 0) for r in window)

    if total_moods == 0 or struggling * 2 <= total_moods:
        return None

    minutes = sum(r.total_minutes for r in window)
    if minutes >= context.pod_median_minutes:
        return None

    return CoachingInsight(
        kind=InsightKind.SUGGEST_SCHEDULE,
        target=context.target,
        message="Study sessions have felt hard lately. Try shorter, fixed-time sessions to rebuild rhythm.",
        generated_at=context.generated_at,
        evidence={
            "weeks": [r.week.key for r in window],
            "struggling": struggling,
            "totalMoods": total_moods,
            "minutes": minutes,
            "podMedianMinutes": context.pod_median_minutes,
        },
    )


DEFAULT_RULES: Sequence[Rule] = (warn_drop_off, encourage_milestone, suggest_schedule)


# ─────────────────────────────────────────────────────────────────
# Engine
# ─────────────────────────────────────────────────────────────────

def generate_insights(
    target: Target,
    streak: Optional[StreakState],
    reviews: Iterable[WeeklyReview],
    config: CoachingConfig = CoachingConfig(),
    generated_at: Optional[datetime] = None,
    pod_median_minutes: Optional[float] = None,
    rules: Sequence[Rule] = DEFAULT_RULES,
) -> List[CoachingInsight]:
    """
    Evaluate every coaching rule.

    Args:
        target: User or pod the insights are about
        streak: Current streak state (None for pod targets)
        reviews: Weekly review history for the target
        config: Window length and streak milestones
        generated_at: Timestamp stamped on insights (defaults to now, UTC)
        pod_median_minutes: Median member minutes over the window
        rules: Rules to evaluate; order does not affect the result

    Returns:
        All firing insights sorted by kind, empty when nothing fires
    """
    context = CoachingContext(
        target=target,
        streak=streak,
        reviews=tuple(sorted(reviews, key=lambda r: r.week)),
        config=config,
        generated_at=generated_at or datetime.now(timezone.utc),
        pod_median_minutes=pod_median_minutes,
    )

    insights = []
    for rule in rules:
        insight = rule(context)
        if insight is not None:
            insights.append(insight)

    insights.sort(key=lambda i: i.kind.value)
    logger.debug(f"{len(insights)} coaching insights for {target.kind.value} {target.id}")
    return insights


def median_member_minutes(pod_reviews: Iterable[WeeklyReview]) -> Optional[float]:
    """
    Median of per-member study minutes summed over the given pod reviews.

    Members without check-ins count as zero. None when there are no members.
    """
    totals: Dict[str, int] = {}
    for review in pod_reviews:
        for member, minutes in review.minutes_by_member.items():
            totals[member] = totals.get(member, 0) + minutes

    if not totals:
        return None
    return float(statistics.median(totals.values()))


def _window(context: CoachingContext) -> Sequence[WeeklyReview]:
    return context.reviews[-context.config.window_weeks:] if context.config.window_weeks > 0 else ()
