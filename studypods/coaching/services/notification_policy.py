"""
Notification decision for coaching insights.

Only decides whether a nudge should go out; delivery belongs to the host.
"""

from datetime import timedelta
from typing import Iterable

from studypods.coaching.models import CoachingInsight

DEFAULT_DUPLICATE_WINDOW_DAYS = 7


def should_notify(
    insight: CoachingInsight,
    recent: Iterable[CoachingInsight],
    window_days: int = DEFAULT_DUPLICATE_WINDOW_DAYS,
) -> bool:
    """
    True unless the same kind of insight for the same target was already
    generated within ``window_days`` before this one.
    """
    threshold = insight.generated_at - timedelta(days=window_days)

    for previous in recent:
        if previous.kind != insight.kind or previous.target != insight.target:
            continue
        if threshold <= previous.generated_at <= insight.generated_at:
            return False

    return True
