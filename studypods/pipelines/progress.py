"""
Progress pipeline functions.

Weekly reviews and coaching insights, recomputed from check-in history on
every call. Recomputation is idempotent, so duplicate triggers are harmless.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from studypods.checkin.services.checkin_service import CheckInService
from studypods.checkin.services.checkin_validator import local_calendar_date
from studypods.coaching.models import CoachingConfig, CoachingInsight
from studypods.coaching.services.insight_engine import (
    generate_insights,
    median_member_minutes,
)
from studypods.coaching.services.insight_service import InsightService
from studypods.coaching.services.notification_policy import (
    DEFAULT_DUPLICATE_WINDOW_DAYS,
    should_notify,
)
from studypods.pods.services.pod_service import PodService
from studypods.reviews.models import IsoWeek, Target
from studypods.reviews.services.review_aggregator import aggregate_week, aggregate_weeks
from studypods.streaks.models import StreakConfig
from studypods.streaks.services.streak_calculator import calculate_streak
from studypods.user.services.user_service import UserService

logger = logging.getLogger(__name__)


async def get_pod_review_pipeline(
    checkin_service: CheckInService,
    pod_service: PodService,
    pod_id: str,
    week: Optional[IsoWeek] = None,
    as_of: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Weekly review for a pod.

    Args:
        checkin_service: For pod check-ins
        pod_service: For the current roster
        pod_id: Pod ID
        week: ISO week (defaults to the week containing ``as_of``)
        as_of: Evaluation date (defaults to today, UTC)

    Returns:
        WeeklyReview dict; ``partial`` is set for an unfinished week
    """
    as_of = as_of or datetime.now(timezone.utc).date()
    week = week or IsoWeek.from_date(as_of)

    pod = await pod_service.get_pod(pod_id)
    checkins = await checkin_service.get_pod_checkins(pod_id, week.start, week.end)

    review = aggregate_week(Target.pod(pod_id), pod.member_ids, checkins, week, as_of)
    return review.to_dict()


async def get_user_review_pipeline(
    checkin_service: CheckInService,
    user_service: UserService,
    user_id: str,
    week: Optional[IsoWeek] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Weekly review for a single learner across all pods.

    The evaluation date is the learner's local date.
    """
    profile = await user_service.get_profile(user_id)
    as_of = local_calendar_date(now or datetime.now(timezone.utc), profile.timezone)
    week = week or IsoWeek.from_date(as_of)

    checkins = await checkin_service.get_user_checkins(
        user_id, start_date=week.start, end_date=week.end
    )

    review = aggregate_week(Target.user(user_id), [user_id], checkins, week, as_of)
    return review.to_dict()


async def get_coaching_pipeline(
    checkin_service: CheckInService,
    pod_service: PodService,
    user_service: UserService,
    insight_service: InsightService,
    user_id: str,
    pod_id: str,
    coaching_config: CoachingConfig = CoachingConfig(),
    streak_config: StreakConfig = StreakConfig(),
    duplicate_window_days: int = DEFAULT_DUPLICATE_WINDOW_DAYS,
    streak_all_pods: bool = False,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Generate coaching insights for a learner and their pod.

    Reviews cover the last ``window_weeks`` finalized weeks. Only insights
    that pass the duplicate-window check are logged, so a suppressed nudge
    never extends the window of the one that was sent.
    With ``streak_all_pods`` the streak counts check-ins from every pod,
    matching the check-in endpoint.

    Returns:
        dict with ``user`` and ``pod`` insight lists; each insight carries ``notify``
    """
    now = now or datetime.now(timezone.utc)
    profile = await user_service.get_profile(user_id)
    pod = await pod_service.get_pod(pod_id)

    today = local_calendar_date(now, profile.timezone)
    last_week = IsoWeek.from_date(today).previous()
    window = coaching_config.window_weeks

    first_week = last_week
    for _ in range(window - 1):
        first_week = first_week.previous()

    user_history = await checkin_service.get_user_checkins(user_id, pod_id=pod_id, end_date=today)
    pod_history = await checkin_service.get_pod_checkins(pod_id, first_week.start, last_week.end)

    user_target = Target.user(user_id)
    pod_target = Target.pod(pod_id)

    user_reviews = aggregate_weeks(user_target, [user_id], user_history, last_week, window, today)
    pod_reviews = aggregate_weeks(pod_target, pod.member_ids, pod_history, last_week, window, today)

    streak_history = user_history
    if streak_all_pods:
        streak_history = await checkin_service.get_user_checkins(user_id, end_date=today)
    streak = calculate_streak(streak_history, today, streak_config)

    user_insights = generate_insights(
        user_target,
        streak,
        user_reviews,
        config=coaching_config,
        generated_at=now,
        pod_median_minutes=median_member_minutes(pod_reviews),
    )
    pod_insights = generate_insights(
        pod_target,
        None,
        pod_reviews,
        config=coaching_config,
        generated_at=now,
    )

    return {
        "user": await _with_notify_decisions(
            insight_service, user_target, user_insights, now, duplicate_window_days
        ),
        "pod": await _with_notify_decisions(
            insight_service, pod_target, pod_insights, now, duplicate_window_days
        ),
    }


async def _with_notify_decisions(
    insight_service: InsightService,
    target: Target,
    insights: List[CoachingInsight],
    now: datetime,
    window_days: int,
) -> List[Dict[str, Any]]:
    if not insights:
        return []

    recent = await insight_service.get_recent_insights(target, now - timedelta(days=window_days))
    decisions = [(insight, should_notify(insight, recent, window_days)) for insight in insights]

    await insight_service.record_insights([insight for insight, notify in decisions if notify])

    return [{**insight.to_dict(), "notify": notify} for insight, notify in decisions]
