"""
Weekly review aggregation.

Summarizes a pod's or learner's ISO week of check-ins. Reviews for a week
that has not fully elapsed are flagged partial and only count elapsed days.
"""

import logging
from datetime import date
from typing import Iterable, List

from studypods.checkin.models import CheckIn, Mood
from studypods.reviews.models import IsoWeek, Target, TargetKind, WeeklyReview

logger = logging.getLogger(__name__)


def aggregate_week(
    target: Target,
    member_ids: Iterable[str],
    checkins: Iterable[CheckIn],
    week: IsoWeek,
    as_of: date,
) -> WeeklyReview:
    """
    Build the review for one ISO week.

    Args:
        target: Pod or user being reviewed
        member_ids: Current members (just the user for a user review)
        checkins: Accepted check-ins; anything outside the target or week is ignored
        week: ISO week to summarize
        as_of: Evaluation date

    Returns:
        WeeklyReview, finalized only once ``as_of`` is past the week's Sunday
    """
    members = set(member_ids)
    finalized = as_of > week.end
    last_counted = week.end if finalized else as_of

    mood_counts = {mood.value: 0 for mood in Mood}
    minutes_by_member = {member: 0 for member in members}
    checked_in = set()
    total_checkins = 0
    total_minutes = 0

    for checkin in checkins:
        if not _belongs_to(target, checkin):
            continue
        if not week.contains(checkin.local_date) or checkin.local_date > last_counted:
            continue

        total_checkins += 1
        total_minutes += checkin.minutes
        mood_counts[checkin.mood.value] += 1

        if checkin.user_id in members:
            checked_in.add(checkin.user_id)
            minutes_by_member[checkin.user_id] += checkin.minutes

    participation = len(checked_in) / len(members) if members else 0.0

    if finalized:
        elapsed_days = 7
    else:
        elapsed_days = max(0, min(7, (as_of - week.start).days + 1))

    return WeeklyReview(
        target=target,
        week=week,
        total_checkins=total_checkins,
        total_minutes=total_minutes,
        mood_counts=mood_counts,
        minutes_by_member=minutes_by_member,
        participation_rate=participation,
        member_count=len(members),
        elapsed_days=elapsed_days,
        finalized=finalized,
    )


def aggregate_weeks(
    target: Target,
    member_ids: Iterable[str],
    checkins: Iterable[CheckIn],
    last_week: IsoWeek,
    count: int,
    as_of: date,
) -> List[WeeklyReview]:
    """Reviews for ``count`` consecutive weeks ending at ``last_week``, oldest first."""
    members = list(member_ids)
    history = list(checkins)

    weeks = []
    week = last_week
    for _ in range(count):
        weeks.append(week)
        week = week.previous()

    return [aggregate_week(target, members, history, w, as_of) for w in reversed(weeks)]


def _belongs_to(target: Target, checkin: CheckIn) -> bool:
    if target.kind is TargetKind.POD:
        return checkin.pod_id == target.id
    return checkin.user_id == target.id
