"""
Pod matching.

Ranks open pods for a learner. Cohesion wins over fill rate: when no pod
passes the hard filters the matcher asks for a new pod rather than forcing
an ill-fitting assignment.
"""

import logging
from datetime import date, timedelta
from typing import Iterable, Optional

from studypods.pods.models import (
    DissolutionReason,
    LearnerProfile,
    MatchConfig,
    MatchOutcome,
    MatchResult,
    Pod,
    PodCandidate,
    PodDraft,
)

logger = logging.getLogger(__name__)


def match_pods(
    profile: LearnerProfile,
    pods: Iterable[Pod],
    config: MatchConfig = MatchConfig(),
) -> MatchResult:
    """
    Rank candidate pods for a learner.

    Args:
        profile: Learner level, exam date and preferences
        pods: Roster snapshots of pods to consider
        config: Exam date tolerance and default capacity for new pods

    Returns:
        MatchResult with ranked candidates, or NO_CAPACITY with a PodDraft

    Ranking:
        1. Smallest distance between pod average exam date and learner exam date
        2. Fewest current members
        3. Oldest pod first
    """
    eligible = [pod for pod in pods if _passes_hard_filters(profile, pod, config)]

    if not eligible:
        logger.info(
            f"No pod with capacity for user {profile.user_id} "
            f"({profile.level.value}, exam {profile.exam_date.isoformat()})"
        )
        return MatchResult(
            outcome=MatchOutcome.NO_CAPACITY,
            draft=_draft_for(profile, config),
        )

    eligible.sort(
        key=lambda pod: (
            _distance_days(pod, profile.exam_date),
            pod.member_count,
            pod.created_at,
            pod.id,
        )
    )

    candidates = tuple(
        PodCandidate(
            pod=pod,
            rank=index + 1,
            exam_date_distance_days=_distance_days(pod, profile.exam_date),
        )
        for index, pod in enumerate(eligible)
    )

    return MatchResult(outcome=MatchOutcome.MATCHED, candidates=candidates)


def dissolution_reason(pod: Pod, today: date) -> Optional[DissolutionReason]:
    """Why an open pod should be dissolved as of ``today``, if at all."""
    if not pod.is_open:
        return None
    if pod.member_count == 0:
        return DissolutionReason.EMPTY
    if today > pod.exam_window_end:
        return DissolutionReason.EXAM_PASSED
    return None


def _passes_hard_filters(profile: LearnerProfile, pod: Pod, config: MatchConfig) -> bool:
    if not pod.is_open:
        return False

    if pod.target_level != profile.level:
        return False

    tolerance = timedelta(days=config.exam_date_tolerance_days)
    if not (pod.exam_window_start - tolerance <= profile.exam_date <= pod.exam_window_end + tolerance):
        return False

    if not pod.has_capacity:
        return False

    preferences = profile.preferences
    if pod.id in preferences.excluded_pod_ids:
        return False

    if preferences.max_members is not None and pod.member_count >= preferences.max_members:
        return False

    if profile.user_id in pod.member_ids:
        return False

    return True


def _distance_days(pod: Pod, exam_date: date) -> int:
    return abs((pod.average_exam_date - exam_date).days)


def _draft_for(profile: LearnerProfile, config: MatchConfig) -> PodDraft:
    tolerance = timedelta(days=config.exam_date_tolerance_days)
    return PodDraft(
        target_level=profile.level,
        exam_window_start=profile.exam_date - tolerance,
        exam_window_end=profile.exam_date + tolerance,
        capacity=config.default_capacity,
    )

