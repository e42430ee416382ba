"""
Pod pipeline functions.

Stateless orchestration for matching, joining and leaving pods.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from common.utils.exceptions import ConflictException
from studypods.checkin.services.checkin_validator import local_calendar_date
from studypods.pods.models import MatchConfig, MatchResult, Pod, PodDraft
from studypods.pods.services.pod_matcher import match_pods
from studypods.pods.services.pod_service import PodService
from studypods.user.services.user_service import UserService

logger = logging.getLogger(__name__)


def pod_to_dict(pod: Pod) -> Dict[str, Any]:
    return {
        "id": pod.id,
        "targetLevel": pod.target_level.value,
        "examWindowStart": pod.exam_window_start.isoformat(),
        "examWindowEnd": pod.exam_window_end.isoformat(),
        "averageExamDate": pod.average_exam_date.isoformat(),
        "memberCount": pod.member_count,
        "capacity": pod.capacity,
        "status": pod.status.value,
        "createdAt": pod.created_at.isoformat(),
    }


def draft_to_dict(draft: PodDraft) -> Dict[str, Any]:
    return {
        "targetLevel": draft.target_level.value,
        "examWindowStart": draft.exam_window_start.isoformat(),
        "examWindowEnd": draft.exam_window_end.isoformat(),
        "capacity": draft.capacity,
    }


def match_result_to_dict(result: MatchResult) -> Dict[str, Any]:
    return {
        "outcome": result.outcome.value,
        "shouldCreatePod": result.should_create_pod,
        "candidates": [
            {
                "rank": candidate.rank,
                "examDateDistanceDays": candidate.exam_date_distance_days,
                "pod": pod_to_dict(candidate.pod),
            }
            for candidate in result.candidates
        ],
        "draft": draft_to_dict(result.draft) if result.draft else None,
    }


async def match_pods_pipeline(
    pod_service: PodService,
    user_service: UserService,
    user_id: str,
    match_config: MatchConfig = MatchConfig(),
) -> Dict[str, Any]:
    """
    Rank open pods for a learner.

    Returns:
        Match result dict; ``outcome`` is ``no-capacity`` with a draft when
        nothing qualifies
    """
    profile = await user_service.get_profile(user_id)
    pods = await pod_service.find_open_pods(profile.level)

    result = match_pods(profile, pods, match_config)
    return match_result_to_dict(result)


async def join_pod_pipeline(
    pod_service: PodService,
    user_service: UserService,
    user_id: str,
    pod_id: Optional[str] = None,
    match_config: MatchConfig = MatchConfig(),
) -> Dict[str, Any]:
    """
    Join a pod.

    With an explicit ``pod_id`` the learner joins that pod. Otherwise the
    best-ranked candidate is tried first, falling through to the next one if
    a seat was taken concurrently, and a new pod is opened when none is left.

    Returns:
        dict with the joined pod and whether it was newly created
    """
    profile = await user_service.get_profile(user_id)

    if pod_id:
        pod = await pod_service.add_member(pod_id, user_id, profile.exam_date)
        return {"pod": pod_to_dict(pod), "created": False}

    pods = await pod_service.find_open_pods(profile.level)
    result = match_pods(profile, pods, match_config)

    for candidate in result.candidates:
        try:
            pod = await pod_service.add_member(candidate.pod.id, user_id, profile.exam_date)
        except ConflictException as e:
            if e.code != "POD_FULL":
                raise
            logger.info(f"Pod {candidate.pod.id} filled before user {user_id} could join")
            continue
        return {"pod": pod_to_dict(pod), "created": False}

    draft = result.draft or match_pods(profile, [], match_config).draft
    pod = await pod_service.create_pod(draft, founder_id=user_id, founder_exam_date=profile.exam_date)
    return {"pod": pod_to_dict(pod), "created": True}


async def leave_pod_pipeline(
    pod_service: PodService,
    user_service: UserService,
    user_id: str,
    pod_id: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Leave a pod; the pod is dissolved if it becomes empty."""
    profile = await user_service.get_profile(user_id)
    today = local_calendar_date(now or datetime.now(timezone.utc), profile.timezone)

    pod = await pod_service.remove_member(pod_id, user_id, today)
    return {"pod": pod_to_dict(pod)}


async def dissolve_stale_pods_pipeline(
    pod_service: PodService,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Dissolve empty pods and pods past their exam window."""
    today = today or datetime.now(timezone.utc).date()
    dissolved = await pod_service.dissolve_stale_pods(today)
    return {"dissolved": dissolved, "count": len(dissolved)}
