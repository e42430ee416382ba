"""
Check-in pipeline functions.

Stateless orchestration logic for check-in submission and streaks.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from common.utils.exceptions import ConflictException, ValidationException
from studypods.checkin.models import (
    ProposedCheckIn,
    RejectReason,
    ValidationDecision,
    checkin_to_dict,
)
from studypods.checkin.services.checkin_service import CheckInService
from studypods.checkin.services.checkin_validator import (
    DEFAULT_MAX_DAILY_MINUTES,
    build_checkin,
    local_calendar_date,
    validate_checkin,
)
from studypods.pods.services.pod_service import PodService
from studypods.streaks.models import StreakConfig, StreakState
from studypods.streaks.services.streak_calculator import calculate_streak
from studypods.user.services.user_service import UserService

logger = logging.getLogger(__name__)


def raise_for_rejection(decision: ValidationDecision) -> None:
    """Translate a REJECT decision into the matching API exception."""
    if decision.accepted:
        return

    if decision.reason is RejectReason.DUPLICATE_DAY:
        raise ConflictException(message=decision.message, code=decision.reason.code)

    raise ValidationException(message=decision.message, code=decision.reason.code)


async def submit_checkin_pipeline(
    checkin_service: CheckInService,
    pod_service: PodService,
    user_service: UserService,
    user_id: str,
    pod_id: str,
    minutes: Any,
    proof_type: Any,
    proof_content: Optional[str],
    mood: Any,
    max_daily_minutes: int = DEFAULT_MAX_DAILY_MINUTES,
    streak_config: StreakConfig = StreakConfig(),
    streak_all_pods: bool = False,
    submitted_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Orchestrates the check-in submission flow.

    Args:
        checkin_service: For history lookup and persistence
        pod_service: For the pod roster snapshot
        user_service: For the learner's timezone
        user_id: Submitting user's ID
        pod_id: Target pod ID
        minutes: Reported study minutes
        proof_type: screenshot, note or link
        proof_content: Proof reference or text
        mood: struggling, okay or great
        max_daily_minutes: Daily ceiling for study minutes
        streak_config: Grace settings for the returned streak
        streak_all_pods: Compute the streak across every pod
        submitted_at: Submission instant (defaults to now, UTC)

    Returns:
        Response dict with the stored check-in and updated streak

    Raises:
        ConflictException: Already checked in today
        ValidationException: Any other rejection reason
    """
    profile = await user_service.get_profile(user_id)
    pod = await pod_service.get_pod(pod_id)

    now = submitted_at or datetime.now(timezone.utc)
    today = local_calendar_date(now, profile.timezone)

    proposal = ProposedCheckIn(
        user_id=user_id,
        pod_id=pod_id,
        local_date=today,
        minutes=minutes,
        proof_type=proof_type,
        proof_content=proof_content,
        mood=mood,
    )

    existing = await checkin_service.get_user_checkins(
        user_id, pod_id=pod_id, start_date=today, end_date=today
    )

    decision = validate_checkin(proposal, pod, existing, max_daily_minutes)
    if not decision.accepted:
        logger.info(f"Check-in rejected for user {user_id} in pod {pod_id}: {decision.reason.value}")
    raise_for_rejection(decision)

    checkin = await checkin_service.insert_checkin(build_checkin(proposal, created_at=now))

    streak = await _streak_for(
        checkin_service, user_id, pod_id, today, streak_config, streak_all_pods
    )

    return {
        "checkin": checkin_to_dict(checkin),
        "streak": streak.to_dict(),
    }


async def get_streak_pipeline(
    checkin_service: CheckInService,
    user_service: UserService,
    user_id: str,
    pod_id: Optional[str] = None,
    streak_config: StreakConfig = StreakConfig(),
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Recompute a learner's streak from history.

    Args:
        checkin_service: For check-in history
        user_service: For the learner's timezone
        user_id: User ID
        pod_id: Restrict to one pod; all pods when omitted
        streak_config: Grace settings
        now: Evaluation instant (defaults to now, UTC)

    Returns:
        Streak state dict
    """
    profile = await user_service.get_profile(user_id)
    today = local_calendar_date(now or datetime.now(timezone.utc), profile.timezone)

    streak = await _streak_for(
        checkin_service, user_id, pod_id, today, streak_config, all_pods=pod_id is None
    )
    return streak.to_dict()


async def _streak_for(
    checkin_service: CheckInService,
    user_id: str,
    pod_id: Optional[str],
    today: date,
    streak_config: StreakConfig,
    all_pods: bool,
) -> StreakState:
    history = await checkin_service.get_user_checkins(
        user_id,
        pod_id=None if all_pods else pod_id,
        end_date=today,
    )
    return calculate_streak(history, today, streak_config)
