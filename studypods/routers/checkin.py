"""
FastAPI router for check-in endpoints.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from common.utils import success_response
from studypods.checkin.services.checkin_service import CheckInService
from studypods.config import Settings
from studypods.dependencies import (
    get_checkin_service,
    get_pod_service,
    get_settings,
    get_user_service,
)
from studypods.pipelines import checkin as pipelines
from studypods.pods.services.pod_service import PodService
from studypods.schemas.checkin import CheckInRequest
from studypods.user.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["checkin"])


@router.post("/checkins", status_code=201)
async def submit_checkin(
    body: CheckInRequest,
    checkin_service: Annotated[CheckInService, Depends(get_checkin_service)],
    pod_service: Annotated[PodService, Depends(get_pod_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    """
    Submit today's check-in for a pod.

    Returns the stored check-in and the recomputed streak.
    """
    result = await pipelines.submit_checkin_pipeline(
        checkin_service=checkin_service,
        pod_service=pod_service,
        user_service=user_service,
        user_id=body.userId,
        pod_id=body.podId,
        minutes=body.minutes,
        proof_type=body.proofType,
        proof_content=body.proofContent,
        mood=body.mood,
        max_daily_minutes=settings.CHECKIN_MAX_DAILY_MINUTES,
        streak_config=settings.streak_config(),
        streak_all_pods=settings.streaks_span_all_pods(),
    )

    return success_response(result, message="Check-in accepted")


@router.get("/users/{user_id}/streak")
async def get_streak(
    user_id: str,
    checkin_service: Annotated[CheckInService, Depends(get_checkin_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    settings: Annotated[Settings, Depends(get_settings)],
    podId: Optional[str] = Query(None, description="Limit the streak to one pod"),
):
    """
    Get the learner's current streak, longest streak and grace state.
    """
    result = await pipelines.get_streak_pipeline(
        checkin_service=checkin_service,
        user_service=user_service,
        user_id=user_id,
        pod_id=podId,
        streak_config=settings.streak_config(),
    )

    return success_response(result)
