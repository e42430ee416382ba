"""
FastAPI router for weekly reviews and coaching insights.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from common.utils import BadRequestException, success_response
from studypods.checkin.services.checkin_service import CheckInService
from studypods.coaching.services.insight_service import InsightService
from studypods.config import Settings
from studypods.dependencies import (
    get_checkin_service,
    get_insight_service,
    get_pod_service,
    get_settings,
    get_user_service,
)
from studypods.pipelines import progress as pipelines
from studypods.pods.services.pod_service import PodService
from studypods.reviews.models import IsoWeek
from studypods.user.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["progress"])


def _parse_week(week: Optional[str]) -> Optional[IsoWeek]:
    if week is None:
        return None
    try:
        return IsoWeek.parse(week)
    except ValueError:
        raise BadRequestException(
            message="Week must look like 2026-W07",
            code="INVALID_WEEK",
        )


@router.get("/pods/{pod_id}/reviews")
async def get_pod_review(
    pod_id: str,
    checkin_service: Annotated[CheckInService, Depends(get_checkin_service)],
    pod_service: Annotated[PodService, Depends(get_pod_service)],
    week: Optional[str] = Query(None, description="ISO week, e.g. 2026-W07"),
):
    """
    Get a pod's weekly review. The current week is returned as partial.
    """
    result = await pipelines.get_pod_review_pipeline(
        checkin_service=checkin_service,
        pod_service=pod_service,
        pod_id=pod_id,
        week=_parse_week(week),
    )

    return success_response(result)


@router.get("/users/{user_id}/reviews")
async def get_user_review(
    user_id: str,
    checkin_service: Annotated[CheckInService, Depends(get_checkin_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    week: Optional[str] = Query(None, description="ISO week, e.g. 2026-W07"),
):
    """Get a learner's weekly review across all pods."""
    result = await pipelines.get_user_review_pipeline(
        checkin_service=checkin_service,
        user_service=user_service,
        user_id=user_id,
        week=_parse_week(week),
    )

    return success_response(result)


@router.get("/users/{user_id}/coaching")
async def get_coaching(
    user_id: str,
    checkin_service: Annotated[CheckInService, Depends(get_checkin_service)],
    pod_service: Annotated[PodService, Depends(get_pod_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    insight_service: Annotated[InsightService, Depends(get_insight_service)],
    settings: Annotated[Settings, Depends(get_settings)],
    podId: str = Query(..., description="Pod whose history drives the insights"),
):
    """
    Generate coaching insights for a learner and their pod.

    Each insight carries ``notify``, the decision whether to send a nudge.
    """
    result = await pipelines.get_coaching_pipeline(
        checkin_service=checkin_service,
        pod_service=pod_service,
        user_service=user_service,
        insight_service=insight_service,
        user_id=user_id,
        pod_id=podId,
        coaching_config=settings.coaching_config(),
        streak_config=settings.streak_config(),
        duplicate_window_days=settings.INSIGHT_DUPLICATE_WINDOW_DAYS,
        streak_all_pods=settings.streaks_span_all_pods(),
    )

    return success_response(result)
