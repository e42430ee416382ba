"""
FastAPI router for pod matching and membership endpoints.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from common.utils import success_response
from studypods.config import Settings
from studypods.dependencies import get_pod_service, get_settings, get_user_service
from studypods.pipelines import pods as pipelines
from studypods.pods.services.pod_service import PodService
from studypods.schemas.pods import JoinPodRequest, LeavePodRequest
from studypods.user.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pods"])


@router.get("/users/{user_id}/pod-matches")
async def get_pod_matches(
    user_id: str,
    pod_service: Annotated[PodService, Depends(get_pod_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    """
    Rank open pods for a learner.

    ``outcome`` is ``no-capacity`` with a suggested new pod when nothing fits.
    """
    result = await pipelines.match_pods_pipeline(
        pod_service=pod_service,
        user_service=user_service,
        user_id=user_id,
        match_config=settings.match_config(),
    )

    return success_response(result)


@router.post("/pods/join")
async def join_pod(
    body: JoinPodRequest,
    pod_service: Annotated[PodService, Depends(get_pod_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    """Join a specific pod or the best-matching one."""
    result = await pipelines.join_pod_pipeline(
        pod_service=pod_service,
        user_service=user_service,
        user_id=body.userId,
        pod_id=body.podId,
        match_config=settings.match_config(),
    )

    return success_response(result, message="Joined pod")


@router.post("/pods/{pod_id}/leave")
async def leave_pod(
    pod_id: str,
    body: LeavePodRequest,
    pod_service: Annotated[PodService, Depends(get_pod_service)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Leave a pod."""
    result = await pipelines.leave_pod_pipeline(
        pod_service=pod_service,
        user_service=user_service,
        user_id=body.userId,
        pod_id=pod_id,
    )

    return success_response(result, message="Left pod")


@router.post("/pods/dissolve-stale")
async def dissolve_stale_pods(
    pod_service: Annotated[PodService, Depends(get_pod_service)],
):
    """Dissolve empty pods and pods whose exam window has passed."""
    result = await pipelines.dissolve_stale_pods_pipeline(pod_service=pod_service)
    return success_response(result)
