"""
Request schemas for the Study Pods API.
"""

from studypods.schemas.checkin import CheckInRequest
from studypods.schemas.pods import JoinPodRequest, LeavePodRequest

__all__ = [
    "CheckInRequest",
    "JoinPodRequest",
    "LeavePodRequest",
]
