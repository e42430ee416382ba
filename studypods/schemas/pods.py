"""
Pydantic models for pod membership requests.
"""

from typing import Optional
from pydantic import BaseModel, Field


class JoinPodRequest(BaseModel):
    """Join a specific pod, or the best match when podId is omitted."""
    userId: str = Field(..., min_length=1)
    podId: Optional[str] = None


class LeavePodRequest(BaseModel):
    userId: str = Field(..., min_length=1)
