"""
Pydantic models for check-in request validation.

Only shape is checked here. Proof type, mood and minutes stay loose so the
check-in validator can answer with its own reason codes.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field


class CheckInRequest(BaseModel):
    """Request body for submitting a check-in."""
    userId: str = Field(..., min_length=1)
    podId: str = Field(..., min_length=1)
    minutes: Any = Field(..., description="Study minutes for the day")
    proofType: str = Field(..., description="screenshot, note or link")
    proofContent: Optional[str] = Field(None, max_length=2000)
    mood: str = Field(..., description="struggling, okay or great")
