"""
Check-in domain models.

Defines the immutable check-in record, the unvalidated proposal a learner
submits, and the accept/reject decision returned by the validator.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ProofType(str, Enum):
    """Kinds of proof-of-study a check-in can carry."""
    SCREENSHOT = "screenshot"
    NOTE = "note"
    LINK = "link"


class Mood(str, Enum):
    """Self-reported mood attached to a check-in."""
    STRUGGLING = "struggling"
    OKAY = "okay"
    GREAT = "great"


class CheckIn(BaseModel):
    """An accepted daily check-in. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    pod_id: str
    user_id: str
    local_date: date
    minutes: int
    proof_type: ProofType
    proof_content: str
    mood: Mood
    created_at: datetime


@dataclass(frozen=True)
class ProposedCheckIn:
    """
    A check-in as submitted, before validation.

    Proof type and mood are kept as raw values so an unknown kind becomes a
    rejection reason instead of a parse error.
    """
    user_id: Optional[str]
    pod_id: Optional[str]
    local_date: Optional[date]
    minutes: Any
    proof_type: Any
    proof_content: Optional[str]
    mood: Any


class Decision(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class RejectReason(str, Enum):
    """Closed set of reasons a check-in can be rejected."""
    MISSING_FIELD = "missing-field"
    DUPLICATE_DAY = "duplicate-day"
    NOT_A_MEMBER = "not-a-member"
    INVALID_PROOF = "invalid-proof"
    INVALID_MOOD = "invalid-mood"
    MINUTES_OUT_OF_RANGE = "minutes-out-of-range"

    @property
    def code(self) -> str:
        """Upper-snake error code, e.g. ``DUPLICATE_DAY``."""
        return self.value.replace("-", "_").upper()


@dataclass(frozen=True)
class ValidationDecision:
    """Outcome of validating a proposed check-in."""
    decision: Decision
    reason: Optional[RejectReason] = None
    message: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.decision is Decision.ACCEPT

    @classmethod
    def accept(cls) -> "ValidationDecision":
        return cls(decision=Decision.ACCEPT)

    @classmethod
    def reject(cls, reason: RejectReason, message: str) -> "ValidationDecision":
        return cls(decision=Decision.REJECT, reason=reason, message=message)


def checkin_to_dict(checkin: CheckIn) -> dict:
    """API representation of a check-in."""
    return {
        "id": checkin.id,
        "podId": checkin.pod_id,
        "userId": checkin.user_id,
        "date": checkin.local_date.isoformat(),
        "minutes": checkin.minutes,
        "proofType": checkin.proof_type.value,
        "proofContent": checkin.proof_content,
        "mood": checkin.mood.value,
        "createdAt": checkin.created_at.isoformat(),
    }
