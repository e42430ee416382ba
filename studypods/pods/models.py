"""
Pod domain models.

A pod is a small group of learners preparing for the same JLPT level with
exam dates close together. Matching consumes roster snapshots of these models.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


MIN_POD_SIZE = 3
MAX_POD_SIZE = 8


class JLPTLevel(str, Enum):
    N5 = "N5"
    N4 = "N4"
    N3 = "N3"
    N2 = "N2"
    N1 = "N1"


class PodStatus(str, Enum):
    OPEN = "open"
    DISSOLVED = "dissolved"


class DissolutionReason(str, Enum):
    EMPTY = "empty"
    EXAM_PASSED = "exam-passed"


class Pod(BaseModel):
    """Roster snapshot of a pod."""
    model_config = ConfigDict(frozen=True)

    id: str
    member_ids: FrozenSet[str] = frozenset()
    member_exam_dates: Dict[str, date] = Field(default_factory=dict)
    target_level: JLPTLevel
    exam_window_start: date
    exam_window_end: date
    capacity: int = Field(6, ge=MIN_POD_SIZE, le=MAX_POD_SIZE)
    created_at: datetime
    status: PodStatus = PodStatus.OPEN

    @model_validator(mode="after")
    def _check_window(self) -> "Pod":
        if self.exam_window_start > self.exam_window_end:
            raise ValueError("exam_window_start must not be after exam_window_end")
        return self

    @property
    def member_count(self) -> int:
        return len(self.member_ids)

    @property
    def has_capacity(self) -> bool:
        return self.member_count < self.capacity

    @property
    def is_open(self) -> bool:
        return self.status is PodStatus.OPEN

    def is_member(self, user_id: str) -> bool:
        """Membership check; dissolved pods have no effective members."""
        return self.is_open and user_id in self.member_ids

    @property
    def average_exam_date(self) -> date:
        """
        Mean exam date of current members.

        Falls back to the midpoint of the exam window when no member exam
        dates are known.
        """
        known = [d for uid, d in self.member_exam_dates.items() if uid in self.member_ids]
        if not known:
            span = (self.exam_window_end - self.exam_window_start).days
            return self.exam_window_start + timedelta(days=span // 2)
        mean_ordinal = round(sum(d.toordinal() for d in known) / len(known))
        return date.fromordinal(mean_ordinal)


class MatchPreferences(BaseModel):
    """Optional learner preferences for matching."""
    excluded_pod_ids: FrozenSet[str] = frozenset()
    max_members: Optional[int] = Field(None, ge=1, le=MAX_POD_SIZE)


class LearnerProfile(BaseModel):
    """Read-only learner reference data owned by the account system."""
    user_id: str
    level: JLPTLevel
    exam_date: date
    timezone: str = "UTC"
    preferences: MatchPreferences = Field(default_factory=MatchPreferences)


@dataclass(frozen=True)
class MatchConfig:
    exam_date_tolerance_days: int = 14
    default_capacity: int = 6


class MatchOutcome(str, Enum):
    MATCHED = "matched"
    NO_CAPACITY = "no-capacity"


@dataclass(frozen=True)
class PodCandidate:
    """A pod that passed the hard filters, with its ranking inputs."""
    pod: Pod
    rank: int
    exam_date_distance_days: int


@dataclass(frozen=True)
class PodDraft:
    """Shape of the new pod to open when nothing qualifies."""
    target_level: JLPTLevel
    exam_window_start: date
    exam_window_end: date
    capacity: int


@dataclass(frozen=True)
class MatchResult:
    outcome: MatchOutcome
    candidates: Tuple[PodCandidate, ...] = ()
    draft: Optional[PodDraft] = None

    @property
    def should_create_pod(self) -> bool:
        return self.outcome is MatchOutcome.NO_CAPACITY

    @property
    def top(self) -> Optional[PodCandidate]:
        return self.candidates[0] if self.candidates else None
