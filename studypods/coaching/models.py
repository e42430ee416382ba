"""
Coaching models.

Coaching insights are advisory and ephemeral: they are recomputed from
streak state and weekly reviews and are never authoritative data.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from studypods.reviews.models import Target, WeeklyReview
from studypods.streaks.models import StreakState


class InsightKind(str, Enum):
    ENCOURAGE = "encourage"
    WARN_DROP_OFF = "warn-drop-off"
    SUGGEST_SCHEDULE = "suggest-schedule"


@dataclass(frozen=True)
class CoachingConfig:
    window_weeks: int = 3
    streak_milestones: Tuple[int, ...] = (7, 30, 60, 100)


@dataclass(frozen=True)
class CoachingInsight:
    kind: InsightKind
    target: Target
    message: str
    generated_at: datetime
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "target": self.target.to_dict(),
            "message": self.message,
            "evidence": dict(self.evidence),
            "generatedAt": self.generated_at.isoformat(),
        }


@dataclass(frozen=True)
class CoachingContext:
    """Everything a coaching rule may look at."""
    target: Target
    streak: Optional[StreakState]
    reviews: Tuple[WeeklyReview, ...]
    config: CoachingConfig
    generated_at: datetime
    pod_median_minutes: Optional[float] = None
