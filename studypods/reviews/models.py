"""
Weekly review models.

A WeeklyReview summarizes one ISO week of check-ins for a pod or a single
learner. Reviews are computed views and carry no state of their own.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict


class TargetKind(str, Enum):
    USER = "user"
    POD = "pod"


@dataclass(frozen=True)
class Target:
    """What a review or coaching insight is about."""
    kind: TargetKind
    id: str

    @classmethod
    def user(cls, user_id: str) -> "Target":
        return cls(TargetKind.USER, user_id)

    @classmethod
    def pod(cls, pod_id: str) -> "Target":
        return cls(TargetKind.POD, pod_id)

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind.value, "id": self.id}


@dataclass(frozen=True, order=True)
class IsoWeek:
    """ISO calendar week, Monday to Sunday."""
    year: int
    week: int

    def __post_init__(self):
        # Raises ValueError for weeks that do not exist in the year
        date.fromisocalendar(self.year, self.week, 1)

    @classmethod
    def from_date(cls, day: date) -> "IsoWeek":
        iso = day.isocalendar()
        return cls(iso[0], iso[1])

    @classmethod
    def parse(cls, key: str) -> "IsoWeek":
        """Parse ``YYYY-Www``, e.g. ``2026-W07``."""
        year, _, week = key.upper().partition("-W")
        return cls(int(year), int(week))

    @property
    def start(self) -> date:
        return date.fromisocalendar(self.year, self.week, 1)

    @property
    def end(self) -> date:
        return date.fromisocalendar(self.year, self.week, 7)

    def previous(self) -> "IsoWeek":
        return IsoWeek.from_date(self.start - timedelta(days=7))

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def key(self) -> str:
        return f"{self.year}-W{self.week:02d}"


@dataclass(frozen=True)
class WeeklyReview:
    target: Target
    week: IsoWeek
    total_checkins: int
    total_minutes: int
    mood_counts: Dict[str, int]
    minutes_by_member: Dict[str, int]
    participation_rate: float
    member_count: int
    elapsed_days: int
    finalized: bool = False

    @property
    def partial(self) -> bool:
        return not self.finalized

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target.to_dict(),
            "week": self.week.key,
            "weekStart": self.week.start.isoformat(),
            "weekEnd": self.week.end.isoformat(),
            "totalCheckins": self.total_checkins,
            "totalMinutes": self.total_minutes,
            "moodCounts": dict(self.mood_counts),
            "minutesByMember": dict(self.minutes_by_member),
            "participationRate": self.participation_rate,
            "memberCount": self.member_count,
            "elapsedDays": self.elapsed_days,
            "finalized": self.finalized,
            "partial": self.partial,
        }
