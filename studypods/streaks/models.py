"""
Streak models.

StreakState is a derived view: it is always recomputed from check-in history
and never edited by hand.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class StreakConfig:
    """Grace allowance: ``grace_allowance`` skips per rolling ``grace_window_days``."""
    grace_allowance: int = 1
    grace_window_days: int = 7


class StreakStatus(str, Enum):
    NONE = "none"
    ACTIVE = "active"
    AT_RISK = "at-risk"
    BROKEN = "broken"


@dataclass(frozen=True)
class StreakState:
    current_streak: int = 0
    longest_streak: int = 0
    last_checkin_date: Optional[date] = None
    grace_consumed: bool = False
    grace_dates: Tuple[date, ...] = field(default_factory=tuple)
    status: StreakStatus = StreakStatus.NONE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "lastCheckinDate": self.last_checkin_date.isoformat() if self.last_checkin_date else None,
            "graceConsumed": self.grace_consumed,
            "graceDates": [d.isoformat() for d in self.grace_dates],
            "status": self.status.value,
        }
