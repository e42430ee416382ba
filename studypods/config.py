"""
Study Pods application settings.

Extends the base settings with accountability-engine configuration and turns
it into the plain config objects the engine functions accept.
"""

from typing import Tuple

from common.config import BaseAppSettings
from studypods.coaching.models import CoachingConfig
from studypods.pods.models import MAX_POD_SIZE, MIN_POD_SIZE, MatchConfig
from studypods.streaks.models import StreakConfig


class Settings(BaseAppSettings):
    """Study Pods specific settings."""

    # ==========================================================================
    # Check-in Settings
    # ==========================================================================
    # Daily ceiling for reported study minutes
    CHECKIN_MAX_DAILY_MINUTES: int = 720

    # ==========================================================================
    # Streak Settings
    # ==========================================================================
    STREAK_GRACE_ALLOWANCE: int = 1
    STREAK_GRACE_WINDOW_DAYS: int = 7
    STREAK_SCOPE: str = "pod"  # "pod" or "all"

    # ==========================================================================
    # Pod Settings
    # ==========================================================================
    POD_EXAM_DATE_TOLERANCE_DAYS: int = 14
    # Must fall inside the fixed pod size range (MIN_POD_SIZE..MAX_POD_SIZE)
    POD_DEFAULT_CAPACITY: int = 6

    # ==========================================================================
    # Coaching Settings
    # ==========================================================================
    COACHING_WINDOW_WEEKS: int = 3
    COACHING_STREAK_MILESTONES: str = "7,30,60,100"  # Comma-separated
    INSIGHT_DUPLICATE_WINDOW_DAYS: int = 7

    def get_streak_milestones(self) -> Tuple[int, ...]:
        """Parse COACHING_STREAK_MILESTONES into a sorted tuple."""
        values = [int(v.strip()) for v in self.COACHING_STREAK_MILESTONES.split(",") if v.strip()]
        return tuple(sorted(set(values)))

    def streaks_span_all_pods(self) -> bool:
        return self.STREAK_SCOPE.lower() == "all"

    def streak_config(self) -> StreakConfig:
        return StreakConfig(
            grace_allowance=self.STREAK_GRACE_ALLOWANCE,
            grace_window_days=self.STREAK_GRACE_WINDOW_DAYS,
        )

    def match_config(self) -> MatchConfig:
        return MatchConfig(
            exam_date_tolerance_days=self.POD_EXAM_DATE_TOLERANCE_DAYS,
            default_capacity=self.POD_DEFAULT_CAPACITY,
        )

    def coaching_config(self) -> CoachingConfig:
        return CoachingConfig(
            window_weeks=self.COACHING_WINDOW_WEEKS,
            streak_milestones=self.get_streak_milestones(),
        )

    def validate_required(self) -> None:
        """
        Validate engine settings are coherent.

        Raises:
            ValueError: If settings contradict each other
        """
        errors = []

        if self.CHECKIN_MAX_DAILY_MINUTES <= 0:
            errors.append("CHECKIN_MAX_DAILY_MINUTES must be positive")

        if self.STREAK_SCOPE.lower() not in ("pod", "all"):
            errors.append("STREAK_SCOPE must be 'pod' or 'all'")

        if not (MIN_POD_SIZE <= self.POD_DEFAULT_CAPACITY <= MAX_POD_SIZE):
            errors.append(f"POD_DEFAULT_CAPACITY must be between {MIN_POD_SIZE} and {MAX_POD_SIZE}")

        if self.COACHING_WINDOW_WEEKS < 1:
            errors.append("COACHING_WINDOW_WEEKS must be at least 1")

        if errors:
            raise ValueError("Configuration errors:\n- " + "\n- ".join(errors))


# Global settings instance
settings = Settings()
