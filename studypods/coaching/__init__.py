"""
Coaching

Rule-based coaching insights and the decision whether to send a nudge.
"""

from studypods.coaching.services.insight_engine import (
    DEFAULT_RULES,
    generate_insights,
    median_member_minutes,
)
from studypods.coaching.services.insight_service import InsightService
from studypods.coaching.services.notification_policy import should_notify

__all__ = [
    "DEFAULT_RULES",
    "InsightService",
    "generate_insights",
    "median_member_minutes",
    "should_notify",
]
