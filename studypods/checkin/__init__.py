"""
Check-in System

Validates and stores daily proof-of-study check-ins, one per learner,
pod and local calendar day.
"""

from studypods.checkin.services.checkin_service import CheckInService
from studypods.checkin.services.checkin_validator import (
    build_checkin,
    local_calendar_date,
    validate_checkin,
)

__all__ = [
    "CheckInService",
    "build_checkin",
    "local_calendar_date",
    "validate_checkin",
]
