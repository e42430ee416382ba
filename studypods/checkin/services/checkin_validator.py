"""
Check-in validation.

Decides whether a proposed check-in is acceptable for a user, pod and
calendar day. Pure: no I/O, persistence is the caller's responsibility.
"""

import logging
from datetime import date, datetime, timezone
from typing import Iterable, Optional

import pytz

from studypods.checkin.models import (
    CheckIn,
    Mood,
    ProofType,
    ProposedCheckIn,
    RejectReason,
    ValidationDecision,
)
from studypods.pods.models import Pod

logger = logging.getLogger(__name__)

DEFAULT_MAX_DAILY_MINUTES = 720

PROOF_TYPES = {p.value for p in ProofType}
MOODS = {m.value for m in Mood}


def local_calendar_date(instant: datetime, timezone_name: Optional[str]) -> date:
    """
    Calendar date of ``instant`` in the user's timezone.

    Naive datetimes are treated as UTC. Unknown zone names fall back to UTC.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)

    try:
        tz = pytz.timezone(timezone_name or "UTC")
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone {timezone_name!r}, using UTC")
        tz = pytz.utc

    return instant.astimezone(tz).date()


def validate_checkin(
    proposal: ProposedCheckIn,
    pod: Pod,
    existing_checkins: Iterable[CheckIn],
    max_daily_minutes: int = DEFAULT_MAX_DAILY_MINUTES,
) -> ValidationDecision:
    """
    Validate a proposed check-in.

    Args:
        proposal: Submitted check-in
        pod: Roster snapshot of the target pod
        existing_checkins: The user's accepted check-ins for this pod
        max_daily_minutes: Upper bound for reported study minutes

    Returns:
        ValidationDecision, ACCEPT or REJECT with the first failing reason

    Rules, in order:
        missing-field, duplicate-day, not-a-member, invalid-proof,
        invalid-mood, minutes-out-of-range
    """
    for field_name in ("user_id", "pod_id", "local_date"):
        if getattr(proposal, field_name) in (None, ""):
            return ValidationDecision.reject(
                RejectReason.MISSING_FIELD,
                f"Missing required field: {field_name}",
            )

    if not isinstance(proposal.local_date, date):
        return ValidationDecision.reject(
            RejectReason.MISSING_FIELD,
            "Field 'local_date' must be a calendar date",
        )

    if proposal.pod_id != pod.id:
        return ValidationDecision.reject(
            RejectReason.NOT_A_MEMBER,
            "Check-in does not belong to this pod",
        )

    for checkin in existing_checkins:
        if (
            checkin.user_id == proposal.user_id
            and checkin.pod_id == proposal.pod_id
            and checkin.local_date == proposal.local_date
        ):
            return ValidationDecision.reject(
                RejectReason.DUPLICATE_DAY,
                f"Already checked in on {proposal.local_date.isoformat()}",
            )

    if not pod.is_member(proposal.user_id):
        return ValidationDecision.reject(
            RejectReason.NOT_A_MEMBER,
            "User is not a member of this pod",
        )

    if _enum_value(proposal.proof_type) not in PROOF_TYPES:
        return ValidationDecision.reject(
            RejectReason.INVALID_PROOF,
            f"Proof type must be one of: {', '.join(sorted(PROOF_TYPES))}",
        )

    if not isinstance(proposal.proof_content, str) or not proposal.proof_content.strip():
        return ValidationDecision.reject(
            RejectReason.INVALID_PROOF,
            "Proof content is required",
        )

    if _enum_value(proposal.mood) not in MOODS:
        return ValidationDecision.reject(
            RejectReason.INVALID_MOOD,
            f"Mood must be one of: {', '.join(sorted(MOODS))}",
        )

    minutes = proposal.minutes
    # bool is an int subclass
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        return ValidationDecision.reject(
            RejectReason.MINUTES_OUT_OF_RANGE,
            "Study minutes must be a whole number",
        )

    if minutes <= 0 or minutes > max_daily_minutes:
        return ValidationDecision.reject(
            RejectReason.MINUTES_OUT_OF_RANGE,
            f"Study minutes must be between 1 and {max_daily_minutes}",
        )

    logger.debug(f"Check-in accepted for user {proposal.user_id} in pod {pod.id}")
    return ValidationDecision.accept()


def build_checkin(
    proposal: ProposedCheckIn,
    created_at: datetime,
    checkin_id: Optional[str] = None,
) -> CheckIn:
    """Materialize an accepted proposal as an immutable CheckIn."""
    return CheckIn(
        id=checkin_id,
        pod_id=proposal.pod_id,
        user_id=proposal.user_id,
        local_date=proposal.local_date,
        minutes=proposal.minutes,
        proof_type=ProofType(_enum_value(proposal.proof_type)),
        proof_content=proposal.proof_content.strip(),
        mood=Mood(_enum_value(proposal.mood)),
        created_at=created_at,
    )


def _enum_value(value):
    """Accept either an enum member or its raw string value."""
    return value.value if isinstance(value, (ProofType, Mood)) else value
