"""
Streak calculation.

Derives current streak, longest streak and grace state from a learner's
accepted check-ins. Pure and idempotent: the same history and ``today``
always produce the same StreakState.
"""

import logging
from datetime import date, timedelta
from typing import Iterable, List, Set, Tuple, Union

from studypods.checkin.models import CheckIn
from studypods.streaks.models import StreakConfig, StreakState, StreakStatus

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def calculate_streak(
    checkins: Iterable[Union[CheckIn, date]],
    today: date,
    config: StreakConfig = StreakConfig(),
) -> StreakState:
    """
    Calculate streak state as of ``today``.

    Args:
        checkins: Accepted check-ins (or bare dates) for one pod or all pods
        today: The learner's current local date
        config: Grace allowance settings

    Returns:
        StreakState

    Algorithm:
        1. Collapse history to distinct check-in days up to ``today``
        2. Replay days from the first check-in to the anchor (today if
           checked in, otherwise yesterday, since today is not over yet)
        3. A single missed day is forgiven while the rolling grace window
           has allowance left; a second miss in the window, or two missed
           days in a row, resets the streak to zero
        4. Longest streak is the longest strict run, never below current
    """
    days = _checkin_days(checkins, today)

    if not days:
        return StreakState()

    current, run_graces = _replay_current_run(days, today, config)
    longest = max(_longest_strict_run(days), current)

    if current == 0:
        status = StreakStatus.BROKEN
    elif today not in days:
        status = StreakStatus.AT_RISK
    else:
        status = StreakStatus.ACTIVE

    return StreakState(
        current_streak=current,
        longest_streak=longest,
        last_checkin_date=max(days),
        grace_consumed=bool(run_graces),
        grace_dates=tuple(run_graces),
        status=status,
    )


def _checkin_days(checkins: Iterable[Union[CheckIn, date]], today: date) -> Set[date]:
    days = set()
    for item in checkins:
        day = item.local_date if isinstance(item, CheckIn) else item
        if day <= today:
            days.add(day)
    return days


def _replay_current_run(
    days: Set[date],
    today: date,
    config: StreakConfig,
) -> Tuple[int, List[date]]:
    """Replay history forward; return current run length and its grace days."""
    anchor = today if today in days else today - ONE_DAY

    streak = 0
    all_graces: List[date] = []
    run_graces: List[date] = []
    previous_missed = False

    cursor = min(days)
    while cursor <= anchor:
        if cursor in days:
            streak += 1
            previous_missed = False
        elif streak > 0 and not previous_missed and _grace_available(cursor, all_graces, config):
            all_graces.append(cursor)
            run_graces.append(cursor)
            previous_missed = True
        else:
            if streak:
                logger.debug(f"Streak of {streak} broken on {cursor.isoformat()}")
            streak = 0
            run_graces = []
            previous_missed = True
        cursor += ONE_DAY

    return streak, run_graces


def _grace_available(day: date, used: List[date], config: StreakConfig) -> bool:
    if config.grace_allowance <= 0:
        return False
    in_window = sum(1 for g in used if (day - g).days < config.grace_window_days)
    return in_window < config.grace_allowance


def _longest_strict_run(days: Set[date]) -> int:
    longest = 0
    for day in days:
        # Only start counting at the first day of a run
        if day - ONE_DAY in days:
            continue
        length = 1
        while day + timedelta(days=length) in days:
            length += 1
        longest = max(longest, length)
    return longest
