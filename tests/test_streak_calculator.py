"""Unit tests for streak calculation with a rolling grace window."""

from datetime import date, timedelta

from studypods.checkin.models import CheckIn
from studypods.streaks.models import StreakConfig, StreakState, StreakStatus
from studypods.streaks.services.streak_calculator import calculate_streak


def day(n: int) -> date:
    """Day ``n`` of October 2026."""
    return date(2026, 10, n)


def days(*numbers: int):
    return [day(n) for n in numbers]


# ─────────────────────────────────────────────────────────────────
# Basic runs
# ─────────────────────────────────────────────────────────────────


class TestStrictRuns:
    def test_no_history(self):
        state = calculate_streak([], today=day(7))

        assert state == StreakState()
        assert state.status is StreakStatus.NONE
        assert state.last_checkin_date is None

    def test_consecutive_days_including_today(self):
        state = calculate_streak(days(1, 2, 3, 4, 5), today=day(5))

        assert state.current_streak == 5
        assert state.longest_streak == 5
        assert state.status is StreakStatus.ACTIVE
        assert state.grace_consumed is False
        assert state.last_checkin_date == day(5)

    def test_today_not_yet_checked_in_is_at_risk(self):
        state = calculate_streak(days(1, 2, 3, 4, 5), today=day(6))

        assert state.current_streak == 5
        assert state.status is StreakStatus.AT_RISK
        assert state.grace_consumed is False

    def test_accepts_checkin_records(self, make_checkin, sample_user_id, sample_pod_id):
        history = [make_checkin(sample_user_id, sample_pod_id, d) for d in days(3, 4, 5)]

        state = calculate_streak(history, today=day(5))

        assert isinstance(history[0], CheckIn)
        assert state.current_streak == 3

    def test_duplicate_dates_count_once(self):
        state = calculate_streak(days(4, 4, 5, 5), today=day(5))
        assert state.current_streak == 2

    def test_future_checkins_are_ignored(self):
        state = calculate_streak(days(3, 4, 5, 9), today=day(5))

        assert state.current_streak == 3
        assert state.last_checkin_date == day(5)


# ─────────────────────────────────────────────────────────────────
# Grace
# ─────────────────────────────────────────────────────────────────


class TestGrace:
    def test_single_miss_is_forgiven(self):
        state = calculate_streak(days(1, 2, 3, 5, 6, 7), today=day(7))

        assert state.current_streak == 6
        assert state.grace_consumed is True
        assert state.grace_dates == (day(4),)
        assert state.status is StreakStatus.ACTIVE
        assert state.longest_streak == 6

    def test_second_miss_within_window_breaks_streak(self):
        state = calculate_streak(days(1, 2, 3, 5), today=day(7))

        assert state.current_streak == 0
        assert state.status is StreakStatus.BROKEN
        assert state.grace_consumed is False
        assert state.longest_streak == 3

    def test_two_consecutive_misses_reset(self):
        state = calculate_streak(days(1, 2, 3, 6), today=day(6))

        assert state.current_streak == 1
        assert state.grace_consumed is False
        assert state.grace_dates == ()

    def test_grace_is_available_again_after_window(self):
        state = calculate_streak(days(1, 2, 3, 5, 6, 7, 8, 9, 10, 12), today=day(12))

        assert state.current_streak == 10
        assert state.grace_dates == (day(4), day(11))

    def test_grace_inside_window_is_not_renewed(self):
        state = calculate_streak(days(1, 2, 3, 5, 6, 7, 8, 9, 11), today=day(11))

        # Day 10 falls six days after the grace used on day 4
        assert state.current_streak == 1
        assert state.grace_consumed is False

    def test_yesterday_missed_uses_grace(self):
        state = calculate_streak(days(1, 2, 3, 4, 5), today=day(7))

        assert state.current_streak == 5
        assert state.grace_dates == (day(6),)
        assert state.status is StreakStatus.AT_RISK

    def test_no_grace_when_allowance_is_zero(self):
        state = calculate_streak(
            days(1, 2, 3, 5, 6, 7), today=day(7), config=StreakConfig(grace_allowance=0)
        )

        assert state.current_streak == 3
        assert state.longest_streak == 3
        assert state.grace_consumed is False

    def test_larger_allowance(self):
        config = StreakConfig(grace_allowance=2, grace_window_days=7)
        state = calculate_streak(days(1, 2, 4, 6, 7), today=day(7), config=config)

        assert state.current_streak == 5
        assert state.grace_dates == (day(3), day(5))

    def test_miss_before_first_checkin_is_not_graced(self):
        state = calculate_streak(days(5), today=day(5))

        assert state.current_streak == 1
        assert state.grace_consumed is False


# ─────────────────────────────────────────────────────────────────
# Invariants
# ─────────────────────────────────────────────────────────────────


class TestInvariants:
    def test_idempotent(self):
        history = days(1, 2, 3, 5, 6, 7, 9, 10)

        first = calculate_streak(history, today=day(10))
        second = calculate_streak(list(reversed(history)), today=day(10))

        assert first == second

    def test_longest_never_below_current(self):
        start = day(1)
        for gap in range(1, 10):
            history = [start + timedelta(days=i) for i in range(20) if i % (gap + 2) != gap]
            state = calculate_streak(history, today=start + timedelta(days=19))
            assert state.longest_streak >= state.current_streak

    def test_longest_keeps_earlier_run(self):
        state = calculate_streak(days(1, 2, 3, 4, 5, 6, 7, 8, 12, 13), today=day(13))

        assert state.current_streak == 2
        assert state.longest_streak == 8

    def test_to_dict(self):
        payload = calculate_streak(days(1, 2, 3, 5), today=day(5)).to_dict()

        assert payload == {
            "currentStreak": 4,
            "longestStreak": 4,
            "lastCheckinDate": "2026-10-05",
            "graceConsumed": True,
            "graceDates": ["2026-10-04"],
            "status": "active",
        }
