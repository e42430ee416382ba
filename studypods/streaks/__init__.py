"""
Streaks

Current and longest study streaks with a rolling grace allowance.
"""

from studypods.streaks.services.streak_calculator import calculate_streak

__all__ = ["calculate_streak"]
