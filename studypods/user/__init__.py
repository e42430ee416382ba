"""
User

Read-only learner profiles.
"""

from studypods.user.services.user_service import UserService

__all__ = ["UserService"]
