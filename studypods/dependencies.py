"""
FastAPI dependencies for Study Pods.

Services are created once at startup and handed to routers through
``Depends``.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from studypods.checkin.services.checkin_service import CheckInService
from studypods.coaching.services.insight_service import InsightService
from studypods.config import Settings, settings
from studypods.pods.services.pod_service import PodService
from studypods.user.services.user_service import UserService


_checkin_service: Optional[CheckInService] = None
_pod_service: Optional[PodService] = None
_user_service: Optional[UserService] = None
_insight_service: Optional[InsightService] = None


def init_all_services(db: AsyncIOMotorDatabase) -> None:
    """
    Initialize all services with database connection.

    Called once at application startup.

    Args:
        db: MongoDB database connection
    """
    global _checkin_service, _pod_service, _user_service, _insight_service

    _checkin_service = CheckInService(db=db)
    _pod_service = PodService(db=db)
    _user_service = UserService(db=db)
    _insight_service = InsightService(db=db)


def get_checkin_service() -> CheckInService:
    """Get check-in service instance."""
    if _checkin_service is None:
        raise RuntimeError("Services not initialized. Call init_all_services first.")
    return _checkin_service


def get_pod_service() -> PodService:
    """Get pod service instance."""
    if _pod_service is None:
        raise RuntimeError("Services not initialized. Call init_all_services first.")
    return _pod_service


def get_user_service() -> UserService:
    """Get user service instance."""
    if _user_service is None:
        raise RuntimeError("Services not initialized. Call init_all_services first.")
    return _user_service


def get_insight_service() -> InsightService:
    """Get insight service instance."""
    if _insight_service is None:
        raise RuntimeError("Services not initialized. Call init_all_services first.")
    return _insight_service


def get_settings() -> Settings:
    """Get application settings."""
    return settings
