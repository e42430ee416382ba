"""
Learner profile lookup.

Profiles belong to the account system; this service only reads the fields
the accountability engine needs.
"""

import logging
from typing import Dict, Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.utils.exceptions import NotFoundException
from studypods.pods.models import LearnerProfile, MatchPreferences

logger = logging.getLogger(__name__)


class UserService:
    """Read-only access to learner profiles."""

    PROFILE_PROJECTION = {
        "jlptLevel": 1,
        "examDate": 1,
        "timezone": 1,
        "podPreferences": 1,
    }

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize UserService.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._users_collection = db["users"]

    async def get_profile(self, user_id: str) -> LearnerProfile:
        """
        Get a learner's profile.

        Raises:
            NotFoundException: User not found
        """
        doc = await self._users_collection.find_one(
            {"_id": ObjectId(user_id)},
            self.PROFILE_PROJECTION,
        )

        if not doc:
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

        return self.from_document(doc)

    @staticmethod
    def from_document(doc: Dict[str, Any]) -> LearnerProfile:
        exam_date = doc["examDate"]
        if hasattr(exam_date, "date"):
            exam_date = exam_date.date()

        prefs = doc.get("podPreferences") or {}

        return LearnerProfile(
            user_id=str(doc["_id"]),
            level=doc["jlptLevel"],
            exam_date=exam_date,
            timezone=doc.get("timezone") or "UTC",
            preferences=MatchPreferences(
                excluded_pod_ids=frozenset(str(p) for p in prefs.get("excludedPodIds", [])),
                max_members=prefs.get("maxMembers"),
            ),
        )
