"""
Check-in storage service.

Narrow read/write contract over the ``checkIns`` collection. The unique
index on (userId, podId, date) backs the one-check-in-per-day rule when
two submissions race past validation.
"""

import logging
from datetime import date
from typing import Optional, List, Dict, Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import DuplicateKeyError

from common.utils.exceptions import ConflictException
from studypods.checkin.models import CheckIn, RejectReason

logger = logging.getLogger(__name__)


class CheckInService:
    """
    Handles check-in storage and retrieval.
    Pure CRUD - validation happens before anything reaches this service.
    """

    UNIQUE_INDEX_NAME = "one_checkin_per_day"

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize CheckInService.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._checkins_collection = db["checkIns"]

    async def ensure_indexes(self) -> None:
        """Create the uniqueness constraint and lookup indexes."""
        await self._checkins_collection.create_index(
            [("userId", ASCENDING), ("podId", ASCENDING), ("date", ASCENDING)],
            unique=True,
            name=self.UNIQUE_INDEX_NAME,
        )
        await self._checkins_collection.create_index(
            [("podId", ASCENDING), ("date", ASCENDING)]
        )

    async def insert_checkin(self, checkin: CheckIn) -> CheckIn:
        """
        Persist an accepted check-in.

        Args:
            checkin: Validated check-in without an id

        Returns:
            The stored check-in with its id set

        Raises:
            ConflictException: A check-in already exists for this user, pod and day
        """
        document = self.to_document(checkin)

        try:
            result = await self._checkins_collection.insert_one(document)
        except DuplicateKeyError:
            raise ConflictException(
                message=f"Already checked in on {checkin.local_date.isoformat()}",
                code=RejectReason.DUPLICATE_DAY.code,
            )

        logger.info(
            f"Check-in stored for user {checkin.user_id} in pod {checkin.pod_id} "
            f"on {checkin.local_date.isoformat()}"
        )
        return checkin.model_copy(update={"id": str(result.inserted_id)})

    async def get_user_checkins(
        self,
        user_id: str,
        pod_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[CheckIn]:
        """
        Get a user's check-ins, oldest first.

        Args:
            user_id: User ID
            pod_id: Restrict to one pod (all pods when omitted)
            start_date: Optional inclusive lower bound
            end_date: Optional inclusive upper bound
        """
        query: Dict[str, Any] = {"userId": ObjectId(user_id)}

        if pod_id:
            query["podId"] = ObjectId(pod_id)

        self._apply_date_range(query, start_date, end_date)
        return await self._find(query)

    async def get_pod_checkins(
        self,
        pod_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[CheckIn]:
        """Get all check-ins for a pod, oldest first."""
        query: Dict[str, Any] = {"podId": ObjectId(pod_id)}
        self._apply_date_range(query, start_date, end_date)
        return await self._find(query)

    async def _find(self, query: Dict[str, Any]) -> List[CheckIn]:
        cursor = self._checkins_collection.find(query)
        cursor = cursor.sort("date", 1)

        documents = await cursor.to_list(length=None)
        return [self.from_document(doc) for doc in documents]

    @staticmethod
    def _apply_date_range(
        query: Dict[str, Any],
        start_date: Optional[date],
        end_date: Optional[date],
    ) -> None:
        # Dates are stored as YYYY-MM-DD strings, which sort chronologically
        if start_date or end_date:
            query["date"] = {}
            if start_date:
                query["date"]["$gte"] = start_date.isoformat()
            if end_date:
                query["date"]["$lte"] = end_date.isoformat()

    @staticmethod
    def to_document(checkin: CheckIn) -> Dict[str, Any]:
        return {
            "userId": ObjectId(checkin.user_id),
            "podId": ObjectId(checkin.pod_id),
            "date": checkin.local_date.isoformat(),
            "minutes": checkin.minutes,
            "proof": {
                "type": checkin.proof_type.value,
                "content": checkin.proof_content,
            },
            "mood": checkin.mood.value,
            "createdAt": checkin.created_at,
        }

    @staticmethod
    def from_document(doc: Dict[str, Any]) -> CheckIn:
        proof = doc.get("proof", {})
        return CheckIn(
            id=str(doc["_id"]),
            user_id=str(doc["userId"]),
            pod_id=str(doc["podId"]),
            local_date=date.fromisoformat(doc["date"]),
            minutes=doc["minutes"],
            proof_type=proof["type"],
            proof_content=proof["content"],
            mood=doc["mood"],
            created_at=doc["createdAt"],
        )
