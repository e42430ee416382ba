"""
Pod roster management service.

Handles pod creation, membership changes and dissolution. Joins use a
compare-and-set update so concurrent joins can never push a pod past its
capacity.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional, List, Dict, Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from common.utils.exceptions import ConflictException, NotFoundException, ValidationException
from studypods.pods.models import (
    MAX_POD_SIZE,
    MIN_POD_SIZE,
    DissolutionReason,
    JLPTLevel,
    Pod,
    PodDraft,
    PodStatus,
)
from studypods.pods.services.pod_matcher import dissolution_reason

logger = logging.getLogger(__name__)


class PodService:
    """
    Handles pod creation, membership and lifecycle.
    """

    MAX_OPEN_PODS = 500

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize PodService.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._pods_collection = db["pods"]

    async def get_pod(self, pod_id: str) -> Pod:
        """Get pod by ID."""
        doc = await self._pods_collection.find_one({"_id": ObjectId(pod_id)})
        if not doc:
            raise NotFoundException(message="Pod not found", code="POD_NOT_FOUND")
        return self.from_document(doc)

    async def find_open_pods(self, level: JLPTLevel) -> List[Pod]:
        """Roster snapshots of every open pod at a JLPT level."""
        cursor = self._pods_collection.find({
            "status": PodStatus.OPEN.value,
            "targetLevel": level.value,
        })
        cursor = cursor.sort("createdAt", 1)

        docs = await cursor.to_list(length=self.MAX_OPEN_PODS)
        return [self.from_document(doc) for doc in docs]

    async def create_pod(
        self,
        draft: PodDraft,
        founder_id: Optional[str] = None,
        founder_exam_date: Optional[date] = None,
    ) -> Pod:
        """
        Open a new pod from a draft.

        Args:
            draft: Level, exam window and capacity
            founder_id: Optional first member
            founder_exam_date: Founder's exam date

        Returns:
            Created Pod

        Raises:
            ValidationException: Capacity outside the pod size range
        """
        if not MIN_POD_SIZE <= draft.capacity <= MAX_POD_SIZE:
            raise ValidationException(
                message=f"Pod capacity must be between {MIN_POD_SIZE} and {MAX_POD_SIZE}",
                code="INVALID_POD_CAPACITY",
                details={"capacity": draft.capacity},
            )

        now = datetime.now(timezone.utc)

        pod_doc = {
            "targetLevel": draft.target_level.value,
            "examWindowStart": draft.exam_window_start.isoformat(),
            "examWindowEnd": draft.exam_window_end.isoformat(),
            "capacity": draft.capacity,
            "memberIds": [ObjectId(founder_id)] if founder_id else [],
            "memberExamDates": (
                {founder_id: founder_exam_date.isoformat()}
                if founder_id and founder_exam_date else {}
            ),
            "status": PodStatus.OPEN.value,
            "createdAt": now,
            "updatedAt": now,
        }

        result = await self._pods_collection.insert_one(pod_doc)
        pod_doc["_id"] = result.inserted_id

        logger.info(f"Pod created: {result.inserted_id} ({draft.target_level.value})")
        return self.from_document(pod_doc)

    async def add_member(
        self,
        pod_id: str,
        user_id: str,
        exam_date: Optional[date] = None,
    ) -> Pod:
        """
        Add a member if the pod is open and has a free seat.

        Raises:
            NotFoundException: Pod does not exist
            ConflictException: Already a member, pod dissolved, or pod full
        """
        update: Dict[str, Any] = {
            "$addToSet": {"memberIds": ObjectId(user_id)},
            "$set": {"updatedAt": datetime.now(timezone.utc)},
        }
        if exam_date:
            update["$set"][f"memberExamDates.{user_id}"] = exam_date.isoformat()

        doc = await self._pods_collection.find_one_and_update(
            {
                "_id": ObjectId(pod_id),
                "status": PodStatus.OPEN.value,
                "memberIds": {"$ne": ObjectId(user_id)},
                "$expr": {"$lt": [{"$size": "$memberIds"}, "$capacity"]},
            },
            update,
            return_document=ReturnDocument.AFTER,
        )

        if doc:
            logger.info(f"User {user_id} joined pod {pod_id}")
            return self.from_document(doc)

        pod = await self.get_pod(pod_id)

        if user_id in pod.member_ids:
            raise ConflictException(message="Already a member of this pod", code="ALREADY_MEMBER")
        if not pod.is_open:
            raise ConflictException(message="Pod has been dissolved", code="POD_DISSOLVED")
        raise ConflictException(message="Pod is full", code="POD_FULL")

    async def remove_member(self, pod_id: str, user_id: str, today: date) -> Pod:
        """
        Remove a member; dissolves the pod if nobody is left.

        Raises:
            NotFoundException: Pod does not exist or user is not a member
        """
        doc = await self._pods_collection.find_one_and_update(
            {"_id": ObjectId(pod_id), "memberIds": ObjectId(user_id)},
            {
                "$pull": {"memberIds": ObjectId(user_id)},
                "$unset": {f"memberExamDates.{user_id}": ""},
                "$set": {"updatedAt": datetime.now(timezone.utc)},
            },
            return_document=ReturnDocument.AFTER,
        )

        if not doc:
            raise NotFoundException(message="Not a member of this pod", code="NOT_A_MEMBER")

        logger.info(f"User {user_id} left pod {pod_id}")

        pod = self.from_document(doc)
        reason = dissolution_reason(pod, today)
        if reason:
            return await self.dissolve_pod(pod, reason)
        return pod

    async def dissolve_pod(self, pod: Pod, reason: DissolutionReason) -> Pod:
        """Mark a pod dissolved."""
        now = datetime.now(timezone.utc)

        await self._pods_collection.update_one(
            {"_id": ObjectId(pod.id), "status": PodStatus.OPEN.value},
            {"$set": {
                "status": PodStatus.DISSOLVED.value,
                "dissolvedReason": reason.value,
                "dissolvedAt": now,
                "updatedAt": now,
            }},
        )

        logger.info(f"Pod {pod.id} dissolved: {reason.value}")
        return pod.model_copy(update={"status": PodStatus.DISSOLVED})

    async def dissolve_stale_pods(self, today: date) -> List[str]:
        """
        Dissolve every open pod that is empty or past its exam window.

        Returns:
            IDs of dissolved pods
        """
        cursor = self._pods_collection.find({"status": PodStatus.OPEN.value})
        docs = await cursor.to_list(length=None)

        dissolved = []
        for doc in docs:
            pod = self.from_document(doc)
            reason = dissolution_reason(pod, today)
            if reason:
                await self.dissolve_pod(pod, reason)
                dissolved.append(pod.id)

        return dissolved

    @staticmethod
    def from_document(doc: Dict[str, Any]) -> Pod:
        return Pod(
            id=str(doc["_id"]),
            member_ids=frozenset(str(m) for m in doc.get("memberIds", [])),
            member_exam_dates=doc.get("memberExamDates", {}),
            target_level=doc["targetLevel"],
            exam_window_start=doc["examWindowStart"],
            exam_window_end=doc["examWindowEnd"],
            capacity=doc["capacity"],
            created_at=doc["createdAt"],
            status=doc.get("status", PodStatus.OPEN.value),
        )
