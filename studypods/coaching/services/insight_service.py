"""
Coaching insight log.

Keeps a record of the nudges that were actually sent so repeated nudges of
the same kind can be suppressed. Suppressed insights are not logged; only a
delivered nudge opens a new duplicate window. The log is advisory, never a
source of truth.
"""

import logging
from datetime import datetime
from typing import List, Dict, Any, Iterable

from motor.motor_asyncio import AsyncIOMotorDatabase

from studypods.coaching.models import CoachingInsight, InsightKind
from studypods.reviews.models import Target, TargetKind

logger = logging.getLogger(__name__)


class InsightService:
    """
    Stores and retrieves delivered coaching insights.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize InsightService.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._insights_collection = db["coachingInsights"]

    async def record_insights(self, insights: Iterable[CoachingInsight]) -> int:
        """
        Record insights that were delivered as notifications.

        Args:
            insights: Insights whose notify decision was positive

        Returns:
            Number of records written
        """
        docs = [
            {
                "kind": insight.kind.value,
                "targetKind": insight.target.kind.value,
                "targetId": insight.target.id,
                "message": insight.message,
                "evidence": insight.evidence,
                "notify": True,
                "createdAt": insight.generated_at,
            }
            for insight in insights
        ]

        if not docs:
            return 0

        await self._insights_collection.insert_many(docs)
        logger.info(f"Recorded {len(docs)} coaching insights")
        return len(docs)

    async def get_recent_insights(
        self,
        target: Target,
        since: datetime,
    ) -> List[CoachingInsight]:
        """Notified insights for a target since ``since``."""
        cursor = self._insights_collection.find({
            "targetKind": target.kind.value,
            "targetId": target.id,
            "notify": True,
            "createdAt": {"$gte": since},
        })
        cursor = cursor.sort("createdAt", -1)

        docs = await cursor.to_list(length=100)
        return [self.from_document(doc) for doc in docs]

    @staticmethod
    def from_document(doc: Dict[str, Any]) -> CoachingInsight:
        return CoachingInsight(
            kind=InsightKind(doc["kind"]),
            target=Target(TargetKind(doc["targetKind"]), doc["targetId"]),
            message=doc.get("message", ""),
            generated_at=doc["createdAt"],
            evidence=doc.get("evidence", {}),
        )
