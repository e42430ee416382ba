#!/usr/bin/env python3
"""
Pod Maintenance Job

Dissolves pods that are empty or whose exam window has passed. Intended to
run daily from cron or a scheduler.

Usage:
    python -m jobs.pod_maintenance

Environment Variables:
    MONGODB_URI: Database connection string
    MONGODB_DATABASE: Database name
"""

import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from common.database import MongoDB
from studypods.config import settings
from studypods.pipelines.pods import dissolve_stale_pods_pipeline
from studypods.pods.services.pod_service import PodService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


class PodMaintenanceJob:
    """
    Dissolves stale pods.
    """

    def __init__(self, pod_service: PodService):
        self._pod_service = pod_service

    async def run(self) -> Dict[str, Any]:
        start = datetime.now(timezone.utc)
        logger.info("Starting pod maintenance job")

        result = await dissolve_stale_pods_pipeline(self._pod_service, today=start.date())

        end = datetime.now(timezone.utc)
        logger.info(f"Pod maintenance finished: {result['count']} pods dissolved")

        return {
            "startTime": start.isoformat(),
            "endTime": end.isoformat(),
            "durationSeconds": (end - start).total_seconds(),
            "podsDissolved": result["count"],
            "podIds": result["dissolved"],
        }


async def main():
    """Main entry point for the pod maintenance job."""
    db = MongoDB()
    await db.connect(uri=settings.MONGODB_URI, database_name=settings.MONGODB_DATABASE)

    try:
        job = PodMaintenanceJob(PodService(db.db))
        results = await job.run()

        print("\n=== Pod Maintenance Job Results ===")
        print(f"Start Time: {results['startTime']}")
        print(f"Duration: {results['durationSeconds']:.2f} seconds")
        print(f"Pods Dissolved: {results['podsDissolved']}")
        for pod_id in results["podIds"]:
            print(f"  - {pod_id}")

    except Exception as e:
        logger.error(f"Pod maintenance failed: {e}")
        sys.exit(1)

    finally:
        await db.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
