"""
Study Pods API Routers.
"""

from studypods.routers.checkin import router as checkin_router
from studypods.routers.pods import router as pods_router
from studypods.routers.progress import router as progress_router

__all__ = [
    "checkin_router",
    "pods_router",
    "progress_router",
]
