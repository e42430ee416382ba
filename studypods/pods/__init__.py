"""
Pods

Matching learners to pods and managing pod rosters.
"""

from studypods.pods.services.pod_matcher import dissolution_reason, match_pods
from studypods.pods.services.pod_service import PodService

__all__ = [
    "PodService",
    "dissolution_reason",
    "match_pods",
]
