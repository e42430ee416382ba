"""
Weekly Reviews

ISO-week summaries of pod and learner check-in activity.
"""

from studypods.reviews.services.review_aggregator import aggregate_week, aggregate_weeks

__all__ = ["aggregate_week", "aggregate_weeks"]
