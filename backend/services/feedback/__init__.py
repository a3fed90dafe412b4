"""
Feedback service - what riders say about each other after a ride.

This module handles:
    - Ratings between participants of an offering
    - Reports queued for moderation
"""

from .ratings import submit_rating, rating_summary
from .reports import submit_report

__all__ = [
    "submit_rating",
    "rating_summary",
    "submit_report",
]
