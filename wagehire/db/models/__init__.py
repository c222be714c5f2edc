"""
Database models module.

Imports every model so each is registered with Base.metadata before table
creation.
"""
from wagehire.db.models.user import User
from wagehire.db.models.interview import Interview
from wagehire.db.models.feedback import InterviewFeedback

__all__ = [
    "User",
    "Interview",
    "InterviewFeedback",
]
