"""
Database models module.

This module imports all database models to ensure they are registered with SQLAlchemy's Base.metadata
before table creation.
"""
from app.db.models.user import User
from app.db.models.application import Application, ApplicationStatus
from app.db.models.interview_step import InterviewStep
from app.db.models.timeline_event import TimelineEvent

__all__ = [
    "User",
    "Application",
    "ApplicationStatus",
    "InterviewStep",
    "TimelineEvent",
]
