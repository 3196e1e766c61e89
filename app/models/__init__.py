"""Database models."""

from app.models.application import (
    MAX_APPLY_ATTEMPTS,
    Application,
    ApplicationHistory,
)
from app.models.employer import Employer, Job
from app.models.enums import (
    ApplicationStatus,
    JobStatus,
    NotificationType,
    UserRole,
)
from app.models.notification import Notification
from app.models.user import JobSeeker, User

__all__ = [
    "MAX_APPLY_ATTEMPTS",
    "Application",
    "ApplicationHistory",
    "ApplicationStatus",
    "Employer",
    "Job",
    "JobSeeker",
    "JobStatus",
    "Notification",
    "NotificationType",
    "User",
    "UserRole",
]
