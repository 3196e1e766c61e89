"""Enumerations shared by models and schemas."""

from enum import Enum


class UserRole(str, Enum):
    JOBSEEKER = "jobseeker"
    EMPLOYER = "employer"
    ADMIN = "admin"


class JobStatus(str, Enum):
    ACTIVE = "Active"
    PENDING = "Pending"
    FLAGGED = "Flagged"
    ARCHIVED = "Archived"
    CLOSED = "Closed"


class ApplicationStatus(str, Enum):
    APPLIED = "Applied"
    UNDER_REVIEW = "Under Review"
    INTERVIEW = "Interview"
    OFFERED = "Offered"
    REJECTED = "Rejected"
    WITHDRAWN = "Withdrawn"


class NotificationType(str, Enum):
    APPLICATION_STATUS = "application_status"
    SYSTEM = "system"


def enum_values(enum_cls: type[Enum]) -> list[str]:
    """Persist enum values rather than member names."""
    return [member.value for member in enum_cls]
