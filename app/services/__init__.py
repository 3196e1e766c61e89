"""Application services."""

from app.services.application_service import (
    ApplicationLifecycleService,
    Submission,
    SubmissionResult,
    create_application_service,
)
from app.services.dispatcher import SideEffectDispatcher, side_effects
from app.services.notification_service import NotificationService
from app.services.stats_service import EmployerStatsService

__all__ = [
    "ApplicationLifecycleService",
    "EmployerStatsService",
    "NotificationService",
    "SideEffectDispatcher",
    "Submission",
    "SubmissionResult",
    "create_application_service",
    "side_effects",
]
