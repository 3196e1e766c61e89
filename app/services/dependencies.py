"""FastAPI dependencies for lifecycle services."""

from fastapi import Depends
from sqlalchemy.orm import sessionmaker

from app.core.storage import get_session_factory
from app.services.application_service import (
    ApplicationLifecycleService,
    create_application_service,
)
from app.services.dispatcher import SideEffectDispatcher, side_effects
from app.services.email_service import EmailNotifier
from app.services.file_storage import FileStorageClient
from app.services.notification_service import NotificationService
from app.services.stats_service import EmployerStatsService


def get_dispatcher() -> SideEffectDispatcher:
    """Dependency for the process-wide side-effect dispatcher."""
    return side_effects


def get_email_notifier() -> EmailNotifier:
    return EmailNotifier()


def get_file_storage() -> FileStorageClient:
    return FileStorageClient()


def get_stats_service(
    session_factory: sessionmaker = Depends(get_session_factory),
) -> EmployerStatsService:
    return EmployerStatsService(session_factory)


def get_notification_service(
    session_factory: sessionmaker = Depends(get_session_factory),
) -> NotificationService:
    return NotificationService(session_factory)


def get_application_service(
    stats: EmployerStatsService = Depends(get_stats_service),
    notifications: NotificationService = Depends(get_notification_service),
    emails: EmailNotifier = Depends(get_email_notifier),
    storage: FileStorageClient = Depends(get_file_storage),
    dispatcher: SideEffectDispatcher = Depends(get_dispatcher),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> ApplicationLifecycleService:
    """Create the lifecycle service with its collaborators."""
    return create_application_service(
        stats, notifications, emails, storage, dispatcher, session_factory
    )
