"""Notification emitter with create-if-absent deduplication."""

import logging
from datetime import UTC, datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from app.core.exceptions import NotFoundError
from app.core.storage import async_session
from app.models.enums import ApplicationStatus, NotificationType, UserRole
from app.models.notification import Notification
from app.services.idempotency import IdempotencyKey
from app.utils.filters import Page

logger = logging.getLogger(__name__)

APPLICATIONS_CTA_PATH = "/dashboard/jobseeker/applications"


def _now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class NotificationService:
    """Creates and reads user-scoped notifications."""

    def __init__(self, session_factory: sessionmaker = async_session):
        self.session_factory = session_factory

    async def create(
        self,
        user_id: int,
        role: UserRole,
        type: NotificationType,
        title: str,
        message: str,
        cta_path: str | None = None,
        cta_label: str | None = None,
        metadata: dict | None = None,
        dedupe_key: IdempotencyKey | None = None,
    ) -> Notification:
        """Create a notification, or return the existing one for the same key.

        Without a key every call creates a new record.
        """
        key = str(dedupe_key) if dedupe_key is not None else None

        async with self.session_factory() as session:
            if key is not None:
                existing = await self._find_by_key(session, user_id, key)
                if existing is not None:
                    logger.debug(f"Notification {key} already exists for user {user_id}")
                    return existing

            notification = Notification(
                user_id=user_id,
                role=role,
                type=type,
                title=title[:180],
                message=message[:1000],
                cta_path=cta_path,
                cta_label=cta_label,
                metadata_=metadata or {},
                dedupe_key=key,
            )
            session.add(notification)
            try:
                await session.commit()
            except IntegrityError:
                # A concurrent emitter inserted the same key first
                await session.rollback()
                if key is None:
                    raise
                existing = await self._find_by_key(session, user_id, key)
                if existing is None:
                    raise
                return existing

        return notification

    async def notify_application_submitted(
        self,
        user_id: int,
        application_id: int,
        job_title: str | None,
        company_name: str | None,
        attempt: int,
        warning: str | None,
        dedupe_key: IdempotencyKey,
    ) -> Notification:
        message = (
            f"Your application for {job_title or 'this role'} at "
            f"{company_name or 'the employer'} was submitted."
        )
        if warning:
            message = f"{message} {warning}"

        return await self.create(
            user_id=user_id,
            role=UserRole.JOBSEEKER,
            type=NotificationType.APPLICATION_STATUS,
            title=f"Application submitted: {job_title or 'Job'}",
            message=message,
            cta_path=APPLICATIONS_CTA_PATH,
            cta_label="View Application",
            metadata={
                "application_id": str(application_id),
                "status": ApplicationStatus.APPLIED.value,
                "attempt": attempt,
                "warning": warning,
                "job_title": job_title,
                "company_name": company_name,
            },
            dedupe_key=dedupe_key,
        )

    async def notify_application_status_change(
        self,
        user_id: int,
        application_id: int,
        status: ApplicationStatus,
        old_status: ApplicationStatus | None,
        job_title: str | None,
        company_name: str | None,
        dedupe_key: IdempotencyKey,
    ) -> Notification:
        from_text = f" from {old_status.value}" if old_status else ""
        return await self.create(
            user_id=user_id,
            role=UserRole.JOBSEEKER,
            type=NotificationType.APPLICATION_STATUS,
            title=f"Application status updated: {status.value}",
            message=(
                f"Your application{from_text} to {status.value} for "
                f"{job_title or 'this role'} at {company_name or 'the employer'}."
            ),
            cta_path=APPLICATIONS_CTA_PATH,
            cta_label="View Application",
            metadata={
                "application_id": str(application_id),
                "status": status.value,
                "old_status": old_status.value if old_status else None,
                "job_title": job_title,
                "company_name": company_name,
            },
            dedupe_key=dedupe_key,
        )

    async def list_for_user(
        self,
        user_id: int,
        page: Page,
        unread_only: bool = False,
        type: NotificationType | None = None,
    ) -> tuple[list[Notification], int, int]:
        """Return (items, total matching, unread count)."""
        conditions = [Notification.user_id == user_id]
        if unread_only:
            conditions.append(Notification.read_at.is_(None))
        if type is not None:
            conditions.append(Notification.type == type)

        async with self.session_factory() as session:
            result = await session.execute(
                select(Notification)
                .where(*conditions)
                .order_by(Notification.created_at.desc(), Notification.id.desc())
                .offset(page.offset)
                .limit(page.limit)
            )
            items = list(result.scalars().all())
            total = (
                await session.execute(
                    select(func.count()).select_from(Notification).where(*conditions)
                )
            ).scalar_one()
            unread = (
                await session.execute(
                    select(func.count())
                    .select_from(Notification)
                    .where(Notification.user_id == user_id, Notification.read_at.is_(None))
                )
            ).scalar_one()
        return items, total, unread

    async def mark_read(self, notification_id: int, user_id: int) -> Notification:
        async with self.session_factory() as session:
            result = await session.execute(
                select(Notification).where(
                    Notification.id == notification_id, Notification.user_id == user_id
                )
            )
            notification = result.scalar_one_or_none()
            if notification is None:
                raise NotFoundError("Notification not found")
            if notification.read_at is None:
                notification.read_at = _now()
                await session.commit()
        return notification

    async def mark_all_read(self, user_id: int) -> int:
        async with self.session_factory() as session:
            result = await session.execute(
                update(Notification)
                .where(Notification.user_id == user_id, Notification.read_at.is_(None))
                .values(read_at=_now())
            )
            await session.commit()
        return result.rowcount

    @staticmethod
    async def _find_by_key(session, user_id: int, key: str) -> Notification | None:
        result = await session.execute(
            select(Notification).where(
                Notification.user_id == user_id, Notification.dedupe_key == key
            )
        )
        return result.scalar_one_or_none()
