"""Application lifecycle: submission, reapplication, withdrawal and status changes.

Each operation runs its primary read-modify-write in one session and commits
before any side effect starts. Counter updates are awaited but never fail the
operation; notifications and emails go through the side-effect dispatcher.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload, sessionmaker

from app.core.config import settings
from app.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
)
from app.core.security import CurrentUser
from app.core.storage import async_session
from app.models.application import (
    MAX_APPLY_ATTEMPTS,
    TERMINAL_STATUSES,
    Application,
)
from app.models.employer import Employer, Job
from app.models.enums import ApplicationStatus
from app.models.user import JobSeeker
from app.services.dispatcher import SideEffectDispatcher, side_effects
from app.services.email_service import EmailNotifier
from app.services.file_storage import DocumentUpload, FileStorageClient
from app.services.idempotency import EventKind, IdempotencyKey
from app.services.notification_service import NotificationService
from app.services.stats_service import EmployerStatsService
from app.utils.filters import ApplicationFilter, Page
from app.utils.validators import validate_cover_letter, validate_document_upload

logger = logging.getLogger(__name__)

FINAL_ATTEMPT_WARNING = (
    "This is your final application attempt for this job. "
    "Withdrawing again will permanently close this job for you."
)

# Status changes that also email the candidate
EMAIL_STATUSES = frozenset({ApplicationStatus.INTERVIEW, ApplicationStatus.OFFERED})


def _now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def hire_delta(old_status: ApplicationStatus, new_status: ApplicationStatus) -> int:
    """Change to the employer hire counter implied by a status transition."""
    if new_status == ApplicationStatus.OFFERED and old_status != ApplicationStatus.OFFERED:
        return 1
    if old_status == ApplicationStatus.OFFERED and new_status != ApplicationStatus.OFFERED:
        return -1
    return 0


@dataclass
class Submission:
    """What the candidate sends with an application."""

    cover_letter_text: str | None = None
    answers: list[dict] = field(default_factory=list)
    resume_file: DocumentUpload | None = None
    cover_letter_file: DocumentUpload | None = None


@dataclass
class SubmissionResult:
    application: Application
    attempt: int
    warning: str | None = None


@dataclass
class _Recipient:
    user_id: int
    name: str
    email: str | None


class ApplicationLifecycleService:
    """Owns the state machine of one job seeker's application to one job."""

    def __init__(
        self,
        stats: EmployerStatsService,
        notifications: NotificationService,
        emails: EmailNotifier,
        storage: FileStorageClient,
        dispatcher: SideEffectDispatcher = side_effects,
        session_factory: sessionmaker = async_session,
    ):
        self.stats = stats
        self.notifications = notifications
        self.emails = emails
        self.storage = storage
        self.dispatcher = dispatcher
        self.session_factory = session_factory

    async def submit(
        self, job_id: int, user: CurrentUser, submission: Submission
    ) -> SubmissionResult:
        """Apply to a job, or reapply once after a withdrawal."""
        self._validate_submission(submission)

        async with self.session_factory() as session:
            job = await session.get(Job, job_id)
            if job is None or not job.is_open():
                raise NotFoundError("Job not open for applications")

            seeker = await self._seeker_profile(session, user.id)
            if seeker is None:
                raise ForbiddenError("Job seeker profile not found")

            employer = await session.get(Employer, job.employer_id)
            if employer is None:
                raise ForbiddenError("Employer not found for job")

            existing = await self._find_existing(session, job.id, seeker.id)
            if existing is not None:
                self._ensure_can_reapply(existing)

            resume, cover_letter = await self._store_attachments(seeker.id, submission)
            now = _now()

            if existing is None:
                application = Application(
                    job_id=job.id,
                    job_seeker_id=seeker.id,
                    employer_id=employer.id,
                    job=job,
                    job_seeker=seeker,
                    employer=employer,
                    status=ApplicationStatus.APPLIED,
                    applied_at=now,
                    apply_attempts=1,
                    resume=resume,
                    cover_letter=cover_letter,
                    answers=submission.answers,
                )
                application.record(
                    ApplicationStatus.APPLIED, "Application submitted", user.id, now
                )
                session.add(application)
            else:
                application = existing
                application.reapply(
                    actor_id=user.id,
                    answers=submission.answers,
                    resume=resume,
                    cover_letter=cover_letter,
                    at=now,
                )

            pair = (job.id, seeker.id)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.info(f"Duplicate application race on job {pair[0]}, seeker {pair[1]}")
                orphaned = [
                    doc["public_id"]
                    for doc in (resume, cover_letter)
                    if doc and doc.get("public_id")
                ]
                if orphaned:
                    logger.warning(f"Orphaned uploads after duplicate application: {orphaned}")
                raise ConflictError("You have already applied to this job")

        attempt = application.apply_attempts
        warning = FINAL_ATTEMPT_WARNING if attempt >= MAX_APPLY_ATTEMPTS else None
        logger.info(
            f"Application {application.id} submitted to job {job.id} "
            f"(attempt {attempt} of {MAX_APPLY_ATTEMPTS})"
        )

        await self.stats.increment_job_applications(job.id)
        await self.stats.increment_applications(employer.id)

        seeker_recipient = _Recipient(seeker.user_id, seeker.user.full_name, seeker.user.email)
        self.dispatcher.submit(
            "application-submitted-notification",
            self.notifications.notify_application_submitted,
            user_id=seeker_recipient.user_id,
            application_id=application.id,
            job_title=job.title,
            company_name=employer.organization_name,
            attempt=attempt,
            warning=warning,
            dedupe_key=IdempotencyKey(
                EventKind.APPLICATION_SUBMITTED, application.id, application.applied_at
            ),
        )
        if employer.notify_new_application and employer.contact_email:
            self.dispatcher.submit(
                "new-application-email",
                self.emails.send_new_application_to_employer,
                to=employer.contact_email,
                employer_name=employer.contact_name or employer.organization_name,
                job_title=job.title,
                candidate_name=seeker_recipient.name,
                candidate_email=seeker_recipient.email or "",
            )
        if seeker_recipient.email:
            self.dispatcher.submit(
                "application-confirmation-email",
                self.emails.send_application_submitted,
                to=seeker_recipient.email,
                candidate_name=seeker_recipient.name,
                job_title=job.title,
                company_name=employer.organization_name,
                warning=warning,
            )

        return SubmissionResult(application=application, attempt=attempt, warning=warning)

    async def withdraw(
        self, application_id: int, user: CurrentUser, note: str | None = None
    ) -> Application:
        """Withdraw the caller's own application."""
        async with self.session_factory() as session:
            application = await self._get_application(session, application_id)

            seeker = await self._seeker_profile(session, user.id)
            if seeker is None or application.job_seeker_id != seeker.id:
                raise ForbiddenError("Not authorized to withdraw this application")

            if application.status in TERMINAL_STATUSES:
                raise ConflictError(
                    f"Application is already {application.status.value.lower()}"
                )

            old_status = application.status
            application.transition_to(
                ApplicationStatus.WITHDRAWN,
                note or "Withdrawn by candidate",
                user.id,
            )
            await session.commit()

        if old_status == ApplicationStatus.OFFERED:
            await self.stats.increment_hires(application.employer_id, -1)

        if application.is_permanently_closed:
            logger.info(
                f"Application {application.id} withdrawn on final attempt, "
                f"job {application.job_id} is closed for this candidate"
            )
        else:
            logger.info(f"Application {application.id} withdrawn from {old_status.value}")
        return application

    async def update_status(
        self,
        application_id: int,
        status: ApplicationStatus,
        user: CurrentUser,
        note: str | None = None,
    ) -> Application:
        """Move an application to ``status`` on behalf of its employer or an admin."""
        if status == ApplicationStatus.WITHDRAWN:
            raise ValidationFailedError(
                "status", "Only the candidate can withdraw an application"
            )

        async with self.session_factory() as session:
            application = await self._get_application(session, application_id, details=True)
            await self._ensure_can_manage(session, application, user, "update")

            if application.status == ApplicationStatus.WITHDRAWN:
                raise ConflictError("Withdrawn applications cannot change status")

            old_status = application.status
            entry = application.transition_to(status, note, user.id)
            await session.commit()

        logger.info(
            f"Application {application.id} moved {old_status.value} -> {status.value} "
            f"by user {user.id}"
        )

        delta = hire_delta(old_status, status)
        if delta:
            await self.stats.increment_hires(application.employer_id, delta)

        candidate = self._candidate(application)
        job_title = application.job.title
        company_name = application.employer.organization_name
        self.dispatcher.submit(
            "application-status-notification",
            self.notifications.notify_application_status_change,
            user_id=candidate.user_id,
            application_id=application.id,
            status=status,
            old_status=old_status,
            job_title=job_title,
            company_name=company_name,
            dedupe_key=IdempotencyKey(
                EventKind.APPLICATION_STATUS, application.id, entry.at
            ),
        )
        if (
            status in EMAIL_STATUSES
            and candidate.email
            and application.employer.notify_application_update
        ):
            self._dispatch_status_email(candidate, job_title, company_name, status)

        return application

    async def set_rating(
        self, application_id: int, rating: int, user: CurrentUser
    ) -> Application:
        """Record the employer's 1-5 rating of the candidate."""
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationFailedError("rating", "Rating must be between 1 and 5")

        async with self.session_factory() as session:
            application = await self._get_application(session, application_id, details=True)
            await self._ensure_can_manage(session, application, user, "rate")
            application.rating = rating
            await session.commit()

        if (
            application.status in EMAIL_STATUSES
            and application.employer.notify_application_update
        ):
            candidate = self._candidate(application)
            if candidate.email:
                self._dispatch_status_email(
                    candidate,
                    application.job.title,
                    application.employer.organization_name,
                    application.status,
                )
        return application

    async def get_for_viewer(self, application_id: int, user: CurrentUser) -> Application:
        """Fetch one application for an admin, its candidate, or its employer.

        The owning employer's first view marks it as seen.
        """
        async with self.session_factory() as session:
            application = await self._get_application(session, application_id, details=True)
            if user.is_admin:
                return application

            seeker = await self._seeker_profile(session, user.id)
            owns_as_seeker = seeker is not None and application.job_seeker_id == seeker.id
            employer = await self._employer_profile(session, user.id)
            owns_as_employer = employer is not None and self._owned_by(application, employer)

            if not owns_as_seeker and not owns_as_employer:
                raise ForbiddenError("Not authorized to view this application")

            if owns_as_employer and not application.is_viewed_by_employer:
                application.is_viewed_by_employer = True
                await session.commit()
        return application

    async def list_for_seeker(
        self, user: CurrentUser, filters: ApplicationFilter, page: Page
    ) -> tuple[list[Application], int]:
        async with self.session_factory() as session:
            seeker = await self._seeker_profile(session, user.id)
            if seeker is None:
                raise ForbiddenError("Job seeker profile not found")
            filters.job_seeker_id = seeker.id
            return await self._list(session, filters, page)

    async def list_for_employer(
        self, user: CurrentUser, filters: ApplicationFilter, page: Page
    ) -> tuple[list[Application], int]:
        async with self.session_factory() as session:
            employer = await self._employer_profile(session, user.id)
            if employer is None:
                raise ForbiddenError("Employer profile not found")
            filters.employer_id = employer.id
            return await self._list(session, filters, page)

    async def list_for_job(self, job_id: int, user: CurrentUser) -> list[Application]:
        async with self.session_factory() as session:
            employer = await self._employer_profile(session, user.id)
            if employer is None:
                raise ForbiddenError("Employer profile not found")

            job = await session.get(Job, job_id)
            if job is None or job.employer_id != employer.id:
                raise ForbiddenError("Not authorized to view applications for this job")

            result = await session.execute(
                select(Application)
                .options(*self._detail_options())
                .where(Application.job_id == job_id)
                .order_by(Application.applied_at.desc())
            )
            return list(result.scalars().all())

    def _validate_submission(self, submission: Submission) -> None:
        result = validate_cover_letter(submission.cover_letter_text)
        if not result.is_valid:
            raise ValidationFailedError("cover_letter", result.error)

        for field_name, document in (
            ("resume", submission.resume_file),
            ("cover_letter_file", submission.cover_letter_file),
        ):
            if document is None:
                continue
            result = validate_document_upload(
                document.filename,
                document.content_type,
                document.size,
                settings.upload_max_bytes,
            )
            if not result.is_valid:
                raise ValidationFailedError(field_name, result.error)

    @staticmethod
    def _ensure_can_reapply(existing: Application) -> None:
        if existing.status != ApplicationStatus.WITHDRAWN:
            raise ConflictError("You have already applied to this job")
        if existing.apply_attempts >= MAX_APPLY_ATTEMPTS:
            raise ConflictError(
                "Maximum application attempts reached. "
                "You can no longer apply to this job"
            )

    async def _store_attachments(
        self, job_seeker_id: int, submission: Submission
    ) -> tuple[dict | None, dict | None]:
        folder = f"{settings.storage_folder}/{job_seeker_id}"
        resume = None
        cover_letter = (
            {"text": submission.cover_letter_text.strip()}
            if submission.cover_letter_text and submission.cover_letter_text.strip()
            else None
        )

        if submission.resume_file is not None:
            stored = await self.storage.upload(submission.resume_file, folder, "raw")
            resume = {
                "url": stored.url,
                "filename": submission.resume_file.filename,
                "uploaded_at": _now().isoformat(),
                "public_id": stored.public_id,
                "bytes": stored.bytes,
            }

        if submission.cover_letter_file is not None:
            stored = await self.storage.upload(submission.cover_letter_file, folder, "raw")
            cover_letter = {
                **(cover_letter or {}),
                "file_url": stored.url,
                "filename": submission.cover_letter_file.filename,
                "public_id": stored.public_id,
                "bytes": stored.bytes,
            }

        return resume, cover_letter

    def _dispatch_status_email(
        self,
        candidate: _Recipient,
        job_title: str,
        company_name: str,
        status: ApplicationStatus,
    ) -> None:
        self.dispatcher.submit(
            "application-status-email",
            self.emails.send_status_update,
            to=candidate.email,
            candidate_name=candidate.name,
            job_title=job_title or "Your Application",
            company_name=company_name or "Employer",
            status=status,
        )

    async def _ensure_can_manage(
        self, session, application: Application, user: CurrentUser, action: str
    ) -> None:
        if user.is_admin:
            return
        employer = await self._employer_profile(session, user.id)
        if employer is None or not self._owned_by(application, employer):
            raise ForbiddenError(f"Not authorized to {action} this application")

    @staticmethod
    def _owned_by(application: Application, employer: Employer) -> bool:
        if application.employer_id == employer.id:
            return True
        job = application.job
        return job is not None and job.employer_id == employer.id

    @staticmethod
    def _candidate(application: Application) -> _Recipient:
        user = application.job_seeker.user
        return _Recipient(user.id, user.full_name, user.email)

    @staticmethod
    def _detail_options() -> list:
        return [
            selectinload(Application.job),
            selectinload(Application.employer),
            selectinload(Application.job_seeker).selectinload(JobSeeker.user),
        ]

    async def _get_application(
        self, session, application_id: int, details: bool = False
    ) -> Application:
        query = select(Application).where(Application.id == application_id)
        if details:
            query = query.options(*self._detail_options())
        result = await session.execute(query)
        application = result.scalar_one_or_none()
        if application is None:
            raise NotFoundError("Application not found")
        return application

    async def _list(
        self, session, filters: ApplicationFilter, page: Page
    ) -> tuple[list[Application], int]:
        conditions = filters.clauses()
        result = await session.execute(
            select(Application)
            .options(*self._detail_options())
            .where(*conditions)
            .order_by(Application.applied_at.desc())
            .offset(page.offset)
            .limit(page.limit)
        )
        items = list(result.scalars().all())
        total = (
            await session.execute(
                select(func.count()).select_from(Application).where(*conditions)
            )
        ).scalar_one()
        return items, total

    @staticmethod
    async def _find_existing(session, job_id: int, job_seeker_id: int) -> Application | None:
        result = await session.execute(
            select(Application)
            .options(selectinload(Application.job))
            .where(
                Application.job_id == job_id,
                Application.job_seeker_id == job_seeker_id,
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def _seeker_profile(session, user_id: int) -> JobSeeker | None:
        result = await session.execute(select(JobSeeker).where(JobSeeker.user_id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def _employer_profile(session, user_id: int) -> Employer | None:
        result = await session.execute(select(Employer).where(Employer.user_id == user_id))
        return result.scalars().first()


# Factory function for dependency injection
def create_application_service(
    stats: EmployerStatsService,
    notifications: NotificationService,
    emails: EmailNotifier,
    storage: FileStorageClient,
    dispatcher: SideEffectDispatcher = side_effects,
    session_factory: sessionmaker = async_session,
) -> ApplicationLifecycleService:
    """Factory function to create ApplicationLifecycleService with dependencies."""
    return ApplicationLifecycleService(
        stats, notifications, emails, storage, dispatcher, session_factory
    )
