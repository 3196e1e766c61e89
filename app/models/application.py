"""Job application and its audit trail."""

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.storage import Base
from app.models.employer import Employer, Job
from app.models.enums import ApplicationStatus, enum_values
from app.models.user import JobSeeker

MAX_APPLY_ATTEMPTS = 2

# No further status PATCHes or withdrawals from these within one attempt
TERMINAL_STATUSES = frozenset({ApplicationStatus.REJECTED, ApplicationStatus.WITHDRAWN})


def _utc_now() -> datetime:
    """Return current UTC time as timezone-naive datetime for DB storage."""
    return datetime.now(UTC).replace(tzinfo=None)


def _status_column(**kwargs):
    return Enum(
        ApplicationStatus,
        values_callable=enum_values,
        native_enum=False,
        length=20,
        **kwargs,
    )


class Application(Base):
    """One job seeker's relationship to one job.

    At most one row exists per (job, job seeker); reapplying after a withdrawal
    mutates this row instead of inserting a second one.
    """

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("job_id", "job_seeker_id", name="uq_applications_job_seeker"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_id: Mapped[int] = mapped_column(
        ForeignKey("jobs.id"), nullable=False, index=True
    )
    job_seeker_id: Mapped[int] = mapped_column(
        ForeignKey("job_seekers.id"), nullable=False, index=True
    )
    employer_id: Mapped[int] = mapped_column(
        ForeignKey("employers.id"), nullable=False, index=True
    )

    status: Mapped[ApplicationStatus] = mapped_column(
        _status_column(),
        default=ApplicationStatus.APPLIED,
        nullable=False,
        index=True,
    )
    applied_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False, index=True
    )
    updated_at_manual: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    apply_attempts: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # Attachments and snapshots
    resume: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    cover_letter: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    answers: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    is_viewed_by_employer: Mapped[bool] = mapped_column(Boolean, default=False)
    is_viewed_by_job_seeker: Mapped[bool] = mapped_column(Boolean, default=True)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False
    )

    history: Mapped[list["ApplicationHistory"]] = relationship(
        back_populates="application",
        order_by="ApplicationHistory.id",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    job: Mapped[Job] = relationship(lazy="raise")
    job_seeker: Mapped[JobSeeker] = relationship(lazy="raise")
    employer: Mapped[Employer] = relationship(lazy="raise")

    @property
    def can_reapply(self) -> bool:
        return (
            self.status == ApplicationStatus.WITHDRAWN
            and self.apply_attempts < MAX_APPLY_ATTEMPTS
        )

    @property
    def is_permanently_closed(self) -> bool:
        return (
            self.status == ApplicationStatus.WITHDRAWN
            and self.apply_attempts >= MAX_APPLY_ATTEMPTS
        )

    def record(
        self,
        status: ApplicationStatus,
        note: str | None,
        actor_id: int | None,
        at: datetime | None = None,
    ) -> "ApplicationHistory":
        """Append an entry to the audit trail."""
        entry = ApplicationHistory(
            status=status,
            note=note,
            actor_id=actor_id,
            at=at or _utc_now(),
        )
        self.history.append(entry)
        return entry

    def transition_to(
        self,
        status: ApplicationStatus,
        note: str | None,
        actor_id: int | None,
        at: datetime | None = None,
    ) -> "ApplicationHistory":
        """Move to ``status`` and log the transition."""
        at = at or _utc_now()
        self.status = status
        self.updated_at_manual = at
        return self.record(status, note, actor_id, at)

    def reapply(
        self,
        actor_id: int,
        answers: list[dict],
        resume: dict | None = None,
        cover_letter: dict | None = None,
        at: datetime | None = None,
    ) -> "ApplicationHistory":
        """Start the next attempt on a withdrawn application."""
        at = at or _utc_now()
        self.apply_attempts += 1
        self.applied_at = at
        self.answers = list(answers)
        if resume:
            self.resume = dict(resume)
        if cover_letter:
            self.cover_letter = {**(self.cover_letter or {}), **cover_letter}
        return self.transition_to(
            ApplicationStatus.APPLIED,
            f"Reapplied, attempt {self.apply_attempts} of {MAX_APPLY_ATTEMPTS}",
            actor_id,
            at,
        )


class ApplicationHistory(Base):
    """Append-only audit trail entry for an application."""

    __tablename__ = "application_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_id: Mapped[int] = mapped_column(
        ForeignKey("applications.id"), nullable=False, index=True
    )
    status: Mapped[ApplicationStatus] = mapped_column(_status_column(), nullable=False)
    note: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    actor_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now, nullable=False)

    application: Mapped[Application] = relationship(back_populates="history")
