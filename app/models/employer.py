"""Employer and job models."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.storage import Base
from app.models.enums import JobStatus, enum_values


def _utc_now() -> datetime:
    """Return current UTC time as timezone-naive datetime for DB storage."""
    return datetime.now(UTC).replace(tzinfo=None)


class Employer(Base):
    """Organization posting jobs.

    The ``total_*``/``active_*`` counters are owned by EmployerStatsService and
    are only changed through its atomic increments or a full resync.
    """

    __tablename__ = "employers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    organization_name: Mapped[str] = mapped_column(String(200), nullable=False)
    contact_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Email notification preferences
    notify_new_application: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_application_update: Mapped[bool] = mapped_column(Boolean, default=True)

    # Statistics
    total_job_posts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active_job_posts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_applications: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    total_hires: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False
    )


class Job(Base):
    """Job post created by an employer."""

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employer_id: Mapped[int] = mapped_column(
        ForeignKey("employers.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(150), nullable=False)
    # Snapshot of the employer name for listings
    organization_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[JobStatus] = mapped_column(
        Enum(JobStatus, values_callable=enum_values, native_enum=False, length=20),
        default=JobStatus.PENDING,
        nullable=False,
        index=True,
    )
    posted_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    views: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    applications_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    employer: Mapped[Employer] = relationship(lazy="raise")

    def is_open(self, now: datetime | None = None) -> bool:
        """Check whether the job accepts new applications."""
        if self.status != JobStatus.ACTIVE:
            return False
        now = now or _utc_now()
        if self.expires_at is not None and self.expires_at < now:
            return False
        return True
