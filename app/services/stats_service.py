"""Employer statistic counters: atomic increments plus full resync."""

import logging
from dataclasses import asdict, dataclass
from enum import Enum

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.core.exceptions import NotFoundError
from app.core.storage import async_session
from app.models.application import Application
from app.models.employer import Employer, Job
from app.models.enums import ApplicationStatus, JobStatus

logger = logging.getLogger(__name__)


class EmployerCounter(str, Enum):
    TOTAL_JOB_POSTS = "total_job_posts"
    ACTIVE_JOB_POSTS = "active_job_posts"
    TOTAL_APPLICATIONS = "total_applications"
    TOTAL_HIRES = "total_hires"


@dataclass
class EmployerStats:
    total_job_posts: int = 0
    active_job_posts: int = 0
    total_applications: int = 0
    total_hires: int = 0

    @classmethod
    def from_employer(cls, employer: Employer) -> "EmployerStats":
        return cls(
            **{counter.value: getattr(employer, counter.value) for counter in EmployerCounter}
        )

    def as_dict(self) -> dict:
        return asdict(self)


class EmployerStatsService:
    """Maintains the counters on the employer record.

    Increments are independent single-statement updates. A failed increment is
    logged and reported as ``False``; it never undoes the business operation
    that triggered it. ``resync`` is the correctness backstop.
    """

    def __init__(self, session_factory: sessionmaker = async_session):
        self.session_factory = session_factory

    async def increment(
        self, employer_id: int, counter: EmployerCounter, by: int = 1
    ) -> bool:
        """Atomically add ``by`` to one employer counter."""
        column = getattr(Employer, counter.value)
        # Driver connect errors are not always wrapped in SQLAlchemyError
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    update(Employer)
                    .where(Employer.id == employer_id)
                    .values({column: column + by})
                )
                await session.commit()
        except Exception as e:
            logger.error(
                f"Failed to update {counter.value} by {by} for employer {employer_id}: {e}"
            )
            return False

        if result.rowcount == 0:
            logger.warning(f"Employer {employer_id} not found, {counter.value} unchanged")
            return False
        return True

    async def increment_job_posts(self, employer_id: int, by: int = 1) -> bool:
        return await self.increment(employer_id, EmployerCounter.TOTAL_JOB_POSTS, by)

    async def increment_active_job_posts(self, employer_id: int, by: int = 1) -> bool:
        return await self.increment(employer_id, EmployerCounter.ACTIVE_JOB_POSTS, by)

    async def increment_applications(self, employer_id: int, by: int = 1) -> bool:
        return await self.increment(employer_id, EmployerCounter.TOTAL_APPLICATIONS, by)

    async def increment_hires(self, employer_id: int, by: int = 1) -> bool:
        return await self.increment(employer_id, EmployerCounter.TOTAL_HIRES, by)

    async def increment_job_applications(self, job_id: int, by: int = 1) -> bool:
        """Atomically add ``by`` to the job's application counter."""
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    update(Job)
                    .where(Job.id == job_id)
                    .values(applications_count=Job.applications_count + by)
                )
                await session.commit()
        except Exception as e:
            logger.error(f"Failed to update application count for job {job_id}: {e}")
            return False
        return result.rowcount > 0

    async def employer_for_user(self, user_id: int) -> Employer:
        """Return the employer profile owned by ``user_id``."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(Employer).where(Employer.user_id == user_id).order_by(Employer.id)
            )
            employer = result.scalars().first()
        if employer is None:
            raise NotFoundError("Employer profile not found")
        return employer

    async def get_stats(self, employer_id: int) -> EmployerStats:
        async with self.session_factory() as session:
            employer = await session.get(Employer, employer_id)
        if employer is None:
            raise NotFoundError("Employer not found")
        return EmployerStats.from_employer(employer)

    async def resync(self, employer_id: int) -> EmployerStats:
        """Recompute every counter from the live job and application rows."""
        async with self.session_factory() as session:
            employer = await session.get(Employer, employer_id)
            if employer is None:
                raise NotFoundError("Employer not found")

            stats = EmployerStats(
                total_job_posts=await self._count(
                    session, Job, Job.employer_id == employer_id
                ),
                active_job_posts=await self._count(
                    session,
                    Job,
                    Job.employer_id == employer_id,
                    Job.status == JobStatus.ACTIVE,
                ),
                total_applications=await self._count(
                    session, Application, Application.employer_id == employer_id
                ),
                total_hires=await self._count(
                    session,
                    Application,
                    Application.employer_id == employer_id,
                    Application.status == ApplicationStatus.OFFERED,
                ),
            )
            await session.execute(
                update(Employer).where(Employer.id == employer_id).values(**stats.as_dict())
            )
            await session.commit()

        logger.info(f"Resynced stats for employer {employer_id}: {stats.as_dict()}")
        return stats

    async def resync_all(self) -> int:
        """Resync every employer; returns how many were repaired."""
        async with self.session_factory() as session:
            result = await session.execute(select(Employer.id).order_by(Employer.id))
            employer_ids = list(result.scalars().all())

        repaired = 0
        for employer_id in employer_ids:
            try:
                await self.resync(employer_id)
                repaired += 1
            except (SQLAlchemyError, NotFoundError) as e:
                logger.error(f"Stats resync failed for employer {employer_id}: {e}")

        logger.info(f"Stats resync finished: {repaired}/{len(employer_ids)} employers")
        return repaired

    @staticmethod
    async def _count(session, model, *conditions) -> int:
        result = await session.execute(
            select(func.count()).select_from(model).where(*conditions)
        )
        return result.scalar_one()
