"""Pytest configuration and fixtures."""

import os
import sys
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

# Add the app directory to the Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment variables before importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ["SIDE_EFFECT_BASE_DELAY"] = "0"

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.core.security import CurrentUser  # noqa: E402
from app.core.storage import init_models  # noqa: E402
from app.models import (  # noqa: E402
    Employer,
    Job,
    JobSeeker,
    JobStatus,
    User,
    UserRole,
)
from app.services.application_service import ApplicationLifecycleService  # noqa: E402
from app.services.dispatcher import SideEffectDispatcher  # noqa: E402
from app.services.file_storage import StoredFile  # noqa: E402
from app.services.notification_service import NotificationService  # noqa: E402
from app.services.stats_service import EmployerStatsService  # noqa: E402


def utc_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


@dataclass
class World:
    """Seeded accounts and one open job."""

    seeker: CurrentUser
    seeker_profile_id: int
    employer: CurrentUser
    employer_id: int
    other_employer: CurrentUser
    other_employer_id: int
    admin: CurrentUser
    job_id: int


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Throw-away SQLite database with every table created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'lifemate.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def dispatcher(db_engine):
    """Dispatcher with a single immediate retry, drained before the database goes away."""
    side_effects = SideEffectDispatcher(max_retries=1, base_delay=0)
    yield side_effects
    await side_effects.drain(timeout=5)


@pytest.fixture
def mock_emails():
    """Mock email notifier for testing."""
    emails = MagicMock()
    emails.send = AsyncMock(return_value=True)
    emails.send_new_application_to_employer = AsyncMock(return_value=True)
    emails.send_application_submitted = AsyncMock(return_value=True)
    emails.send_status_update = AsyncMock(return_value=True)
    return emails


@pytest.fixture
def mock_storage():
    """Mock file storage that echoes back where each document would land."""

    async def upload(document, folder, resource_type="raw"):
        return StoredFile(
            url=f"https://files.test/{folder}/{document.filename}",
            public_id=f"{folder}/{document.filename}",
            bytes=document.size,
        )

    storage = MagicMock()
    storage.upload = AsyncMock(side_effect=upload)
    return storage


@pytest.fixture
def stats_service(session_factory):
    return EmployerStatsService(session_factory)


@pytest.fixture
def notification_service(session_factory):
    return NotificationService(session_factory)


@pytest.fixture
def lifecycle(
    stats_service,
    notification_service,
    mock_emails,
    mock_storage,
    dispatcher,
    session_factory,
):
    return ApplicationLifecycleService(
        stats_service,
        notification_service,
        mock_emails,
        mock_storage,
        dispatcher,
        session_factory,
    )


@pytest.fixture
def make_job(session_factory):
    """Factory for jobs owned by a given employer."""

    async def _make_job(
        employer_id: int,
        title: str = "Registered Nurse",
        status: JobStatus = JobStatus.ACTIVE,
        expires_at: datetime | None = None,
    ) -> int:
        async with session_factory() as session:
            job = Job(
                employer_id=employer_id,
                title=title,
                organization_name="St. Mary Clinic",
                status=status,
                expires_at=expires_at,
            )
            session.add(job)
            await session.commit()
            return job.id

    return _make_job


async def _add_user(session, email: str, role: UserRole, first: str, last: str) -> User:
    user = User(email=email, role=role, first_name=first, last_name=last, is_active=True)
    session.add(user)
    await session.flush()
    return user


def _current(user: User) -> CurrentUser:
    return CurrentUser(
        id=user.id, role=user.role, email=user.email, full_name=user.full_name
    )


@pytest_asyncio.fixture
async def world(session_factory, make_job):
    """Seeker, two employers, an admin and one open job."""
    async with session_factory() as session:
        seeker_user = await _add_user(
            session, "jane@example.com", UserRole.JOBSEEKER, "Jane", "Doe"
        )
        profile = JobSeeker(user_id=seeker_user.id, headline="ICU nurse")
        session.add(profile)

        employer_user = await _add_user(
            session, "hr@stmary.example", UserRole.EMPLOYER, "Hana", "Reed"
        )
        employer = Employer(
            user_id=employer_user.id,
            organization_name="St. Mary Clinic",
            contact_name="Hana Reed",
            contact_email="hr@stmary.example",
        )
        session.add(employer)

        other_user = await _add_user(
            session, "jobs@other.example", UserRole.EMPLOYER, "Omar", "Lee"
        )
        other = Employer(user_id=other_user.id, organization_name="Other Health")
        session.add(other)

        admin_user = await _add_user(
            session, "admin@lifemate.example", UserRole.ADMIN, "Ada", "Min"
        )
        await session.commit()

        result = World(
            seeker=_current(seeker_user),
            seeker_profile_id=profile.id,
            employer=_current(employer_user),
            employer_id=employer.id,
            other_employer=_current(other_user),
            other_employer_id=other.id,
            admin=_current(admin_user),
            job_id=0,
        )

    result.job_id = await make_job(
        result.employer_id, expires_at=utc_now() + timedelta(days=30)
    )
    return result
