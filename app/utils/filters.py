"""Query filters and paging for application listings."""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import ColumnElement

from app.models.application import Application
from app.models.enums import ApplicationStatus


@dataclass
class ApplicationFilter:
    """Optional listing criteria shared by the seeker and employer views."""

    status: ApplicationStatus | None = None
    job_id: int | None = None
    employer_id: int | None = None
    job_seeker_id: int | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None

    def clauses(self) -> list[ColumnElement[bool]]:
        """Translate the criteria into SQLAlchemy WHERE clauses."""
        conditions = []
        if self.status is not None:
            conditions.append(Application.status == self.status)
        if self.job_id is not None:
            conditions.append(Application.job_id == self.job_id)
        if self.employer_id is not None:
            conditions.append(Application.employer_id == self.employer_id)
        if self.job_seeker_id is not None:
            conditions.append(Application.job_seeker_id == self.job_seeker_id)
        if self.date_from is not None:
            conditions.append(Application.applied_at >= self.date_from)
        if self.date_to is not None:
            conditions.append(Application.applied_at <= self.date_to)
        return conditions


@dataclass(frozen=True)
class Page:
    """Clamped page/limit pair."""

    page: int = 1
    limit: int = 10

    @classmethod
    def clamp(cls, page: int | None, limit: int | None, max_limit: int = 100) -> "Page":
        page = max(1, page or 1)
        limit = min(max_limit, max(1, limit or 10))
        return cls(page=page, limit=limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def pages(self, total: int) -> int:
        return -(-total // self.limit)
