"""Schemas for job application requests and responses."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ApplicationStatus, JobStatus


class AnswerItem(BaseModel):
    """Answer to one screening question."""

    question_id: str | None = None
    question: str | None = None
    answer: str | None = None


class HistoryEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: ApplicationStatus
    note: str | None = None
    actor_id: int | None = None
    at: datetime


class JobSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    organization_name: str | None = None
    status: JobStatus
    expires_at: datetime | None = None


class ApplicationRead(BaseModel):
    """Application as returned by mutating endpoints."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    job_id: int
    job_seeker_id: int
    employer_id: int
    status: ApplicationStatus
    applied_at: datetime
    updated_at_manual: datetime | None = None
    apply_attempts: int
    resume: dict | None = None
    cover_letter: dict | None = None
    answers: list[AnswerItem] = Field(default_factory=list)
    history: list[HistoryEntryRead] = Field(default_factory=list)
    is_viewed_by_employer: bool = False
    rating: int | None = None


class ApplicationDetail(ApplicationRead):
    """Application with the job it belongs to, for read endpoints."""

    job: JobSummary


class ApplyResult(BaseModel):
    application: ApplicationRead
    attempt: int
    warning: str | None = None


class StatusUpdateRequest(BaseModel):
    status: ApplicationStatus = Field(..., description="New application status")
    note: str | None = Field(default=None, max_length=1000)


class WithdrawRequest(BaseModel):
    note: str | None = Field(default=None, max_length=1000)


class RatingRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Candidate rating from 1 to 5")


class ApplicationPage(BaseModel):
    items: list[ApplicationDetail]
    page: int
    limit: int
    total: int
    pages: int
