"""Schemas for employer statistics."""

from pydantic import BaseModel, Field


class EmployerStatsRead(BaseModel):
    total_job_posts: int = 0
    active_job_posts: int = 0
    total_applications: int = 0
    total_hires: int = 0


class ResyncQueued(BaseModel):
    job_id: str = Field(..., description="Background queue job identifier")
    employer_id: int | None = None
