"""API routes for employer statistics."""

import logging

from fastapi import APIRouter, Depends, status

from app.core.exceptions import ForbiddenError
from app.core.security import (
    CurrentUser,
    require_admin,
    require_employer,
    require_employer_or_admin,
)
from app.schemas.employer import EmployerStatsRead, ResyncQueued
from app.services.dependencies import get_stats_service
from app.services.stats_service import EmployerStatsService
from app.tasks import enqueue_stats_resync
from app.utils.responses import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employers", tags=["employers"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/me/stats")
async def get_my_stats(
    user: CurrentUser = Depends(require_employer),
    stats: EmployerStatsService = Depends(get_stats_service),
):
    """Get the caller's employer counters."""
    employer = await stats.employer_for_user(user.id)
    counters = await stats.get_stats(employer.id)
    return success_response(
        message="Employer stats retrieved",
        data=EmployerStatsRead(**counters.as_dict()).model_dump(),
    )


@router.post("/{employer_id}/stats/resync")
async def resync_employer_stats(
    employer_id: int,
    user: CurrentUser = Depends(require_employer_or_admin),
    stats: EmployerStatsService = Depends(get_stats_service),
):
    """Recount one employer's counters from its jobs and applications."""
    if not user.is_admin:
        employer = await stats.employer_for_user(user.id)
        if employer.id != employer_id:
            raise ForbiddenError("Not authorized to resync this employer")

    counters = await stats.resync(employer_id)
    return success_response(
        message="Employer stats resynced",
        data=EmployerStatsRead(**counters.as_dict()).model_dump(),
    )


@admin_router.post("/stats/resync", status_code=status.HTTP_202_ACCEPTED)
async def queue_full_resync(user: CurrentUser = Depends(require_admin)):
    """Queue a background recount of every employer."""
    job = enqueue_stats_resync(None)
    logger.info(f"Admin {user.id} queued full stats resync as job {job.id}")
    return success_response(
        status_code=status.HTTP_202_ACCEPTED,
        message="Stats resync queued",
        data=ResyncQueued(job_id=job.id).model_dump(),
    )
