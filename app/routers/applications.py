"""API routes for reading and managing applications."""

import logging
from datetime import datetime

from fastapi import APIRouter, Body, Depends, Query

from app.core.security import (
    CurrentUser,
    get_current_user,
    require_employer,
    require_employer_or_admin,
    require_job_seeker,
)
from app.models.enums import ApplicationStatus
from app.schemas.application import (
    ApplicationDetail,
    ApplicationPage,
    ApplicationRead,
    RatingRequest,
    StatusUpdateRequest,
    WithdrawRequest,
)
from app.services.application_service import ApplicationLifecycleService
from app.services.dependencies import get_application_service
from app.utils.filters import ApplicationFilter, Page
from app.utils.responses import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


def _page_payload(items, total: int, page: Page) -> dict:
    return ApplicationPage(
        items=[ApplicationDetail.model_validate(item) for item in items],
        page=page.page,
        limit=page.limit,
        total=total,
        pages=page.pages(total),
    ).model_dump(mode="json")


@router.get("/me")
async def list_my_applications(
    status: ApplicationStatus | None = Query(default=None),
    job_id: int | None = Query(default=None),
    date_from: datetime | None = Query(default=None),
    date_to: datetime | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user: CurrentUser = Depends(require_job_seeker),
    service: ApplicationLifecycleService = Depends(get_application_service),
):
    """List the caller's own applications, newest first."""
    paging = Page.clamp(page, limit)
    filters = ApplicationFilter(
        status=status, job_id=job_id, date_from=date_from, date_to=date_to
    )
    items, total = await service.list_for_seeker(user, filters, paging)
    return success_response(
        message="Applications retrieved", data=_page_payload(items, total, paging)
    )


@router.get("/employer")
async def list_employer_applications(
    status: ApplicationStatus | None = Query(default=None),
    job_id: int | None = Query(default=None),
    date_from: datetime | None = Query(default=None),
    date_to: datetime | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    user: CurrentUser = Depends(require_employer),
    service: ApplicationLifecycleService = Depends(get_application_service),
):
    """List applications to the caller's jobs, newest first."""
    paging = Page.clamp(page, limit)
    filters = ApplicationFilter(
        status=status, job_id=job_id, date_from=date_from, date_to=date_to
    )
    items, total = await service.list_for_employer(user, filters, paging)
    return success_response(
        message="Applications retrieved", data=_page_payload(items, total, paging)
    )


@router.get("/job/{job_id}")
async def list_job_applications(
    job_id: int,
    user: CurrentUser = Depends(require_employer),
    service: ApplicationLifecycleService = Depends(get_application_service),
):
    """List every application to one of the caller's jobs."""
    items = await service.list_for_job(job_id, user)
    return success_response(
        message="Applications retrieved",
        data=[
            ApplicationDetail.model_validate(item).model_dump(mode="json")
            for item in items
        ],
    )


@router.get("/{application_id}")
async def get_application(
    application_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: ApplicationLifecycleService = Depends(get_application_service),
):
    application = await service.get_for_viewer(application_id, user)
    return success_response(
        message="Application retrieved",
        data=ApplicationDetail.model_validate(application).model_dump(mode="json"),
    )


@router.patch("/{application_id}/status")
async def update_application_status(
    application_id: int,
    request: StatusUpdateRequest,
    user: CurrentUser = Depends(require_employer_or_admin),
    service: ApplicationLifecycleService = Depends(get_application_service),
):
    """Move an application to a new status."""
    application = await service.update_status(
        application_id, request.status, user, request.note
    )
    return success_response(
        message="Application status updated",
        data=ApplicationRead.model_validate(application).model_dump(mode="json"),
    )


@router.patch("/{application_id}/withdraw")
async def withdraw_application(
    application_id: int,
    request: WithdrawRequest | None = Body(default=None),
    user: CurrentUser = Depends(require_job_seeker),
    service: ApplicationLifecycleService = Depends(get_application_service),
):
    """Withdraw the caller's application."""
    note = request.note if request else None
    application = await service.withdraw(application_id, user, note)
    return success_response(
        message="Application withdrawn",
        data=ApplicationRead.model_validate(application).model_dump(mode="json"),
    )


@router.patch("/{application_id}/rating")
async def rate_application(
    application_id: int,
    request: RatingRequest,
    user: CurrentUser = Depends(require_employer_or_admin),
    service: ApplicationLifecycleService = Depends(get_application_service),
):
    application = await service.set_rating(application_id, request.rating, user)
    return success_response(
        message="Application rating updated",
        data=ApplicationRead.model_validate(application).model_dump(mode="json"),
    )
