"""API routes for the caller's notifications."""

from fastapi import APIRouter, Depends, Query

from app.core.security import CurrentUser, get_current_user
from app.models.enums import NotificationType
from app.schemas.notification import NotificationPage, NotificationRead
from app.services.dependencies import get_notification_service
from app.services.notification_service import NotificationService
from app.utils.filters import Page
from app.utils.responses import success_response

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/mine")
async def list_my_notifications(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=50),
    unread_only: bool = Query(default=False),
    type: NotificationType | None = Query(default=None),
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    """List the caller's notifications, newest first."""
    paging = Page.clamp(page, limit, max_limit=50)
    items, total, unread = await service.list_for_user(
        user.id, paging, unread_only=unread_only, type=type
    )
    payload = NotificationPage(
        items=[NotificationRead.model_validate(item) for item in items],
        page=paging.page,
        limit=paging.limit,
        total=total,
        pages=paging.pages(total),
        unread_count=unread,
    )
    return success_response(
        message="Notifications retrieved", data=payload.model_dump(mode="json")
    )


@router.patch("/read-all")
async def mark_all_notifications_read(
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    updated = await service.mark_all_read(user.id)
    return success_response(
        message="All notifications marked as read", data={"updated": updated}
    )


@router.patch("/{notification_id}/read")
async def mark_notification_read(
    notification_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
):
    notification = await service.mark_read(notification_id, user.id)
    return success_response(
        message="Notification marked as read",
        data=NotificationRead.model_validate(notification).model_dump(mode="json"),
    )
