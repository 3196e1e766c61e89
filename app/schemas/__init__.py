"""Pydantic schemas for request/response validation."""

from app.schemas.application import (
    AnswerItem,
    ApplicationDetail,
    ApplicationPage,
    ApplicationRead,
    ApplyResult,
    RatingRequest,
    StatusUpdateRequest,
    WithdrawRequest,
)
from app.schemas.employer import EmployerStatsRead, ResyncQueued
from app.schemas.notification import NotificationPage, NotificationRead

__all__ = [
    "AnswerItem",
    "ApplicationDetail",
    "ApplicationPage",
    "ApplicationRead",
    "ApplyResult",
    "EmployerStatsRead",
    "NotificationPage",
    "NotificationRead",
    "RatingRequest",
    "ResyncQueued",
    "StatusUpdateRequest",
    "WithdrawRequest",
]
