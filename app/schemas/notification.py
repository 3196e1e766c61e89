"""Schemas for notifications."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import NotificationType, UserRole


class NotificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    role: UserRole
    type: NotificationType
    title: str
    message: str
    cta_path: str | None = None
    cta_label: str | None = None
    metadata: dict = Field(default_factory=dict, validation_alias="metadata_")
    read_at: datetime | None = None
    created_at: datetime


class NotificationPage(BaseModel):
    items: list[NotificationRead]
    page: int
    limit: int
    total: int
    pages: int
    unread_count: int
