"""User-scoped notification model."""

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.storage import Base
from app.models.enums import NotificationType, UserRole, enum_values


def _utc_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Notification(Base):
    """In-app notification, deduplicated per (user, dedupe_key)."""

    __tablename__ = "notifications"
    # NULL keys never collide, so un-keyed notifications are unrestricted
    __table_args__ = (
        UniqueConstraint("user_id", "dedupe_key", name="uq_notifications_user_key"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
    )
    type: Mapped[NotificationType] = mapped_column(
        Enum(
            NotificationType, values_callable=enum_values, native_enum=False, length=40
        ),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(180), nullable=False)
    message: Mapped[str] = mapped_column(String(1000), nullable=False)
    cta_path: Mapped[str | None] = mapped_column(String(300), nullable=True)
    cta_label: Mapped[str | None] = mapped_column(String(80), nullable=True)
    metadata_: Mapped[dict] = mapped_column("metadata", JSON, default=dict)
    read_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, index=True
    )
    dedupe_key: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, nullable=False, index=True
    )
