"""Structured idempotency keys for notification deduplication."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum


class EventKind(str, Enum):
    APPLICATION_SUBMITTED = "application-submitted"
    APPLICATION_STATUS = "application-status"


@dataclass(frozen=True)
class IdempotencyKey:
    """Identity of one logical event occurrence.

    Two keys built from the same kind, subject and instant always render the
    same string, whatever timezone representation the instant arrived in.
    Naive datetimes are taken as UTC, matching how timestamps are stored.
    """

    kind: EventKind
    subject_id: int
    logical_time: datetime

    def __post_init__(self):
        object.__setattr__(self, "logical_time", _as_utc(self.logical_time))

    def __str__(self) -> str:
        stamp = self.logical_time.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
        return f"{self.kind.value}:{self.subject_id}:{stamp}"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
