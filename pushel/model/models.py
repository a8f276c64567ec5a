"""Data models shared by the scheduler, the notifier and the HTTP API."""

from __future__ import annotations

__all__ = [
    "AdhocRequest",
    "NotificationRequest",
    "PresenceState",
    "PresenceTransition",
    "ReminderSpec",
    "Urgency",
]

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Urgency(str, Enum):
    """Urgency levels understood by the desktop notification daemon."""

    LOW = "low"
    NORMAL = "normal"
    CRITICAL = "critical"


class PresenceState(Enum):
    """Coarse presence classification reported to Home Assistant."""

    ACTIVE = "active"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class PresenceTransition:
    """A change of presence state observed by one idle poll."""

    old: PresenceState
    new: PresenceState
    at: float  # unix seconds


class NotificationRequest(BaseModel):
    """Everything needed to render one desktop notification."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    message: str
    urgency: Urgency | None = None
    expire_time: int | None = Field(default=None, ge=0)  # milliseconds
    app_name: str | None = None
    icon: str | None = None
    category: str | None = None
    transient: bool | None = None


class AdhocRequest(NotificationRequest):
    """Body of ``POST /api/v1/notify``."""


class ReminderSpec(NotificationRequest):
    """A recurring reminder loaded from ``notifications.json``.

    ``interval`` keeps the raw text form (``"30m"``); it is converted by
    :func:`pushel.scheduler.interval.parse_interval` when the timer is built.
    """

    interval: str

    def to_notification(self) -> NotificationRequest:
        """Drop the scheduling field and keep the delivery payload."""
        return NotificationRequest(**self.model_dump(exclude={"interval"}))
