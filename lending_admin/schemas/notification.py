from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from lending_admin.schemas.common import CamelModel


class NotificationType(str, Enum):
    STATUS_CHANGED = "status_changed"
    DETAILS_MODIFIED = "details_modified"
    PROFILE_UPDATED = "profile_updated"


class NotificationDTO(CamelModel):
    id: UUID
    user_id: UUID
    type: str
    title: str
    message: str
    data: dict[str, Any] | None = None
    read: bool = False
    created_at: datetime | None = None
    read_at: datetime | None = None


class NotificationListResponse(CamelModel):
    success: bool = True
    notifications: list[NotificationDTO]
    unread_count: int


class NotificationReadResponse(CamelModel):
    success: bool = True
    notification: NotificationDTO


class NotificationReadAllResponse(CamelModel):
    success: bool = True
    updated: int
