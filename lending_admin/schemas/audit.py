from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from lending_admin.schemas.common import CamelModel


class TargetType(str, Enum):
    LOAN = "loan"
    USER_PROFILE = "user_profile"
    WITHDRAWAL = "withdrawal"


class ModificationType(str, Enum):
    LOAN_UPDATE = "loan_update"
    PROFILE_UPDATE = "profile_update"
    WITHDRAWAL_UPDATE = "withdrawal_update"
    WITHDRAWAL_REVIEW = "withdrawal_review"
    WITHDRAWAL_APPROVE = "withdrawal_approve"
    WITHDRAWAL_REJECT = "withdrawal_reject"


class AuditEntryDTO(CamelModel):
    id: UUID
    actor_id: str
    actor_name: str
    actor_email: str | None = None
    target_type: str
    target_id: str
    modification_type: str
    old_value: dict[str, Any] | None = None
    new_value: dict[str, Any] | None = None
    changes: dict[str, Any] | None = None
    reason: str
    notification_id: UUID | None = None
    created_at: datetime | None = None


class AuditEntryListResponse(CamelModel):
    success: bool = True
    items: list[AuditEntryDTO]
    total: int
