from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from lending_admin.schemas.common import CamelModel, Money, MutationRequestBase, NotificationReceipt


class WithdrawalStatus(str, Enum):
    PENDING = "pending"
    REVIEW = "review"
    APPROVED = "approved"
    REJECTED = "rejected"


class WithdrawalAction(str, Enum):
    UPDATE = "update"
    REVIEW = "review"
    APPROVE = "approve"
    REJECT = "reject"


class WithdrawalUpdateRequest(MutationRequestBase):
    amount: Decimal | None = None
    admin_note: str | None = None


class WithdrawalActionRequest(MutationRequestBase):
    """Body for review/approve/reject; the target status comes from the route."""

    admin_note: str | None = None
    transaction_id: str | None = None


class WithdrawalDTO(CamelModel):
    id: UUID
    user_id: UUID
    amount: Money
    previous_balance: Money
    new_balance: Money
    status: str
    bank_details: dict[str, Any] | None = None
    admin_note: str | None = None
    transaction_id: str | None = None
    processed_at: datetime | None = None
    version: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class WithdrawalMutationResponse(CamelModel):
    success: bool = True
    withdrawal: WithdrawalDTO
    notification: NotificationReceipt
