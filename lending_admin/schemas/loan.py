from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from lending_admin.schemas.common import CamelModel, Money, MutationRequestBase, NotificationReceipt


class LoanStatus(str, Enum):
    PENDING_APPROVAL = "Pending Approval"
    APPROVED = "Approved"
    IN_REPAYMENT = "In Repayment"
    COMPLETED = "Completed"
    REJECTED = "Rejected"


class LoanMutationRequest(MutationRequestBase):
    loan_amount: Decimal | None = None
    duration_months: int | None = None
    interest_rate: Decimal | None = None
    status: str | None = None
    admin_notes: str | None = None
    status_change: bool = False


class LoanDTO(CamelModel):
    id: UUID
    user_id: UUID
    application_number: str | None = None
    loan_amount: Money
    duration_months: int
    interest_rate: Money
    monthly_payment: Money | None = None
    total_amount: Money | None = None
    total_interest: Money | None = None
    loan_purpose: str | None = None
    status: str
    admin_notes: str | None = None
    approval_date: date | None = None
    version: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LoanMutationResponse(CamelModel):
    success: bool = True
    loan: LoanDTO
    notification: NotificationReceipt
