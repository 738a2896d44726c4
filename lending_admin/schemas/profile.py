from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import field_serializer

from lending_admin.schemas.common import CamelModel, MutationRequestBase, NotificationReceipt


class ActivationStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REJECTED = "rejected"


class ProfileMutationRequest(MutationRequestBase):
    full_name: str | None = None
    gender: str | None = None
    # Kept as text so an unparseable date is reported alongside the other field errors
    date_of_birth: str | None = None
    marital_status: str | None = None
    nationality: str | None = None
    residing_country: str | None = None
    state_region_province: str | None = None
    town_city: str | None = None
    id_type: str | None = None
    id_number: str | None = None
    account_type: str | None = None
    bank_name: str | None = None
    account_number: str | None = None
    account_holder_name: str | None = None
    activation_status: str | None = None
    status_change: bool = False


def mask_sensitive(value: str | None) -> str | None:
    if value is None:
        return None
    text = str(value)
    if len(text) <= 4:
        return "****"
    return f"****{text[-4:]}"


class ProfileDTO(CamelModel):
    id: UUID
    user_id: UUID
    full_name: str | None = None
    gender: str | None = None
    date_of_birth: date | None = None
    marital_status: str | None = None
    nationality: str | None = None
    residing_country: str | None = None
    state_region_province: str | None = None
    town_city: str | None = None
    id_type: str | None = None
    id_number: str | None = None
    account_type: str | None = None
    bank_name: str | None = None
    account_number: str | None = None
    account_holder_name: str | None = None
    activation_status: str
    version: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_serializer("id_number", "account_number")
    def _mask(self, value: str | None) -> str | None:
        return mask_sensitive(value)


class ProfileMutationResponse(CamelModel):
    success: bool = True
    profile: ProfileDTO
    notification: NotificationReceipt
