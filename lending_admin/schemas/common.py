from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

# Monetary values travel as JSON numbers; storage keeps them as Decimal.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MutationRequestBase(BaseModel):
    """Fields shared by every admin mutation body. Unknown keys are rejected."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    reason: str | None = None
    admin_id: str | None = None
    expected_version: int | None = None


class NotificationReceipt(CamelModel):
    sent: bool
    type: str


class MutationResponse(CamelModel):
    success: bool = True
    notification: NotificationReceipt
