from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.payment_attempt import PaymentAttemptStatus


class PaymentAttemptCreate(BaseModel):
    external_id: str = Field(..., min_length=1, max_length=255)
    subscription_id: UUID | None = None
    amount: int = Field(default=0, ge=0, description="Amount in minor currency units")
    currency: str = Field(default="usd", max_length=10)
    status: PaymentAttemptStatus = PaymentAttemptStatus.PROCESSING
    failure_reason: str | None = Field(default=None, max_length=1000)
    failure_code: str | None = Field(default=None, max_length=255)
    invoice_id: str | None = Field(default=None, max_length=255)
    charge_id: str | None = Field(default=None, max_length=255)
    payment_method_type: str | None = Field(default=None, max_length=50)
    attempted_at: datetime
    payment_metadata: dict[str, Any] | None = None

    model_config = {"use_enum_values": True, "validate_default": True}


class PaymentAttemptUpdate(BaseModel):
    subscription_id: UUID | None = None
    amount: int | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, max_length=10)
    status: PaymentAttemptStatus | None = None
    failure_reason: str | None = Field(default=None, max_length=1000)
    failure_code: str | None = Field(default=None, max_length=255)
    invoice_id: str | None = Field(default=None, max_length=255)
    charge_id: str | None = Field(default=None, max_length=255)
    payment_method_type: str | None = Field(default=None, max_length=50)
    attempted_at: datetime | None = None
    payment_metadata: dict[str, Any] | None = None

    model_config = {"use_enum_values": True}


class PaymentAttemptResponse(BaseModel):
    id: UUID
    external_id: str
    subscription_id: UUID | None
    amount: int
    currency: str
    status: PaymentAttemptStatus
    failure_reason: str | None
    failure_code: str | None
    invoice_id: str | None
    charge_id: str | None
    payment_method_type: str | None
    attempted_at: datetime
    payment_metadata: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
