from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.subscription_item import BillingInterval, SubscriptionItemStatus


class SubscriptionItemCreate(BaseModel):
    external_id: str = Field(..., min_length=1, max_length=255)
    subscription_id: UUID
    plan_id: str = Field(..., min_length=1, max_length=255)
    plan_name: str | None = Field(default=None, max_length=255)
    quantity: int = Field(default=1, ge=0)
    unit_amount: int | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, max_length=10)
    interval: BillingInterval | None = None
    status: SubscriptionItemStatus = SubscriptionItemStatus.ACTIVE
    item_metadata: dict[str, Any] | None = None

    model_config = {"use_enum_values": True, "validate_default": True}


class SubscriptionItemUpdate(BaseModel):
    plan_id: str | None = Field(default=None, min_length=1, max_length=255)
    plan_name: str | None = Field(default=None, max_length=255)
    quantity: int | None = Field(default=None, ge=0)
    unit_amount: int | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, max_length=10)
    interval: BillingInterval | None = None
    status: SubscriptionItemStatus | None = None
    item_metadata: dict[str, Any] | None = None

    model_config = {"use_enum_values": True}


class SubscriptionItemResponse(BaseModel):
    id: UUID
    external_id: str
    subscription_id: UUID
    plan_id: str
    plan_name: str | None
    quantity: int
    unit_amount: int | None
    currency: str | None
    interval: BillingInterval | None
    status: SubscriptionItemStatus
    item_metadata: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
