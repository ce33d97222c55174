from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from app.models.subscription import SubscriberType, SubscriptionStatus


class SubscriptionCreate(BaseModel):
    external_id: str = Field(..., min_length=1, max_length=255)
    subscriber_type: SubscriberType
    subscriber_user_id: UUID | None = None
    subscriber_organization_id: UUID | None = None
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    trial_start: datetime | None = None
    trial_end: datetime | None = None
    cancel_at_period_end: bool = False
    canceled_at: datetime | None = None
    subscription_metadata: dict[str, Any] | None = None

    model_config = {"use_enum_values": True, "validate_default": True}

    @model_validator(mode="after")
    def check_subscriber_matches_type(self) -> "SubscriptionCreate":
        """Exactly one subscriber reference, consistent with subscriber_type."""
        if self.subscriber_type == SubscriberType.USER.value:
            if self.subscriber_user_id is None or self.subscriber_organization_id is not None:
                raise ValueError("user subscriptions must set only subscriber_user_id")
        elif (
            self.subscriber_organization_id is None or self.subscriber_user_id is not None
        ):
            raise ValueError(
                "organization subscriptions must set only subscriber_organization_id"
            )
        return self


class SubscriptionUpdate(BaseModel):
    status: SubscriptionStatus | None = None
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    trial_start: datetime | None = None
    trial_end: datetime | None = None
    cancel_at_period_end: bool | None = None
    canceled_at: datetime | None = None
    subscription_metadata: dict[str, Any] | None = None

    model_config = {"use_enum_values": True}


class SubscriptionResponse(BaseModel):
    id: UUID
    external_id: str
    subscriber_type: SubscriberType
    subscriber_user_id: UUID | None
    subscriber_organization_id: UUID | None
    status: SubscriptionStatus
    current_period_start: datetime | None
    current_period_end: datetime | None
    trial_start: datetime | None
    trial_end: datetime | None
    cancel_at_period_end: bool
    canceled_at: datetime | None
    subscription_metadata: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
