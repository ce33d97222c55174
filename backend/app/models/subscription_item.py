from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class SubscriptionItemStatus(str, Enum):
    ACTIVE = "active"
    CANCELED = "canceled"
    UPCOMING = "upcoming"
    ENDED = "ended"
    ABANDONED = "abandoned"
    INCOMPLETE = "incomplete"
    PAST_DUE = "past_due"


class BillingInterval(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class SubscriptionItem(Base):
    __tablename__ = "subscription_items"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    external_id = Column(String(255), unique=True, index=True, nullable=False)
    subscription_id = Column(
        UUIDType,
        ForeignKey("subscriptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    plan_id = Column(String(255), nullable=False)
    plan_name = Column(String(255), nullable=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit_amount = Column(Integer, nullable=True)  # minor currency units
    currency = Column(String(10), nullable=True)
    interval = Column(String(10), nullable=True)
    status = Column(String(20), nullable=False, default=SubscriptionItemStatus.ACTIVE.value)
    item_metadata = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
