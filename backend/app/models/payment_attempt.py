"""PaymentAttempt model for Clerk Billing payment attempts."""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class PaymentAttemptStatus(str, Enum):
    """Payment attempt status enum."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PROCESSING = "processing"
    REQUIRES_ACTION = "requires_action"
    REQUIRES_PAYMENT_METHOD = "requires_payment_method"
    CANCELED = "canceled"


class PaymentAttempt(Base):
    """Payment attempt - one charge attempt reported by the billing provider."""

    __tablename__ = "payment_attempts"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    external_id = Column(String(255), unique=True, index=True, nullable=False)
    subscription_id = Column(
        UUIDType,
        ForeignKey("subscriptions.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    amount = Column(Integer, nullable=False, default=0)  # minor currency units
    currency = Column(String(10), nullable=False, default="usd")
    status = Column(String(30), nullable=False, index=True)
    failure_reason = Column(String(1000), nullable=True)
    failure_code = Column(String(255), nullable=True)
    invoice_id = Column(String(255), nullable=True)
    charge_id = Column(String(255), nullable=True)
    payment_method_type = Column(String(50), nullable=True)
    attempted_at = Column(DateTime(timezone=True), nullable=False)
    payment_metadata = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
