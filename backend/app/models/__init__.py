from app.models.admin import Admin
from app.models.organization import Organization
from app.models.organization_membership import MembershipRole, OrganizationMembership
from app.models.payment_attempt import PaymentAttempt, PaymentAttemptStatus
from app.models.subscription import SubscriberType, Subscription, SubscriptionStatus
from app.models.subscription_item import (
    BillingInterval,
    SubscriptionItem,
    SubscriptionItemStatus,
)
from app.models.user import User

__all__ = [
    "Admin",
    "BillingInterval",
    "MembershipRole",
    "Organization",
    "OrganizationMembership",
    "PaymentAttempt",
    "PaymentAttemptStatus",
    "SubscriberType",
    "Subscription",
    "SubscriptionItem",
    "SubscriptionItemStatus",
    "SubscriptionStatus",
    "User",
]
