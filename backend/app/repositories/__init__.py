from app.repositories.admin_repository import AdminRepository
from app.repositories.organization_membership_repository import (
    OrganizationMembershipRepository,
)
from app.repositories.organization_repository import OrganizationRepository
from app.repositories.payment_attempt_repository import PaymentAttemptRepository
from app.repositories.subscription_item_repository import SubscriptionItemRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.repositories.user_repository import UserRepository

__all__ = [
    "AdminRepository",
    "OrganizationMembershipRepository",
    "OrganizationRepository",
    "PaymentAttemptRepository",
    "SubscriptionItemRepository",
    "SubscriptionRepository",
    "UserRepository",
]
