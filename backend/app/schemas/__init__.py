from app.schemas.admin import AdminCreate, AdminCreateResponse, AdminResponse
from app.schemas.clerk_event import ClerkEvent, parse_clerk_event
from app.schemas.organization import (
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
)
from app.schemas.organization_membership import (
    OrganizationMembershipCreate,
    OrganizationMembershipResponse,
    OrganizationMembershipUpdate,
)
from app.schemas.payment_attempt import (
    PaymentAttemptCreate,
    PaymentAttemptResponse,
    PaymentAttemptUpdate,
)
from app.schemas.subscription import SubscriptionCreate, SubscriptionResponse, SubscriptionUpdate
from app.schemas.subscription_item import (
    SubscriptionItemCreate,
    SubscriptionItemResponse,
    SubscriptionItemUpdate,
)
from app.schemas.user import UserCreate, UserResponse, UserUpdate

__all__ = [
    "AdminCreate",
    "AdminCreateResponse",
    "AdminResponse",
    "ClerkEvent",
    "OrganizationCreate",
    "OrganizationMembershipCreate",
    "OrganizationMembershipResponse",
    "OrganizationMembershipUpdate",
    "OrganizationResponse",
    "OrganizationUpdate",
    "PaymentAttemptCreate",
    "PaymentAttemptResponse",
    "PaymentAttemptUpdate",
    "SubscriptionCreate",
    "SubscriptionItemCreate",
    "SubscriptionItemResponse",
    "SubscriptionItemUpdate",
    "SubscriptionResponse",
    "SubscriptionUpdate",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
    "parse_clerk_event",
]
