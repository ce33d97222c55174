"""Typed Clerk webhook payloads.

Clerk delivers ``{"type": "<kind>", "data": {...}, "object": "event"}``.
Each supported kind maps to one event model below; ``parse_clerk_event``
selects the variant by ``type`` before anything touches the database.
Unknown kinds decode to ``UnhandledEvent`` so they can be acknowledged.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

USER_EVENT_TYPES = ("user.created", "user.updated")
ORGANIZATION_EVENT_TYPES = ("organization.created", "organization.updated")
MEMBERSHIP_EVENT_TYPES = (
    "organizationMembership.created",
    "organizationMembership.updated",
    "organizationMembership.deleted",
)
SUBSCRIPTION_EVENT_TYPES = (
    "subscription.created",
    "subscription.updated",
    "subscription.active",
    "subscription.past_due",
)
SUBSCRIPTION_ITEM_EVENT_TYPES = (
    "subscriptionItem.created",
    "subscriptionItem.updated",
    "subscriptionItem.active",
    "subscriptionItem.canceled",
    "subscriptionItem.upcoming",
    "subscriptionItem.ended",
    "subscriptionItem.abandoned",
    "subscriptionItem.incomplete",
    "subscriptionItem.past_due",
)
PAYMENT_ATTEMPT_EVENT_TYPES = ("paymentAttempt.created", "paymentAttempt.updated")

SUPPORTED_EVENT_TYPES: tuple[str, ...] = (
    *USER_EVENT_TYPES,
    "user.deleted",
    *ORGANIZATION_EVENT_TYPES,
    "organization.deleted",
    *MEMBERSHIP_EVENT_TYPES,
    *SUBSCRIPTION_EVENT_TYPES,
    *SUBSCRIPTION_ITEM_EVENT_TYPES,
    *PAYMENT_ATTEMPT_EVENT_TYPES,
)


class ClerkObject(BaseModel):
    """Base for Clerk payload objects; unknown attributes are ignored."""

    model_config = ConfigDict(extra="ignore")


# ---------------------------------------------------------------------------
# Payload data
# ---------------------------------------------------------------------------


class Verification(ClerkObject):
    status: str | None = None


class EmailAddress(ClerkObject):
    id: str
    email_address: str
    verification: Verification | None = None

    @property
    def is_verified(self) -> bool:
        return self.verification is not None and self.verification.status == "verified"


class PhoneNumber(ClerkObject):
    id: str
    phone_number: str
    verification: Verification | None = None

    @property
    def is_verified(self) -> bool:
        return self.verification is not None and self.verification.status == "verified"


class UserData(ClerkObject):
    id: str
    email_addresses: list[EmailAddress] = Field(default_factory=list)
    primary_email_address_id: str | None = None
    phone_numbers: list[PhoneNumber] = Field(default_factory=list)
    primary_phone_number_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None
    created_at: int | None = None  # epoch milliseconds
    last_sign_in_at: int | None = None  # epoch milliseconds
    public_metadata: dict[str, Any] | None = None

    def primary_email(self) -> EmailAddress | None:
        return next(
            (e for e in self.email_addresses if e.id == self.primary_email_address_id),
            None,
        )

    def primary_phone(self) -> PhoneNumber | None:
        if not self.primary_phone_number_id:
            return None
        return next(
            (p for p in self.phone_numbers if p.id == self.primary_phone_number_id),
            None,
        )


class DeletedObjectData(ClerkObject):
    id: str
    deleted: bool = True


class OrganizationData(ClerkObject):
    id: str
    name: str
    slug: str | None = None
    image_url: str | None = None
    created_by: str | None = None
    max_allowed_memberships: int | None = None
    public_metadata: dict[str, Any] | None = None
    private_metadata: dict[str, Any] | None = None


class MembershipOrganization(ClerkObject):
    id: str


class PublicUserData(ClerkObject):
    user_id: str
    identifier: str | None = None


class MembershipData(ClerkObject):
    id: str
    organization: MembershipOrganization | None = None
    public_user_data: PublicUserData | None = None
    role: str | None = None
    public_metadata: dict[str, Any] | None = None


class SubscriptionData(ClerkObject):
    id: str
    customer: str
    status: str | None = None
    current_period_start: int | None = None  # epoch seconds
    current_period_end: int | None = None
    trial_start: int | None = None
    trial_end: int | None = None
    cancel_at_period_end: bool | None = None
    canceled_at: int | None = None
    metadata: dict[str, Any] | None = None


class PlanData(ClerkObject):
    id: str
    nickname: str | None = None
    name: str | None = None
    amount: int | None = None
    currency: str | None = None
    interval: str | None = None


class SubscriptionItemData(ClerkObject):
    id: str
    subscription: str
    plan: PlanData | str | None = None
    quantity: int | None = None
    metadata: dict[str, Any] | None = None
    status: str | None = None


class PaymentAttemptData(ClerkObject):
    id: str
    subscription: str | None = None
    amount: int | None = None
    currency: str | None = None
    status: str | None = None
    failure_reason: str | None = None
    failure_code: str | None = None
    invoice: str | None = None
    charge: str | None = None
    payment_method_type: str | None = None
    created: int | None = None  # epoch seconds
    metadata: dict[str, Any] | None = None


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class ClerkEventBase(ClerkObject):
    type: str

    @property
    def action(self) -> str:
        """Suffix of the event kind, e.g. ``created`` or ``past_due``."""
        return self.type.split(".", 1)[1] if "." in self.type else self.type


class UserEvent(ClerkEventBase):
    type: Literal["user.created", "user.updated"]
    data: UserData


class UserDeletedEvent(ClerkEventBase):
    type: Literal["user.deleted"]
    data: DeletedObjectData


class OrganizationEvent(ClerkEventBase):
    type: Literal["organization.created", "organization.updated"]
    data: OrganizationData


class OrganizationDeletedEvent(ClerkEventBase):
    type: Literal["organization.deleted"]
    data: DeletedObjectData


class MembershipEvent(ClerkEventBase):
    type: Literal[
        "organizationMembership.created",
        "organizationMembership.updated",
        "organizationMembership.deleted",
    ]
    data: MembershipData


class SubscriptionEvent(ClerkEventBase):
    type: Literal[
        "subscription.created",
        "subscription.updated",
        "subscription.active",
        "subscription.past_due",
    ]
    data: SubscriptionData


class SubscriptionItemEvent(ClerkEventBase):
    type: Literal[
        "subscriptionItem.created",
        "subscriptionItem.updated",
        "subscriptionItem.active",
        "subscriptionItem.canceled",
        "subscriptionItem.upcoming",
        "subscriptionItem.ended",
        "subscriptionItem.abandoned",
        "subscriptionItem.incomplete",
        "subscriptionItem.past_due",
    ]
    data: SubscriptionItemData


class PaymentAttemptEvent(ClerkEventBase):
    type: Literal["paymentAttempt.created", "paymentAttempt.updated"]
    data: PaymentAttemptData


class UnhandledEvent(ClerkEventBase):
    data: dict[str, Any] = Field(default_factory=dict)


SupportedClerkEvent = Annotated[
    UserEvent
    | UserDeletedEvent
    | OrganizationEvent
    | OrganizationDeletedEvent
    | MembershipEvent
    | SubscriptionEvent
    | SubscriptionItemEvent
    | PaymentAttemptEvent,
    Field(discriminator="type"),
]

ClerkEvent = (
    UserEvent
    | UserDeletedEvent
    | OrganizationEvent
    | OrganizationDeletedEvent
    | MembershipEvent
    | SubscriptionEvent
    | SubscriptionItemEvent
    | PaymentAttemptEvent
    | UnhandledEvent
)

_supported_event_adapter: TypeAdapter[Any] = TypeAdapter(SupportedClerkEvent)


def parse_clerk_event(payload: dict[str, Any]) -> ClerkEvent:
    """Decode a verified webhook body into its typed event variant.

    Raises:
        pydantic.ValidationError: If a supported kind carries a malformed payload.
    """
    event_type = payload.get("type")
    if event_type in SUPPORTED_EVENT_TYPES:
        event: ClerkEvent = _supported_event_adapter.validate_python(payload)
        return event
    data = payload.get("data")
    return UnhandledEvent(
        type=str(event_type or ""),
        data=data if isinstance(data, dict) else {},
    )
