"""Mirror Clerk identity and billing events into the local store.

Every handler is idempotent on its own: it looks rows up by the Clerk id
(``external_id``) before writing, so redeliveries and out-of-order arrivals
converge on the same state. Events that reference rows the mirror has not
seen yet are acknowledged without writing (``DEFERRED``); Clerk redelivers
them later.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeVar
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.organization_membership import MembershipRole
from app.models.payment_attempt import PaymentAttemptStatus
from app.models.subscription import SubscriberType, SubscriptionStatus
from app.models.subscription_item import BillingInterval, SubscriptionItemStatus
from app.repositories.organization_membership_repository import (
    OrganizationMembershipRepository,
)
from app.repositories.organization_repository import OrganizationRepository
from app.repositories.payment_attempt_repository import PaymentAttemptRepository
from app.repositories.subscription_item_repository import SubscriptionItemRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.repositories.user_repository import UserRepository
from app.schemas.clerk_event import (
    ClerkEvent,
    MembershipEvent,
    OrganizationDeletedEvent,
    OrganizationEvent,
    PaymentAttemptEvent,
    PlanData,
    SubscriptionEvent,
    SubscriptionItemEvent,
    UserDeletedEvent,
    UserEvent,
)
from app.schemas.organization import OrganizationCreate, OrganizationUpdate
from app.schemas.organization_membership import (
    OrganizationMembershipCreate,
    OrganizationMembershipUpdate,
)
from app.schemas.payment_attempt import PaymentAttemptCreate, PaymentAttemptUpdate
from app.schemas.subscription import SubscriptionCreate, SubscriptionUpdate
from app.schemas.subscription_item import SubscriptionItemCreate, SubscriptionItemUpdate
from app.schemas.user import UserSyncCreate, UserSyncUpdate
from app.services.errors import StoreError, ValidationError

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


class SyncOutcome(str, Enum):
    """How an event was reconciled. Every outcome is acknowledged with 200."""

    APPLIED = "applied"
    ALREADY_EXISTS = "already_exists"
    DEFERRED = "deferred"
    NOT_FOUND = "not_found"
    IGNORED = "ignored"


def _from_millis(value: int | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromtimestamp(value / 1000, tz=UTC)


def _from_seconds(value: int | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromtimestamp(value, tz=UTC)


def _enum_value(enum_cls: type[E], *candidates: str | None) -> str | None:
    """Return the first candidate that names a member of ``enum_cls``."""
    for candidate in candidates:
        if candidate is None:
            continue
        try:
            return str(enum_cls(candidate).value)
        except ValueError:
            continue
    return None


class ClerkSyncService:
    """Apply verified Clerk webhook events through the repositories."""

    def __init__(self, db: Session):
        self.db = db
        self._handlers: dict[type, Callable[[Any, str], SyncOutcome]] = {
            UserEvent: self._handle_user,
            UserDeletedEvent: self._handle_user_deleted,
            OrganizationEvent: self._handle_organization,
            OrganizationDeletedEvent: self._handle_organization_deleted,
            MembershipEvent: self._handle_membership,
            SubscriptionEvent: self._handle_subscription,
            SubscriptionItemEvent: self._handle_subscription_item,
            PaymentAttemptEvent: self._handle_payment_attempt,
        }

    def handle(self, event: ClerkEvent, event_id: str) -> SyncOutcome:
        """Dispatch an event to the handler for its kind.

        Raises:
            ValidationError: The payload lacks required data (no primary email,
                a malformed field value).
            StoreError: The database failed for a reason other than a
                duplicate redelivery.
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.info("Clerk webhook %s [%s]: unhandled event type", event_id, event.type)
            return SyncOutcome.IGNORED

        try:
            outcome = handler(event, event_id)
        except PydanticValidationError as exc:
            self.db.rollback()
            logger.warning("Clerk webhook %s [%s]: invalid payload: %s", event_id, event.type, exc)
            raise ValidationError(f"Invalid {event.type} payload") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Clerk webhook %s [%s]: store error", event_id, event.type)
            raise StoreError(f"Error handling {event.type}") from exc

        logger.info("Clerk webhook %s [%s]: %s", event_id, event.type, outcome.value)
        return outcome

    def _insert(
        self,
        create: Callable[[], object],
        lookup: Callable[[], object | None],
        event_id: str,
        event_type: str,
    ) -> SyncOutcome:
        """Run ``create``; a unique-key conflict whose row now exists is a redelivery."""
        try:
            create()
        except IntegrityError as exc:
            self.db.rollback()
            if lookup() is not None:
                logger.info(
                    "Clerk webhook %s [%s]: concurrent delivery already stored the row",
                    event_id,
                    event_type,
                )
                return SyncOutcome.ALREADY_EXISTS
            raise StoreError(f"Error storing {event_type}") from exc
        return SyncOutcome.APPLIED

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def _handle_user(self, event: UserEvent, event_id: str) -> SyncOutcome:
        data = event.data
        primary_email = data.primary_email()
        if primary_email is None:
            logger.warning(
                "Clerk webhook %s [%s]: no primary email found for %s",
                event_id,
                event.type,
                data.id,
            )
            raise ValidationError("No primary email found")

        primary_phone = data.primary_phone()
        verified = primary_email.is_verified
        fields: dict[str, Any] = {
            "email": primary_email.email_address,
            "first_name": data.first_name,
            "last_name": data.last_name,
            "image_url": data.image_url,
            "email_verified": verified,
            "phone_number": primary_phone.phone_number if primary_phone else None,
            "phone_verified": bool(primary_phone and primary_phone.is_verified),
            "last_sign_in_at": _from_millis(data.last_sign_in_at),
            "public_metadata": data.public_metadata,
        }
        now = datetime.now(UTC)

        repo = UserRepository(self.db)
        user = repo.get_by_external_id(data.id)
        if user is None:
            create_data = UserSyncCreate(
                external_id=data.id,
                email_verified_at=now if verified else None,
                **fields,
            )
            return self._insert(
                lambda: repo.create(create_data),
                lambda: repo.get_by_external_id(data.id),
                event_id,
                event.type,
            )

        # email_verified_at records the first verification only
        if verified and user.email_verified_at is None:
            fields["email_verified_at"] = now
        repo.update(user.id, UserSyncUpdate(**fields))  # type: ignore[arg-type]
        return SyncOutcome.APPLIED

    def _handle_user_deleted(self, event: UserDeletedEvent, event_id: str) -> SyncOutcome:
        repo = UserRepository(self.db)
        user = repo.get_by_external_id(event.data.id)
        if user is None:
            logger.info(
                "Clerk webhook %s [%s]: user %s not found (already deleted)",
                event_id,
                event.type,
                event.data.id,
            )
            return SyncOutcome.NOT_FOUND
        repo.delete(user.id)  # type: ignore[arg-type]
        return SyncOutcome.APPLIED

    # ------------------------------------------------------------------
    # Organizations
    # ------------------------------------------------------------------

    def _handle_organization(self, event: OrganizationEvent, event_id: str) -> SyncOutcome:
        data = event.data
        repo = OrganizationRepository(self.db)
        organization = repo.get_by_external_id(data.id)

        if event.action == "created":
            if organization is not None:
                return SyncOutcome.ALREADY_EXISTS

            creator = None
            if data.created_by:
                creator = UserRepository(self.db).get_by_external_id(data.created_by)
            create_data = OrganizationCreate(
                external_id=data.id,
                name=data.name,
                slug=data.slug or None,
                image_url=data.image_url or None,
                max_allowed_memberships=data.max_allowed_memberships,
                public_metadata=data.public_metadata,
                private_metadata=data.private_metadata,
                created_by_id=creator.id if creator else None,  # type: ignore[arg-type]
            )
            return self._insert(
                lambda: repo.create(create_data),
                lambda: repo.get_by_external_id(data.id),
                event_id,
                event.type,
            )

        if organization is None:
            logger.info(
                "Clerk webhook %s [%s]: organization %s not found",
                event_id,
                event.type,
                data.id,
            )
            return SyncOutcome.NOT_FOUND

        changes: dict[str, Any] = {
            "slug": data.slug or None,
            "image_url": data.image_url or None,
            "max_allowed_memberships": data.max_allowed_memberships,
            "public_metadata": data.public_metadata,
            "private_metadata": data.private_metadata,
        }
        update_data = OrganizationUpdate(
            name=data.name,
            **{key: value for key, value in changes.items() if value is not None},
        )
        repo.update(organization.id, update_data)  # type: ignore[arg-type]
        return SyncOutcome.APPLIED

    def _handle_organization_deleted(
        self, event: OrganizationDeletedEvent, event_id: str
    ) -> SyncOutcome:
        repo = OrganizationRepository(self.db)
        organization = repo.get_by_external_id(event.data.id)
        if organization is None:
            logger.info(
                "Clerk webhook %s [%s]: organization %s not found (already deleted)",
                event_id,
                event.type,
                event.data.id,
            )
            return SyncOutcome.NOT_FOUND
        repo.delete(organization.id)  # type: ignore[arg-type]
        return SyncOutcome.APPLIED

    # ------------------------------------------------------------------
    # Memberships
    # ------------------------------------------------------------------

    def _membership_role(self, role: str | None, event_id: str, event_type: str) -> str:
        """Map a Clerk role key such as ``org:admin`` onto a local role."""
        if not role:
            return MembershipRole.MEMBER.value
        value = _enum_value(MembershipRole, role.removeprefix("org:"))
        if value is None:
            logger.warning(
                "Clerk webhook %s [%s]: unknown role %r, using member",
                event_id,
                event_type,
                role,
            )
            return MembershipRole.MEMBER.value
        return value

    def _handle_membership(self, event: MembershipEvent, event_id: str) -> SyncOutcome:
        data = event.data
        repo = OrganizationMembershipRepository(self.db)
        membership = repo.get_by_external_id(data.id)

        if event.action == "deleted":
            if membership is None:
                logger.info(
                    "Clerk webhook %s [%s]: membership %s not found (already deleted)",
                    event_id,
                    event.type,
                    data.id,
                )
                return SyncOutcome.NOT_FOUND
            repo.delete(membership.id)  # type: ignore[arg-type]
            return SyncOutcome.APPLIED

        if event.action == "updated":
            if membership is None:
                logger.info(
                    "Clerk webhook %s [%s]: membership %s not found",
                    event_id,
                    event.type,
                    data.id,
                )
                return SyncOutcome.NOT_FOUND
            changes: dict[str, Any] = {
                "role": self._membership_role(data.role, event_id, event.type),
            }
            if data.public_metadata is not None:
                changes["public_metadata"] = data.public_metadata
            repo.update(membership.id, OrganizationMembershipUpdate(**changes))  # type: ignore[arg-type]
            return SyncOutcome.APPLIED

        if membership is not None:
            return SyncOutcome.ALREADY_EXISTS

        org_external_id = data.organization.id if data.organization else None
        organization = (
            OrganizationRepository(self.db).get_by_external_id(org_external_id)
            if org_external_id
            else None
        )
        if organization is None:
            logger.info(
                "Clerk webhook %s [%s]: organization %s not found, may sync later",
                event_id,
                event.type,
                org_external_id,
            )
            return SyncOutcome.DEFERRED

        user_external_id = data.public_user_data.user_id if data.public_user_data else None
        user = (
            UserRepository(self.db).get_by_external_id(user_external_id)
            if user_external_id
            else None
        )
        if user is None:
            logger.info(
                "Clerk webhook %s [%s]: user %s not found, may sync later",
                event_id,
                event.type,
                user_external_id,
            )
            return SyncOutcome.DEFERRED

        create_data = OrganizationMembershipCreate(
            external_id=data.id,
            organization_id=organization.id,  # type: ignore[arg-type]
            user_id=user.id,  # type: ignore[arg-type]
            role=self._membership_role(data.role, event_id, event.type),  # type: ignore[arg-type]
            public_metadata=data.public_metadata,
        )
        return self._insert(
            lambda: repo.create(create_data),
            lambda: repo.get_by_external_id(data.id),
            event_id,
            event.type,
        )

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def _resolve_subscriber(
        self, customer: str
    ) -> tuple[SubscriberType, UUID | None, UUID | None] | None:
        """Probe organizations first, then users, for the billed customer."""
        organization = OrganizationRepository(self.db).get_by_external_id(customer)
        if organization is not None:
            return SubscriberType.ORGANIZATION, None, organization.id  # type: ignore[return-value]
        user = UserRepository(self.db).get_by_external_id(customer)
        if user is not None:
            return SubscriberType.USER, user.id, None  # type: ignore[return-value]
        return None

    def _handle_subscription(self, event: SubscriptionEvent, event_id: str) -> SyncOutcome:
        data = event.data
        present = data.model_fields_set
        fields: dict[str, Any] = {}
        for name in ("current_period_start", "current_period_end", "trial_start", "trial_end"):
            if name in present:
                fields[name] = _from_seconds(getattr(data, name))
        if "canceled_at" in present:
            fields["canceled_at"] = _from_seconds(data.canceled_at)
        if "cancel_at_period_end" in present and data.cancel_at_period_end is not None:
            fields["cancel_at_period_end"] = data.cancel_at_period_end
        if "metadata" in present:
            fields["subscription_metadata"] = data.metadata
        status = _enum_value(SubscriptionStatus, data.status, event.action)
        if status is not None:
            fields["status"] = status

        subscriber = self._resolve_subscriber(data.customer)
        repo = SubscriptionRepository(self.db)
        subscription = repo.get_by_external_id(data.id)

        if subscription is not None:
            if subscriber is None:
                logger.info(
                    "Clerk webhook %s [%s]: subscriber %s not found, keeping current subscriber",
                    event_id,
                    event.type,
                    data.customer,
                )
            else:
                subscriber_type, user_id, organization_id = subscriber
                repo.set_subscriber(subscription, subscriber_type.value, user_id, organization_id)
            repo.update(subscription.id, SubscriptionUpdate(**fields))  # type: ignore[arg-type]
            return SyncOutcome.APPLIED

        if event.action != "created":
            logger.info(
                "Clerk webhook %s [%s]: subscription %s not found",
                event_id,
                event.type,
                data.id,
            )
            return SyncOutcome.NOT_FOUND

        if subscriber is None:
            logger.info(
                "Clerk webhook %s [%s]: subscriber %s not found, may sync later",
                event_id,
                event.type,
                data.customer,
            )
            return SyncOutcome.DEFERRED

        subscriber_type, user_id, organization_id = subscriber
        create_data = SubscriptionCreate(
            external_id=data.id,
            subscriber_type=subscriber_type,
            subscriber_user_id=user_id,
            subscriber_organization_id=organization_id,
            **fields,
        )
        return self._insert(
            lambda: repo.create(create_data),
            lambda: repo.get_by_external_id(data.id),
            event_id,
            event.type,
        )

    # ------------------------------------------------------------------
    # Subscription items
    # ------------------------------------------------------------------

    @staticmethod
    def _plan_fields(plan: PlanData | str | None) -> dict[str, Any]:
        """Normalize a plan given as an object or a bare id."""
        if isinstance(plan, str):
            return {"plan_id": plan}
        if plan is None:
            return {}
        return {
            "plan_id": plan.id,
            "plan_name": plan.nickname or plan.name,
            "unit_amount": plan.amount,
            "currency": plan.currency,
            "interval": _enum_value(BillingInterval, plan.interval),
        }

    def _handle_subscription_item(
        self, event: SubscriptionItemEvent, event_id: str
    ) -> SyncOutcome:
        data = event.data
        subscription = SubscriptionRepository(self.db).get_by_external_id(data.subscription)
        if subscription is None:
            logger.info(
                "Clerk webhook %s [%s]: parent subscription %s not found, may sync later",
                event_id,
                event.type,
                data.subscription,
            )
            return SyncOutcome.DEFERRED

        fields = self._plan_fields(data.plan)
        if data.quantity:
            fields["quantity"] = data.quantity
        if "metadata" in data.model_fields_set:
            fields["item_metadata"] = data.metadata
        status = _enum_value(SubscriptionItemStatus, data.status, event.action)
        if status is not None:
            fields["status"] = status

        repo = SubscriptionItemRepository(self.db)
        item = repo.get_by_external_id(data.id)
        if item is not None:
            repo.update(item.id, SubscriptionItemUpdate(**fields))  # type: ignore[arg-type]
            return SyncOutcome.APPLIED

        if event.action != "created":
            logger.info(
                "Clerk webhook %s [%s]: subscription item %s not found",
                event_id,
                event.type,
                data.id,
            )
            return SyncOutcome.NOT_FOUND

        if "plan_id" not in fields:
            raise ValidationError("Subscription item has no plan")

        create_data = SubscriptionItemCreate(
            external_id=data.id,
            subscription_id=subscription.id,  # type: ignore[arg-type]
            **fields,
        )
        return self._insert(
            lambda: repo.create(create_data),
            lambda: repo.get_by_external_id(data.id),
            event_id,
            event.type,
        )

    # ------------------------------------------------------------------
    # Payment attempts
    # ------------------------------------------------------------------

    def _handle_payment_attempt(self, event: PaymentAttemptEvent, event_id: str) -> SyncOutcome:
        data = event.data
        present = data.model_fields_set

        subscription_id = None
        if data.subscription:
            subscription = SubscriptionRepository(self.db).get_by_external_id(data.subscription)
            if subscription is not None:
                subscription_id = subscription.id
            else:
                logger.info(
                    "Clerk webhook %s [%s]: subscription %s not found, storing unlinked",
                    event_id,
                    event.type,
                    data.subscription,
                )

        repo = PaymentAttemptRepository(self.db)
        attempt = repo.get_by_external_id(data.id)

        if attempt is not None:
            changes: dict[str, Any] = {}
            if subscription_id is not None:
                changes["subscription_id"] = subscription_id
            for source, target in (
                ("amount", "amount"),
                ("currency", "currency"),
                ("failure_reason", "failure_reason"),
                ("failure_code", "failure_code"),
                ("invoice", "invoice_id"),
                ("charge", "charge_id"),
                ("payment_method_type", "payment_method_type"),
                ("metadata", "payment_metadata"),
            ):
                if source in present:
                    changes[target] = getattr(data, source)
            status = _enum_value(PaymentAttemptStatus, data.status)
            if status is not None:
                changes["status"] = status
            if data.created:
                changes["attempted_at"] = _from_seconds(data.created)
            repo.update(attempt.id, PaymentAttemptUpdate(**changes))  # type: ignore[arg-type]
            return SyncOutcome.APPLIED

        create_data = PaymentAttemptCreate(
            external_id=data.id,
            subscription_id=subscription_id,  # type: ignore[arg-type]
            amount=data.amount or 0,
            currency=data.currency or "usd",
            status=_enum_value(PaymentAttemptStatus, data.status)  # type: ignore[arg-type]
            or PaymentAttemptStatus.PROCESSING.value,
            failure_reason=data.failure_reason,
            failure_code=data.failure_code,
            invoice_id=data.invoice,
            charge_id=data.charge,
            payment_method_type=data.payment_method_type,
            attempted_at=_from_seconds(data.created) or datetime.now(UTC),
            payment_metadata=data.metadata,
        )
        return self._insert(
            lambda: repo.create(create_data),
            lambda: repo.get_by_external_id(data.id),
            event_id,
            event.type,
        )
