from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by
from app.models.payment_attempt import PaymentAttempt
from app.models.subscription import Subscription
from app.models.subscription_item import SubscriptionItem
from app.schemas.subscription import SubscriptionCreate, SubscriptionUpdate


class SubscriptionRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
        status: str | None = None,
    ) -> list[Subscription]:
        query = self.db.query(Subscription)
        if status:
            query = query.filter(Subscription.status == status)
        query = apply_order_by(query, Subscription, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self, status: str | None = None) -> int:
        query = self.db.query(func.count(Subscription.id))
        if status:
            query = query.filter(Subscription.status == status)
        return query.scalar() or 0

    def get_by_id(self, subscription_id: UUID) -> Subscription | None:
        return self.db.query(Subscription).filter(Subscription.id == subscription_id).first()

    def get_by_external_id(self, external_id: str) -> Subscription | None:
        return self.db.query(Subscription).filter(Subscription.external_id == external_id).first()

    def get_by_subscriber_user(self, user_id: UUID) -> list[Subscription]:
        return (
            self.db.query(Subscription)
            .filter(Subscription.subscriber_user_id == user_id)
            .order_by(Subscription.created_at.desc())
            .all()
        )

    def get_by_subscriber_organization(self, organization_id: UUID) -> list[Subscription]:
        return (
            self.db.query(Subscription)
            .filter(Subscription.subscriber_organization_id == organization_id)
            .order_by(Subscription.created_at.desc())
            .all()
        )

    def create(self, data: SubscriptionCreate) -> Subscription:
        subscription = Subscription(**data.model_dump())
        self.db.add(subscription)
        self.db.commit()
        self.db.refresh(subscription)
        return subscription

    def update(self, subscription_id: UUID, data: SubscriptionUpdate) -> Subscription | None:
        subscription = self.get_by_id(subscription_id)
        if not subscription:
            return None
        update_data = data.model_dump(exclude_unset=True)
        # status and cancel_at_period_end are NOT NULL columns
        for key in ("status", "cancel_at_period_end"):
            if key in update_data and update_data[key] is None:
                del update_data[key]
        for key, value in update_data.items():
            setattr(subscription, key, value)
        self.db.commit()
        self.db.refresh(subscription)
        return subscription

    def set_subscriber(
        self,
        subscription: Subscription,
        subscriber_type: str,
        user_id: UUID | None,
        organization_id: UUID | None,
    ) -> None:
        """Stage a subscriber change; the caller commits."""
        subscription.subscriber_type = subscriber_type  # type: ignore[assignment]
        subscription.subscriber_user_id = user_id  # type: ignore[assignment]
        subscription.subscriber_organization_id = organization_id  # type: ignore[assignment]

    def delete(self, subscription_id: UUID) -> bool:
        subscription = self.get_by_id(subscription_id)
        if not subscription:
            return False
        self.stage_delete([subscription.id])  # type: ignore[list-item]
        self.db.commit()
        return True

    def stage_delete(self, subscription_ids: list[UUID]) -> int:
        """Remove subscriptions together with their items, without committing.

        Payment attempts keep their history but lose the subscription link.
        Returns the number of subscriptions removed.
        """
        if not subscription_ids:
            return 0
        self.db.query(SubscriptionItem).filter(
            SubscriptionItem.subscription_id.in_(subscription_ids)
        ).delete(synchronize_session=False)
        self.db.query(PaymentAttempt).filter(
            PaymentAttempt.subscription_id.in_(subscription_ids)
        ).update({PaymentAttempt.subscription_id: None}, synchronize_session=False)
        removed = (
            self.db.query(Subscription)
            .filter(Subscription.id.in_(subscription_ids))
            .delete(synchronize_session=False)
        )
        return int(removed)
