from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by
from app.models.subscription_item import SubscriptionItem
from app.schemas.subscription_item import SubscriptionItemCreate, SubscriptionItemUpdate


class SubscriptionItemRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
        subscription_id: UUID | None = None,
    ) -> list[SubscriptionItem]:
        query = self.db.query(SubscriptionItem)
        if subscription_id is not None:
            query = query.filter(SubscriptionItem.subscription_id == subscription_id)
        query = apply_order_by(query, SubscriptionItem, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self, subscription_id: UUID | None = None) -> int:
        query = self.db.query(func.count(SubscriptionItem.id))
        if subscription_id is not None:
            query = query.filter(SubscriptionItem.subscription_id == subscription_id)
        return query.scalar() or 0

    def get_by_id(self, item_id: UUID) -> SubscriptionItem | None:
        return self.db.query(SubscriptionItem).filter(SubscriptionItem.id == item_id).first()

    def get_by_external_id(self, external_id: str) -> SubscriptionItem | None:
        return (
            self.db.query(SubscriptionItem)
            .filter(SubscriptionItem.external_id == external_id)
            .first()
        )

    def create(self, data: SubscriptionItemCreate) -> SubscriptionItem:
        item = SubscriptionItem(**data.model_dump())
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def update(self, item_id: UUID, data: SubscriptionItemUpdate) -> SubscriptionItem | None:
        item = self.get_by_id(item_id)
        if not item:
            return None
        update_data = data.model_dump(exclude_unset=True)
        for key in ("plan_id", "quantity", "status"):
            if key in update_data and update_data[key] is None:
                del update_data[key]
        for key, value in update_data.items():
            setattr(item, key, value)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete(self, item_id: UUID) -> bool:
        item = self.get_by_id(item_id)
        if not item:
            return False
        self.db.delete(item)
        self.db.commit()
        return True
