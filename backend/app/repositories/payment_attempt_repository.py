from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by
from app.models.payment_attempt import PaymentAttempt
from app.schemas.payment_attempt import PaymentAttemptCreate, PaymentAttemptUpdate


class PaymentAttemptRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
        subscription_id: UUID | None = None,
        status: str | None = None,
    ) -> list[PaymentAttempt]:
        query = self.db.query(PaymentAttempt)
        if subscription_id is not None:
            query = query.filter(PaymentAttempt.subscription_id == subscription_id)
        if status:
            query = query.filter(PaymentAttempt.status == status)
        query = apply_order_by(query, PaymentAttempt, order_by, default_field="attempted_at")
        return query.offset(skip).limit(limit).all()

    def count(self, subscription_id: UUID | None = None, status: str | None = None) -> int:
        query = self.db.query(func.count(PaymentAttempt.id))
        if subscription_id is not None:
            query = query.filter(PaymentAttempt.subscription_id == subscription_id)
        if status:
            query = query.filter(PaymentAttempt.status == status)
        return query.scalar() or 0

    def get_by_id(self, attempt_id: UUID) -> PaymentAttempt | None:
        return self.db.query(PaymentAttempt).filter(PaymentAttempt.id == attempt_id).first()

    def get_by_external_id(self, external_id: str) -> PaymentAttempt | None:
        return (
            self.db.query(PaymentAttempt).filter(PaymentAttempt.external_id == external_id).first()
        )

    def create(self, data: PaymentAttemptCreate) -> PaymentAttempt:
        attempt = PaymentAttempt(**data.model_dump())
        self.db.add(attempt)
        self.db.commit()
        self.db.refresh(attempt)
        return attempt

    def update(self, attempt_id: UUID, data: PaymentAttemptUpdate) -> PaymentAttempt | None:
        attempt = self.get_by_id(attempt_id)
        if not attempt:
            return None
        update_data = data.model_dump(exclude_unset=True)
        for key in ("amount", "currency", "status", "attempted_at"):
            if key in update_data and update_data[key] is None:
                del update_data[key]
        for key, value in update_data.items():
            setattr(attempt, key, value)
        self.db.commit()
        self.db.refresh(attempt)
        return attempt

    def delete(self, attempt_id: UUID) -> bool:
        attempt = self.get_by_id(attempt_id)
        if not attempt:
            return False
        self.db.delete(attempt)
        self.db.commit()
        return True
