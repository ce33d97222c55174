from datetime import datetime
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by
from app.models.organization import Organization
from app.models.subscription import Subscription
from app.models.user import User
from app.repositories.organization_membership_repository import (
    OrganizationMembershipRepository,
)
from app.repositories.subscription_repository import SubscriptionRepository
from app.schemas.user import UserCreate, UserUpdate


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[User]:
        query = apply_order_by(self.db.query(User), User, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self) -> int:
        return self.db.query(func.count(User.id)).scalar() or 0

    def get_by_id(self, user_id: UUID) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_external_id(self, external_id: str) -> User | None:
        return self.db.query(User).filter(User.external_id == external_id).first()

    def get_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def create(self, data: UserCreate) -> User:
        user = User(**data.model_dump())
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def update(self, user_id: UUID, data: UserUpdate) -> User | None:
        user = self.get_by_id(user_id)
        if not user:
            return None
        update_data = data.model_dump(exclude_unset=True)
        # Boolean flags and email are NOT NULL
        for key in ("email", "email_verified", "phone_verified"):
            if key in update_data and update_data[key] is None:
                del update_data[key]
        for key, value in update_data.items():
            setattr(user, key, value)
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete(self, user_id: UUID) -> bool:
        """Delete a user after its memberships and subscriptions."""
        user = self.get_by_id(user_id)
        if not user:
            return False

        OrganizationMembershipRepository(self.db).stage_delete_for_user(user_id)

        subscription_ids = [
            row.id
            for row in self.db.query(Subscription.id)
            .filter(Subscription.subscriber_user_id == user_id)
            .all()
        ]
        SubscriptionRepository(self.db).stage_delete(subscription_ids)

        # created_by is a weak reference
        self.db.query(Organization).filter(Organization.created_by_id == user_id).update(
            {Organization.created_by_id: None}, synchronize_session=False
        )

        self.db.delete(user)
        self.db.commit()
        return True

    def set_verification_token(self, user: User, token: str, expires_at: datetime) -> User:
        user.email_verification_token = token  # type: ignore[assignment]
        user.email_verification_expires = expires_at  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_by_verification_token(self, email: str, token: str, now: datetime) -> User | None:
        """Find the user holding an unexpired verification token for this email."""
        return (
            self.db.query(User)
            .filter(
                User.email == email,
                User.email_verification_token == token,
                User.email_verification_expires > now,
            )
            .first()
        )

    def mark_email_verified(self, user: User, now: datetime) -> User:
        """Consume the verification token and flag the email as verified."""
        user.email_verified = True  # type: ignore[assignment]
        if user.email_verified_at is None:
            user.email_verified_at = now  # type: ignore[assignment]
        user.email_verification_token = None  # type: ignore[assignment]
        user.email_verification_expires = None  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(user)
        return user
