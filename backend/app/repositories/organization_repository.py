from __future__ import annotations

from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by
from app.models.organization import Organization
from app.models.subscription import Subscription
from app.repositories.organization_membership_repository import (
    OrganizationMembershipRepository,
)
from app.repositories.subscription_repository import SubscriptionRepository
from app.schemas.organization import OrganizationCreate, OrganizationUpdate


class OrganizationRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[Organization]:
        query = self.db.query(Organization)
        query = apply_order_by(query, Organization, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self) -> int:
        return self.db.query(func.count(Organization.id)).scalar() or 0

    def get_by_id(self, org_id: UUID) -> Organization | None:
        return self.db.query(Organization).filter(Organization.id == org_id).first()

    def get_by_external_id(self, external_id: str) -> Organization | None:
        return (
            self.db.query(Organization).filter(Organization.external_id == external_id).first()
        )

    def get_by_slug(self, slug: str) -> Organization | None:
        return self.db.query(Organization).filter(Organization.slug == slug).first()

    def create(self, data: OrganizationCreate) -> Organization:
        org = Organization(**data.model_dump())
        self.db.add(org)
        self.db.commit()
        self.db.refresh(org)
        return org

    def update(self, org_id: UUID, data: OrganizationUpdate) -> Organization | None:
        org = self.get_by_id(org_id)
        if not org:
            return None
        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("name", "") is None:
            del update_data["name"]
        for key, value in update_data.items():
            setattr(org, key, value)
        self.db.commit()
        self.db.refresh(org)
        return org

    def delete(self, org_id: UUID) -> bool:
        """Delete an organization after its memberships and subscriptions."""
        org = self.get_by_id(org_id)
        if not org:
            return False

        OrganizationMembershipRepository(self.db).stage_delete_for_organization(org_id)

        subscription_ids = [
            row.id
            for row in self.db.query(Subscription.id)
            .filter(Subscription.subscriber_organization_id == org_id)
            .all()
        ]
        SubscriptionRepository(self.db).stage_delete(subscription_ids)

        self.db.delete(org)
        self.db.commit()
        return True
