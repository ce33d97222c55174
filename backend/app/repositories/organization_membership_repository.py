from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.sorting import apply_order_by
from app.models.organization_membership import OrganizationMembership
from app.schemas.organization_membership import (
    OrganizationMembershipCreate,
    OrganizationMembershipUpdate,
)


class OrganizationMembershipRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
        organization_id: UUID | None = None,
        user_id: UUID | None = None,
    ) -> list[OrganizationMembership]:
        query = self.db.query(OrganizationMembership)
        if organization_id is not None:
            query = query.filter(OrganizationMembership.organization_id == organization_id)
        if user_id is not None:
            query = query.filter(OrganizationMembership.user_id == user_id)
        query = apply_order_by(query, OrganizationMembership, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self, organization_id: UUID | None = None, user_id: UUID | None = None) -> int:
        query = self.db.query(func.count(OrganizationMembership.id))
        if organization_id is not None:
            query = query.filter(OrganizationMembership.organization_id == organization_id)
        if user_id is not None:
            query = query.filter(OrganizationMembership.user_id == user_id)
        return query.scalar() or 0

    def get_by_id(self, membership_id: UUID) -> OrganizationMembership | None:
        return (
            self.db.query(OrganizationMembership)
            .filter(OrganizationMembership.id == membership_id)
            .first()
        )

    def get_by_external_id(self, external_id: str) -> OrganizationMembership | None:
        return (
            self.db.query(OrganizationMembership)
            .filter(OrganizationMembership.external_id == external_id)
            .first()
        )

    def create(self, data: OrganizationMembershipCreate) -> OrganizationMembership:
        membership = OrganizationMembership(**data.model_dump())
        self.db.add(membership)
        self.db.commit()
        self.db.refresh(membership)
        return membership

    def update(
        self, membership_id: UUID, data: OrganizationMembershipUpdate
    ) -> OrganizationMembership | None:
        membership = self.get_by_id(membership_id)
        if not membership:
            return None
        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("role", "") is None:
            del update_data["role"]
        for key, value in update_data.items():
            setattr(membership, key, value)
        self.db.commit()
        self.db.refresh(membership)
        return membership

    def delete(self, membership_id: UUID) -> bool:
        membership = self.get_by_id(membership_id)
        if not membership:
            return False
        self.db.delete(membership)
        self.db.commit()
        return True

    def stage_delete_for_user(self, user_id: UUID) -> int:
        """Remove every membership of a user, without committing."""
        return int(
            self.db.query(OrganizationMembership)
            .filter(OrganizationMembership.user_id == user_id)
            .delete(synchronize_session=False)
        )

    def stage_delete_for_organization(self, organization_id: UUID) -> int:
        """Remove every membership in an organization, without committing."""
        return int(
            self.db.query(OrganizationMembership)
            .filter(OrganizationMembership.organization_id == organization_id)
            .delete(synchronize_session=False)
        )
