from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.access import require
from app.core.database import get_db
from app.models.organization_membership import OrganizationMembership
from app.repositories.organization_membership_repository import (
    OrganizationMembershipRepository,
)
from app.repositories.organization_repository import OrganizationRepository
from app.repositories.user_repository import UserRepository
from app.schemas.organization_membership import (
    OrganizationMembershipCreate,
    OrganizationMembershipResponse,
    OrganizationMembershipUpdate,
)

router = APIRouter()

UNAUTHORIZED = {401: {"description": "Unauthorized – admin credentials required"}}


@router.get(
    "/",
    response_model=list[OrganizationMembershipResponse],
    summary="List organization memberships",
    responses={**UNAUTHORIZED},
)
async def list_memberships(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    organization_id: UUID | None = Query(default=None),
    user_id: UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    _principal: object = Depends(require("organization_memberships", "read")),
) -> list[OrganizationMembership]:
    """List memberships, optionally narrowed to one organization or user."""
    repo = OrganizationMembershipRepository(db)
    response.headers["X-Total-Count"] = str(
        repo.count(organization_id=organization_id, user_id=user_id)
    )
    return repo.get_all(
        skip=skip,
        limit=limit,
        order_by=order_by,
        organization_id=organization_id,
        user_id=user_id,
    )


@router.get(
    "/{membership_id}",
    response_model=OrganizationMembershipResponse,
    summary="Get organization membership",
    responses={**UNAUTHORIZED, 404: {"description": "Membership not found"}},
)
async def get_membership(
    membership_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("organization_memberships", "read")),
) -> OrganizationMembership:
    membership = OrganizationMembershipRepository(db).get_by_id(membership_id)
    if not membership:
        raise HTTPException(status_code=404, detail="Membership not found")
    return membership


@router.post(
    "/",
    response_model=OrganizationMembershipResponse,
    status_code=201,
    summary="Create organization membership",
    responses={
        **UNAUTHORIZED,
        404: {"description": "Organization or user not found"},
        409: {"description": "Membership with this external_id already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_membership(
    data: OrganizationMembershipCreate,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("organization_memberships", "create")),
) -> OrganizationMembership:
    repo = OrganizationMembershipRepository(db)
    if repo.get_by_external_id(data.external_id):
        raise HTTPException(
            status_code=409, detail="Membership with this external_id already exists"
        )
    if not OrganizationRepository(db).get_by_id(data.organization_id):
        raise HTTPException(status_code=404, detail="Organization not found")
    if not UserRepository(db).get_by_id(data.user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return repo.create(data)


@router.patch(
    "/{membership_id}",
    response_model=OrganizationMembershipResponse,
    summary="Update organization membership",
    responses={
        **UNAUTHORIZED,
        404: {"description": "Membership not found"},
        422: {"description": "Validation error"},
    },
)
async def update_membership(
    membership_id: UUID,
    data: OrganizationMembershipUpdate,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("organization_memberships", "update")),
) -> OrganizationMembership:
    membership = OrganizationMembershipRepository(db).update(membership_id, data)
    if not membership:
        raise HTTPException(status_code=404, detail="Membership not found")
    return membership


@router.delete(
    "/{membership_id}",
    status_code=204,
    summary="Delete organization membership",
    responses={**UNAUTHORIZED, 404: {"description": "Membership not found"}},
)
async def delete_membership(
    membership_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("organization_memberships", "delete")),
) -> None:
    if not OrganizationMembershipRepository(db).delete(membership_id):
        raise HTTPException(status_code=404, detail="Membership not found")
