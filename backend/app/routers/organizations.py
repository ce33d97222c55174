from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.access import is_admin, require
from app.core.database import get_db
from app.models.admin import Admin
from app.models.organization import Organization
from app.models.organization_membership import OrganizationMembership
from app.models.subscription import Subscription
from app.repositories.organization_membership_repository import (
    OrganizationMembershipRepository,
)
from app.repositories.organization_repository import OrganizationRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.schemas.organization import (
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
)
from app.schemas.organization_membership import OrganizationMembershipResponse
from app.schemas.subscription import SubscriptionResponse

router = APIRouter()


def _present(organization: Organization, principal: Admin | None) -> OrganizationResponse:
    """Private metadata is only shown to admins."""
    body = OrganizationResponse.model_validate(organization)
    if not is_admin(principal):
        body.private_metadata = None
    return body


def _get_organization(organization_id: UUID, db: Session) -> Organization:
    organization = OrganizationRepository(db).get_by_id(organization_id)
    if not organization:
        raise HTTPException(status_code=404, detail="Organization not found")
    return organization


@router.get(
    "/",
    response_model=list[OrganizationResponse],
    summary="List organizations",
)
async def list_organizations(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    principal: Admin | None = Depends(require("organizations", "read")),
) -> list[OrganizationResponse]:
    """List mirrored organizations with pagination."""
    repo = OrganizationRepository(db)
    response.headers["X-Total-Count"] = str(repo.count())
    return [
        _present(org, principal)
        for org in repo.get_all(skip=skip, limit=limit, order_by=order_by)
    ]


@router.get(
    "/{organization_id}",
    response_model=OrganizationResponse,
    summary="Get organization",
    responses={404: {"description": "Organization not found"}},
)
async def get_organization(
    organization_id: UUID,
    db: Session = Depends(get_db),
    principal: Admin | None = Depends(require("organizations", "read")),
) -> OrganizationResponse:
    """Get an organization by ID."""
    return _present(_get_organization(organization_id, db), principal)


@router.post(
    "/",
    response_model=OrganizationResponse,
    status_code=201,
    summary="Create organization",
    responses={
        401: {"description": "Unauthorized – admin credentials required"},
        409: {"description": "Organization with this external_id or slug already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_organization(
    data: OrganizationCreate,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("organizations", "create")),
) -> Organization:
    """Create an organization."""
    repo = OrganizationRepository(db)
    if repo.get_by_external_id(data.external_id):
        raise HTTPException(
            status_code=409, detail="Organization with this external_id already exists"
        )
    if data.slug and repo.get_by_slug(data.slug):
        raise HTTPException(status_code=409, detail="Organization with this slug already exists")
    return repo.create(data)


@router.patch(
    "/{organization_id}",
    response_model=OrganizationResponse,
    summary="Update organization",
    responses={
        401: {"description": "Unauthorized – admin credentials required"},
        404: {"description": "Organization not found"},
        409: {"description": "Slug already in use"},
        422: {"description": "Validation error"},
    },
)
async def update_organization(
    organization_id: UUID,
    data: OrganizationUpdate,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("organizations", "update")),
) -> Organization:
    """Update an organization."""
    repo = OrganizationRepository(db)
    if data.slug:
        other = repo.get_by_slug(data.slug)
        if other is not None and other.id != organization_id:
            raise HTTPException(status_code=409, detail="Slug already in use")
    organization = repo.update(organization_id, data)
    if not organization:
        raise HTTPException(status_code=404, detail="Organization not found")
    return organization


@router.delete(
    "/{organization_id}",
    status_code=204,
    summary="Delete organization",
    responses={
        401: {"description": "Unauthorized – admin credentials required"},
        404: {"description": "Organization not found"},
    },
)
async def delete_organization(
    organization_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("organizations", "delete")),
) -> None:
    """Delete an organization along with its memberships and subscriptions."""
    if not OrganizationRepository(db).delete(organization_id):
        raise HTTPException(status_code=404, detail="Organization not found")


@router.get(
    "/{organization_id}/memberships",
    response_model=list[OrganizationMembershipResponse],
    summary="List an organization's members",
    responses={
        401: {"description": "Unauthorized – admin credentials required"},
        404: {"description": "Organization not found"},
    },
)
async def list_organization_memberships(
    organization_id: UUID,
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    _principal: object = Depends(require("organization_memberships", "read")),
) -> list[OrganizationMembership]:
    _get_organization(organization_id, db)
    repo = OrganizationMembershipRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(organization_id=organization_id))
    return repo.get_all(skip=skip, limit=limit, organization_id=organization_id)


@router.get(
    "/{organization_id}/subscriptions",
    response_model=list[SubscriptionResponse],
    summary="List subscriptions billed to an organization",
    responses={
        401: {"description": "Unauthorized – admin credentials required"},
        404: {"description": "Organization not found"},
    },
)
async def list_organization_subscriptions(
    organization_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("subscriptions", "read")),
) -> list[Subscription]:
    _get_organization(organization_id, db)
    return SubscriptionRepository(db).get_by_subscriber_organization(organization_id)
