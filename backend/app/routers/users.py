from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.access import require
from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.models.organization_membership import OrganizationMembership
from app.models.shared import as_utc
from app.models.subscription import Subscription
from app.models.user import User
from app.repositories.organization_membership_repository import (
    OrganizationMembershipRepository,
)
from app.repositories.subscription_repository import SubscriptionRepository
from app.repositories.user_repository import UserRepository
from app.schemas.organization_membership import OrganizationMembershipResponse
from app.schemas.subscription import SubscriptionResponse
from app.schemas.user import (
    UserCreate,
    UserResponse,
    UserUpdate,
    VerificationEmailResponse,
)
from app.services.email_verification import EmailVerificationService

router = APIRouter()


def _get_user(user_id: UUID, db: Session) -> User:
    user = UserRepository(db).get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get(
    "/",
    response_model=list[UserResponse],
    summary="List users",
)
async def list_users(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    db: Session = Depends(get_db),
    _principal: object = Depends(require("users", "read")),
) -> list[User]:
    """List mirrored users with pagination."""
    repo = UserRepository(db)
    response.headers["X-Total-Count"] = str(repo.count())
    return repo.get_all(skip=skip, limit=limit, order_by=order_by)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get user",
    responses={404: {"description": "User not found"}},
)
async def get_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("users", "read")),
) -> User:
    """Get a user by ID."""
    return _get_user(user_id, db)


@router.post(
    "/",
    response_model=UserResponse,
    status_code=201,
    summary="Create user",
    responses={
        401: {"description": "Unauthorized – admin credentials required"},
        409: {"description": "User with this external_id or email already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("users", "create")),
) -> User:
    """Create a user."""
    repo = UserRepository(db)
    if repo.get_by_external_id(data.external_id):
        raise HTTPException(status_code=409, detail="User with this external_id already exists")
    if repo.get_by_email(data.email):
        raise HTTPException(status_code=409, detail="User with this email already exists")
    return repo.create(data)


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update user",
    responses={
        401: {"description": "Unauthorized – admin credentials required"},
        404: {"description": "User not found"},
        409: {"description": "Email already in use"},
        422: {"description": "Validation error"},
    },
)
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("users", "update")),
) -> User:
    """Update a user."""
    repo = UserRepository(db)
    if data.email is not None:
        other = repo.get_by_email(data.email)
        if other is not None and other.id != user_id:
            raise HTTPException(status_code=409, detail="Email already in use")
    user = repo.update(user_id, data)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.delete(
    "/{user_id}",
    status_code=204,
    summary="Delete user",
    responses={
        401: {"description": "Unauthorized – admin credentials required"},
        404: {"description": "User not found"},
    },
)
async def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("users", "delete")),
) -> None:
    """Delete a user along with its memberships and subscriptions."""
    if not UserRepository(db).delete(user_id):
        raise HTTPException(status_code=404, detail="User not found")


@router.get(
    "/{user_id}/memberships",
    response_model=list[OrganizationMembershipResponse],
    summary="List a user's organization memberships",
    responses={
        401: {"description": "Unauthorized – admin credentials required"},
        404: {"description": "User not found"},
    },
)
async def list_user_memberships(
    user_id: UUID,
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    _principal: object = Depends(require("organization_memberships", "read")),
) -> list[OrganizationMembership]:
    _get_user(user_id, db)
    repo = OrganizationMembershipRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(user_id=user_id))
    return repo.get_all(skip=skip, limit=limit, user_id=user_id)


@router.get(
    "/{user_id}/subscriptions",
    response_model=list[SubscriptionResponse],
    summary="List subscriptions billed to a user",
    responses={
        401: {"description": "Unauthorized – admin credentials required"},
        404: {"description": "User not found"},
    },
)
async def list_user_subscriptions(
    user_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("subscriptions", "read")),
) -> list[Subscription]:
    _get_user(user_id, db)
    return SubscriptionRepository(db).get_by_subscriber_user(user_id)


@router.post(
    "/{user_id}/verification_email",
    response_model=VerificationEmailResponse,
    summary="Send an email verification link",
    responses={
        401: {"description": "Unauthorized – admin credentials required"},
        404: {"description": "User not found"},
    },
)
async def send_verification_email(
    user_id: UUID,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    _principal: object = Depends(require("users", "update")),
) -> VerificationEmailResponse:
    """Issue a fresh verification token and email the link to the user."""
    user = _get_user(user_id, db)
    await EmailVerificationService(db, settings).issue(user)
    return VerificationEmailResponse(
        email=str(user.email),
        expires_at=as_utc(user.email_verification_expires),  # type: ignore[arg-type]
    )
