from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.access import require
from app.core.database import get_db
from app.models.payment_attempt import PaymentAttempt
from app.models.subscription import SubscriberType, Subscription
from app.models.subscription_item import SubscriptionItem
from app.repositories.organization_repository import OrganizationRepository
from app.repositories.payment_attempt_repository import PaymentAttemptRepository
from app.repositories.subscription_item_repository import SubscriptionItemRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.repositories.user_repository import UserRepository
from app.schemas.payment_attempt import PaymentAttemptResponse
from app.schemas.subscription import SubscriptionCreate, SubscriptionResponse, SubscriptionUpdate
from app.schemas.subscription_item import SubscriptionItemResponse

router = APIRouter()

UNAUTHORIZED = {401: {"description": "Unauthorized – admin credentials required"}}


def _get_subscription(subscription_id: UUID, db: Session) -> Subscription:
    subscription = SubscriptionRepository(db).get_by_id(subscription_id)
    if not subscription:
        raise HTTPException(status_code=404, detail="Subscription not found")
    return subscription


@router.get(
    "/",
    response_model=list[SubscriptionResponse],
    summary="List subscriptions",
    responses={**UNAUTHORIZED},
)
async def list_subscriptions(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    status: str | None = Query(default=None),
    db: Session = Depends(get_db),
    _principal: object = Depends(require("subscriptions", "read")),
) -> list[Subscription]:
    """List subscriptions with optional status filter."""
    repo = SubscriptionRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(status=status))
    return repo.get_all(skip=skip, limit=limit, order_by=order_by, status=status)


@router.get(
    "/{subscription_id}",
    response_model=SubscriptionResponse,
    summary="Get subscription",
    responses={**UNAUTHORIZED, 404: {"description": "Subscription not found"}},
)
async def get_subscription(
    subscription_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("subscriptions", "read")),
) -> Subscription:
    return _get_subscription(subscription_id, db)


@router.post(
    "/",
    response_model=SubscriptionResponse,
    status_code=201,
    summary="Create subscription",
    responses={
        **UNAUTHORIZED,
        404: {"description": "Subscriber not found"},
        409: {"description": "Subscription with this external_id already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_subscription(
    data: SubscriptionCreate,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("subscriptions", "create")),
) -> Subscription:
    repo = SubscriptionRepository(db)
    if repo.get_by_external_id(data.external_id):
        raise HTTPException(
            status_code=409, detail="Subscription with this external_id already exists"
        )
    if data.subscriber_type == SubscriberType.USER.value:
        if not UserRepository(db).get_by_id(data.subscriber_user_id):  # type: ignore[arg-type]
            raise HTTPException(status_code=404, detail="Subscriber user not found")
    elif not OrganizationRepository(db).get_by_id(data.subscriber_organization_id):  # type: ignore[arg-type]
        raise HTTPException(status_code=404, detail="Subscriber organization not found")
    return repo.create(data)


@router.patch(
    "/{subscription_id}",
    response_model=SubscriptionResponse,
    summary="Update subscription",
    responses={
        **UNAUTHORIZED,
        404: {"description": "Subscription not found"},
        422: {"description": "Validation error"},
    },
)
async def update_subscription(
    subscription_id: UUID,
    data: SubscriptionUpdate,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("subscriptions", "update")),
) -> Subscription:
    subscription = SubscriptionRepository(db).update(subscription_id, data)
    if not subscription:
        raise HTTPException(status_code=404, detail="Subscription not found")
    return subscription


@router.delete(
    "/{subscription_id}",
    status_code=204,
    summary="Delete subscription",
    responses={**UNAUTHORIZED, 404: {"description": "Subscription not found"}},
)
async def delete_subscription(
    subscription_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("subscriptions", "delete")),
) -> None:
    """Delete a subscription and its items; payment attempts are kept unlinked."""
    if not SubscriptionRepository(db).delete(subscription_id):
        raise HTTPException(status_code=404, detail="Subscription not found")


@router.get(
    "/{subscription_id}/items",
    response_model=list[SubscriptionItemResponse],
    summary="List a subscription's items",
    responses={**UNAUTHORIZED, 404: {"description": "Subscription not found"}},
)
async def list_subscription_items_for_subscription(
    subscription_id: UUID,
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    _principal: object = Depends(require("subscription_items", "read")),
) -> list[SubscriptionItem]:
    _get_subscription(subscription_id, db)
    repo = SubscriptionItemRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(subscription_id=subscription_id))
    return repo.get_all(skip=skip, limit=limit, subscription_id=subscription_id)


@router.get(
    "/{subscription_id}/payment_attempts",
    response_model=list[PaymentAttemptResponse],
    summary="List a subscription's payment attempts",
    responses={**UNAUTHORIZED, 404: {"description": "Subscription not found"}},
)
async def list_payment_attempts_for_subscription(
    subscription_id: UUID,
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    _principal: object = Depends(require("payment_attempts", "read")),
) -> list[PaymentAttempt]:
    _get_subscription(subscription_id, db)
    repo = PaymentAttemptRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(subscription_id=subscription_id))
    return repo.get_all(skip=skip, limit=limit, subscription_id=subscription_id)
