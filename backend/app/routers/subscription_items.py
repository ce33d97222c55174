from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.access import require
from app.core.database import get_db
from app.models.subscription_item import SubscriptionItem
from app.repositories.subscription_item_repository import SubscriptionItemRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.schemas.subscription_item import (
    SubscriptionItemCreate,
    SubscriptionItemResponse,
    SubscriptionItemUpdate,
)

router = APIRouter()

UNAUTHORIZED = {401: {"description": "Unauthorized – admin credentials required"}}


@router.get(
    "/",
    response_model=list[SubscriptionItemResponse],
    summary="List subscription items",
    responses={**UNAUTHORIZED},
)
async def list_subscription_items(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    subscription_id: UUID | None = Query(default=None),
    db: Session = Depends(get_db),
    _principal: object = Depends(require("subscription_items", "read")),
) -> list[SubscriptionItem]:
    repo = SubscriptionItemRepository(db)
    response.headers["X-Total-Count"] = str(repo.count(subscription_id=subscription_id))
    return repo.get_all(
        skip=skip, limit=limit, order_by=order_by, subscription_id=subscription_id
    )


@router.get(
    "/{item_id}",
    response_model=SubscriptionItemResponse,
    summary="Get subscription item",
    responses={**UNAUTHORIZED, 404: {"description": "Subscription item not found"}},
)
async def get_subscription_item(
    item_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("subscription_items", "read")),
) -> SubscriptionItem:
    item = SubscriptionItemRepository(db).get_by_id(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Subscription item not found")
    return item


@router.post(
    "/",
    response_model=SubscriptionItemResponse,
    status_code=201,
    summary="Create subscription item",
    responses={
        **UNAUTHORIZED,
        404: {"description": "Subscription not found"},
        409: {"description": "Subscription item with this external_id already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_subscription_item(
    data: SubscriptionItemCreate,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("subscription_items", "create")),
) -> SubscriptionItem:
    repo = SubscriptionItemRepository(db)
    if repo.get_by_external_id(data.external_id):
        raise HTTPException(
            status_code=409, detail="Subscription item with this external_id already exists"
        )
    if not SubscriptionRepository(db).get_by_id(data.subscription_id):
        raise HTTPException(status_code=404, detail="Subscription not found")
    return repo.create(data)


@router.patch(
    "/{item_id}",
    response_model=SubscriptionItemResponse,
    summary="Update subscription item",
    responses={
        **UNAUTHORIZED,
        404: {"description": "Subscription item not found"},
        422: {"description": "Validation error"},
    },
)
async def update_subscription_item(
    item_id: UUID,
    data: SubscriptionItemUpdate,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("subscription_items", "update")),
) -> SubscriptionItem:
    item = SubscriptionItemRepository(db).update(item_id, data)
    if not item:
        raise HTTPException(status_code=404, detail="Subscription item not found")
    return item


@router.delete(
    "/{item_id}",
    status_code=204,
    summary="Delete subscription item",
    responses={**UNAUTHORIZED, 404: {"description": "Subscription item not found"}},
)
async def delete_subscription_item(
    item_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("subscription_items", "delete")),
) -> None:
    if not SubscriptionItemRepository(db).delete(item_id):
        raise HTTPException(status_code=404, detail="Subscription item not found")
