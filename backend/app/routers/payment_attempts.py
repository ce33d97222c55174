from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.access import require
from app.core.database import get_db
from app.models.payment_attempt import PaymentAttempt
from app.repositories.payment_attempt_repository import PaymentAttemptRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.schemas.payment_attempt import (
    PaymentAttemptCreate,
    PaymentAttemptResponse,
    PaymentAttemptUpdate,
)

router = APIRouter()

UNAUTHORIZED = {401: {"description": "Unauthorized – admin credentials required"}}


@router.get(
    "/",
    response_model=list[PaymentAttemptResponse],
    summary="List payment attempts",
    responses={**UNAUTHORIZED},
)
async def list_payment_attempts(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    subscription_id: UUID | None = Query(default=None),
    status: str | None = Query(default=None),
    db: Session = Depends(get_db),
    _principal: object = Depends(require("payment_attempts", "read")),
) -> list[PaymentAttempt]:
    """List payment attempts, newest attempt first by default."""
    repo = PaymentAttemptRepository(db)
    response.headers["X-Total-Count"] = str(
        repo.count(subscription_id=subscription_id, status=status)
    )
    return repo.get_all(
        skip=skip,
        limit=limit,
        order_by=order_by,
        subscription_id=subscription_id,
        status=status,
    )


@router.get(
    "/{attempt_id}",
    response_model=PaymentAttemptResponse,
    summary="Get payment attempt",
    responses={**UNAUTHORIZED, 404: {"description": "Payment attempt not found"}},
)
async def get_payment_attempt(
    attempt_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("payment_attempts", "read")),
) -> PaymentAttempt:
    attempt = PaymentAttemptRepository(db).get_by_id(attempt_id)
    if not attempt:
        raise HTTPException(status_code=404, detail="Payment attempt not found")
    return attempt


@router.post(
    "/",
    response_model=PaymentAttemptResponse,
    status_code=201,
    summary="Create payment attempt",
    responses={
        **UNAUTHORIZED,
        404: {"description": "Subscription not found"},
        409: {"description": "Payment attempt with this external_id already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_payment_attempt(
    data: PaymentAttemptCreate,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("payment_attempts", "create")),
) -> PaymentAttempt:
    repo = PaymentAttemptRepository(db)
    if repo.get_by_external_id(data.external_id):
        raise HTTPException(
            status_code=409, detail="Payment attempt with this external_id already exists"
        )
    if data.subscription_id is not None and not SubscriptionRepository(db).get_by_id(
        data.subscription_id
    ):
        raise HTTPException(status_code=404, detail="Subscription not found")
    return repo.create(data)


@router.patch(
    "/{attempt_id}",
    response_model=PaymentAttemptResponse,
    summary="Update payment attempt",
    responses={
        **UNAUTHORIZED,
        404: {"description": "Payment attempt not found"},
        422: {"description": "Validation error"},
    },
)
async def update_payment_attempt(
    attempt_id: UUID,
    data: PaymentAttemptUpdate,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("payment_attempts", "update")),
) -> PaymentAttempt:
    attempt = PaymentAttemptRepository(db).update(attempt_id, data)
    if not attempt:
        raise HTTPException(status_code=404, detail="Payment attempt not found")
    return attempt


@router.delete(
    "/{attempt_id}",
    status_code=204,
    summary="Delete payment attempt",
    responses={**UNAUTHORIZED, 404: {"description": "Payment attempt not found"}},
)
async def delete_payment_attempt(
    attempt_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("payment_attempts", "delete")),
) -> None:
    if not PaymentAttemptRepository(db).delete(attempt_id):
        raise HTTPException(status_code=404, detail="Payment attempt not found")
