from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from app.core.access import require
from app.core.database import get_db
from app.models.admin import Admin
from app.repositories.admin_repository import AdminRepository
from app.schemas.admin import AdminCreate, AdminCreateResponse, AdminResponse

router = APIRouter()

UNAUTHORIZED = {401: {"description": "Unauthorized – admin credentials required"}}


@router.get(
    "/",
    response_model=list[AdminResponse],
    summary="List admins",
    responses={**UNAUTHORIZED},
)
async def list_admins(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    _principal: object = Depends(require("admins", "read")),
) -> list[Admin]:
    """List admins (key prefix only)."""
    repo = AdminRepository(db)
    response.headers["X-Total-Count"] = str(repo.count())
    return repo.get_all(skip=skip, limit=limit)


@router.get(
    "/{admin_id}",
    response_model=AdminResponse,
    summary="Get admin",
    responses={**UNAUTHORIZED, 404: {"description": "Admin not found"}},
)
async def get_admin(
    admin_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("admins", "read")),
) -> Admin:
    admin = AdminRepository(db).get_by_id(admin_id)
    if not admin:
        raise HTTPException(status_code=404, detail="Admin not found")
    return admin


@router.post(
    "/",
    response_model=AdminCreateResponse,
    status_code=201,
    summary="Create admin",
    responses={
        **UNAUTHORIZED,
        409: {"description": "Admin with this email already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_admin(
    data: AdminCreate,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("admins", "create")),
) -> dict[str, Any]:
    """Create an admin and return its API key. The raw key is only shown once."""
    repo = AdminRepository(db)
    if repo.get_by_email(data.email):
        raise HTTPException(status_code=409, detail="Admin with this email already exists")
    admin, raw_key = repo.create(data)

    response = AdminResponse.model_validate(admin).model_dump()
    response["raw_key"] = raw_key
    return response


@router.post(
    "/{admin_id}/rotate",
    response_model=AdminCreateResponse,
    summary="Rotate admin API key",
    responses={**UNAUTHORIZED, 404: {"description": "Active admin not found"}},
)
async def rotate_admin_key(
    admin_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("admins", "update")),
) -> dict[str, Any]:
    """Replace an admin's API key. The previous key stops working immediately."""
    result = AdminRepository(db).rotate(admin_id)
    if not result:
        raise HTTPException(status_code=404, detail="Active admin not found")
    admin, raw_key = result

    response = AdminResponse.model_validate(admin).model_dump()
    response["raw_key"] = raw_key
    return response


@router.delete(
    "/{admin_id}",
    status_code=204,
    summary="Revoke admin",
    responses={**UNAUTHORIZED, 404: {"description": "Admin not found"}},
)
async def revoke_admin(
    admin_id: UUID,
    db: Session = Depends(get_db),
    _principal: object = Depends(require("admins", "delete")),
) -> None:
    """Revoke an admin's API key."""
    if not AdminRepository(db).revoke(admin_id):
        raise HTTPException(status_code=404, detail="Admin not found")
