from datetime import UTC, datetime

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.admin import Admin
from app.repositories.admin_repository import AdminRepository, hash_admin_key


def get_current_admin(
    request: Request,
    db: Session = Depends(get_db),
) -> Admin | None:
    """Resolve the administrative principal from the Authorization header.

    Returns None for anonymous callers (no header). A header that is present
    but malformed, unknown or revoked is rejected outright.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    if not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header format")

    raw_key = auth_header[7:]
    if not raw_key:
        raise HTTPException(status_code=401, detail="API key is required")

    repo = AdminRepository(db)
    admin = repo.get_by_hash(hash_admin_key(raw_key))

    if not admin:
        raise HTTPException(status_code=401, detail="Invalid API key")

    if admin.status != "active":
        raise HTTPException(status_code=401, detail="API key has been revoked")

    repo.update_last_used(admin, datetime.now(UTC))

    return admin
