"""Per-collection access policies.

Each collection gets a read/create/update/delete predicate over the caller's
principal (an active ``Admin`` or ``None`` for anonymous callers). Routers
declare ``Depends(require("<collection>", "<operation>"))``; the Clerk webhook
synchronizer writes through repositories directly and never consults these.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from fastapi import Depends, HTTPException

from app.core.auth import get_current_admin
from app.models.admin import Admin

Operation = Literal["read", "create", "update", "delete"]
Predicate = Callable[[Admin | None], bool]


def is_admin(principal: Admin | None) -> bool:
    return principal is not None and principal.status == "active"


def anyone(principal: Admin | None) -> bool:
    return True


@dataclass(frozen=True)
class CollectionPolicy:
    read: Predicate
    create: Predicate
    update: Predicate
    delete: Predicate

    def allows(self, operation: Operation, principal: Admin | None) -> bool:
        predicate: Predicate = getattr(self, operation)
        return predicate(principal)


ADMIN_ONLY = CollectionPolicy(read=is_admin, create=is_admin, update=is_admin, delete=is_admin)
PUBLIC_READ = CollectionPolicy(read=anyone, create=is_admin, update=is_admin, delete=is_admin)

COLLECTION_POLICIES: dict[str, CollectionPolicy] = {
    "users": PUBLIC_READ,
    "organizations": PUBLIC_READ,
    "organization_memberships": ADMIN_ONLY,
    "subscriptions": ADMIN_ONLY,
    "subscription_items": ADMIN_ONLY,
    "payment_attempts": ADMIN_ONLY,
    "admins": ADMIN_ONLY,
}


def require(collection: str, operation: Operation) -> Callable[..., Admin | None]:
    """Build a dependency that enforces ``collection``'s policy for ``operation``."""
    policy = COLLECTION_POLICIES[collection]

    def dependency(principal: Admin | None = Depends(get_current_admin)) -> Admin | None:
        if not policy.allows(operation, principal):
            raise HTTPException(status_code=401, detail="Admin credentials required")
        return principal

    return dependency
