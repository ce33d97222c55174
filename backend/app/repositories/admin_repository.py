import hashlib
import secrets
from datetime import datetime
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.admin import Admin
from app.schemas.admin import AdminCreate


def generate_admin_key() -> str:
    """Generate a random admin API key with 'adm_' prefix."""
    return "adm_" + secrets.token_hex(32)


def hash_admin_key(raw_key: str) -> str:
    """SHA-256 hash of the raw admin key."""
    return hashlib.sha256(raw_key.encode()).hexdigest()


class AdminRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, data: AdminCreate) -> tuple[Admin, str]:
        """Create an admin with a fresh key. Returns (admin_model, raw_key)."""
        raw_key = generate_admin_key()
        admin = Admin(
            email=data.email,
            name=data.name,
            key_hash=hash_admin_key(raw_key),
            key_prefix=raw_key[:12],
        )
        self.db.add(admin)
        self.db.commit()
        self.db.refresh(admin)
        return admin, raw_key

    def get_all(self, skip: int = 0, limit: int = 100) -> list[Admin]:
        return (
            self.db.query(Admin).order_by(Admin.created_at.desc()).offset(skip).limit(limit).all()
        )

    def count(self) -> int:
        return self.db.query(func.count(Admin.id)).scalar() or 0

    def get_by_id(self, admin_id: UUID) -> Admin | None:
        return self.db.query(Admin).filter(Admin.id == admin_id).first()

    def get_by_email(self, email: str) -> Admin | None:
        return self.db.query(Admin).filter(Admin.email == email).first()

    def get_by_hash(self, key_hash: str) -> Admin | None:
        return self.db.query(Admin).filter(Admin.key_hash == key_hash).first()

    def revoke(self, admin_id: UUID) -> Admin | None:
        admin = self.get_by_id(admin_id)
        if not admin:
            return None
        admin.status = "revoked"  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(admin)
        return admin

    def rotate(self, admin_id: UUID) -> tuple[Admin, str] | None:
        """Replace an active admin's key. Returns (admin_model, new_raw_key)."""
        admin = self.get_by_id(admin_id)
        if not admin or admin.status != "active":
            return None
        raw_key = generate_admin_key()
        admin.key_hash = hash_admin_key(raw_key)  # type: ignore[assignment]
        admin.key_prefix = raw_key[:12]  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(admin)
        return admin, raw_key

    def update_last_used(self, admin: Admin, now: datetime) -> None:
        admin.last_used_at = now  # type: ignore[assignment]
        self.db.commit()
