"""User model mirrored from Clerk users."""

from sqlalchemy import JSON, Boolean, Column, DateTime, String, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid


class User(Base):
    """Frontend application user synced from Clerk (not an admin principal)."""

    __tablename__ = "users"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    external_id = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    image_url = Column(String(2048), nullable=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    email_verified_at = Column(DateTime(timezone=True), nullable=True)
    phone_number = Column(String(50), nullable=True)
    phone_verified = Column(Boolean, nullable=False, default=False)
    last_sign_in_at = Column(DateTime(timezone=True), nullable=True)
    public_metadata = Column(JSON, nullable=True)

    # Pending verification-link token (single use)
    email_verification_token = Column(String(255), nullable=True, index=True)
    email_verification_expires = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
