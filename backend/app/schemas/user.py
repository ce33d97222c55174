from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    external_id: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    image_url: str | None = Field(default=None, max_length=2048)
    email_verified: bool = False
    email_verified_at: datetime | None = None
    phone_number: str | None = Field(default=None, max_length=50)
    phone_verified: bool = False
    last_sign_in_at: datetime | None = None
    public_metadata: dict[str, Any] | None = None


class UserUpdate(BaseModel):
    email: EmailStr | None = None
    first_name: str | None = Field(default=None, max_length=255)
    last_name: str | None = Field(default=None, max_length=255)
    image_url: str | None = Field(default=None, max_length=2048)
    email_verified: bool | None = None
    email_verified_at: datetime | None = None
    phone_number: str | None = Field(default=None, max_length=50)
    phone_verified: bool | None = None
    last_sign_in_at: datetime | None = None
    public_metadata: dict[str, Any] | None = None


class UserSyncCreate(UserCreate):
    """User row as delivered by Clerk; the email is stored as sent."""

    email: str = Field(..., min_length=1, max_length=255)  # type: ignore[assignment]


class UserSyncUpdate(UserUpdate):
    email: str | None = Field(  # type: ignore[assignment]
        default=None, min_length=1, max_length=255
    )


class UserResponse(BaseModel):
    id: UUID
    external_id: str
    email: str
    first_name: str | None
    last_name: str | None
    image_url: str | None
    email_verified: bool
    email_verified_at: datetime | None
    phone_number: str | None
    phone_verified: bool
    last_sign_in_at: datetime | None
    public_metadata: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class VerificationEmailResponse(BaseModel):
    email: str
    expires_at: datetime
