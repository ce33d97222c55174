from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class AdminCreate(BaseModel):
    email: EmailStr
    name: str | None = Field(default=None, max_length=255)


class AdminResponse(BaseModel):
    id: UUID
    email: str
    name: str | None
    key_prefix: str
    status: str
    last_used_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AdminCreateResponse(AdminResponse):
    """Returned only on creation; includes the raw API key."""

    raw_key: str
