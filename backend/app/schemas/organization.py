from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class OrganizationCreate(BaseModel):
    external_id: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    image_url: str | None = Field(default=None, max_length=2048)
    description: str | None = None
    max_allowed_memberships: int | None = Field(default=None, ge=0)
    public_metadata: dict[str, Any] | None = None
    private_metadata: dict[str, Any] | None = None
    created_by_id: UUID | None = None


class OrganizationUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, max_length=255)
    image_url: str | None = Field(default=None, max_length=2048)
    description: str | None = None
    max_allowed_memberships: int | None = Field(default=None, ge=0)
    public_metadata: dict[str, Any] | None = None
    private_metadata: dict[str, Any] | None = None


class OrganizationResponse(BaseModel):
    id: UUID
    external_id: str
    name: str
    slug: str | None
    image_url: str | None
    description: str | None
    max_allowed_memberships: int | None
    public_metadata: dict[str, Any] | None
    private_metadata: dict[str, Any] | None = Field(
        default=None, description="Only populated for admin callers"
    )
    created_by_id: UUID | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
