from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.organization_membership import MembershipRole


class OrganizationMembershipCreate(BaseModel):
    external_id: str = Field(..., min_length=1, max_length=255)
    organization_id: UUID
    user_id: UUID
    role: MembershipRole = MembershipRole.MEMBER
    public_metadata: dict[str, Any] | None = None

    model_config = {"use_enum_values": True, "validate_default": True}


class OrganizationMembershipUpdate(BaseModel):
    role: MembershipRole | None = None
    public_metadata: dict[str, Any] | None = None

    model_config = {"use_enum_values": True}


class OrganizationMembershipResponse(BaseModel):
    id: UUID
    external_id: str
    organization_id: UUID
    user_id: UUID
    role: MembershipRole
    public_metadata: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
