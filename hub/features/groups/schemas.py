"""
Pydantic schemas for group-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field, HttpUrl, field_validator

from hub.features.permissions.roles import GroupRole


def _blank_as_none(v):
    return None if v == "" else v


class GroupCreate(BaseModel):
    """Schema for creating a new group."""
    name: str = Field(..., min_length=2, max_length=255)
    description: str | None = Field(None, max_length=2000)
    logo_url: HttpUrl | None = None

    # An empty string clears the logo
    blank_logo_as_none = field_validator("logo_url", mode="before")(_blank_as_none)


class GroupUpdate(BaseModel):
    """Schema for updating group information."""
    name: str | None = Field(None, min_length=2, max_length=255)
    description: str | None = Field(None, max_length=2000)
    logo_url: HttpUrl | None = None

    blank_logo_as_none = field_validator("logo_url", mode="before")(_blank_as_none)


class GroupResponse(BaseModel):
    """Schema for group responses."""
    id: str
    name: str
    description: str | None = None
    logo_url: str | None = None
    created_at: datetime
    updated_at: datetime
    member_count: int = 0

    model_config = {"from_attributes": True}


class MemberAdd(BaseModel):
    """Schema for adding a user to a group."""
    user_id: str = Field(..., min_length=1)
    role: GroupRole = GroupRole.COLLABORATOR


class MemberRoleUpdate(BaseModel):
    """Schema for changing a member's role."""
    role: GroupRole


class MemberResponse(BaseModel):
    """A group member as listed on the group page."""
    user_id: str
    pseudo: str
    email: str
    role: GroupRole
    joined_at: datetime
