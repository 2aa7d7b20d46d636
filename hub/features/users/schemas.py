"""
Pydantic schemas for user-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator

from hub.features.permissions.roles import GroupRole, TeamRank


class UserBase(BaseModel):
    """Base user schema with common fields."""
    email: EmailStr
    pseudo: str = Field(..., min_length=2, max_length=100)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)


class UserCreate(UserBase):
    """Schema for creating a user inside a group."""
    role: GroupRole = GroupRole.COLLABORATOR
    team: TeamRank | None = None


class UserUpdate(BaseModel):
    """
    Schema for updating a profile.

    Field names match the field edit policy's field names.
    """
    pseudo: str | None = Field(None, min_length=2, max_length=100)
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=30)
    discord_username: str | None = Field(None, max_length=100)
    entity: str | None = Field(None, max_length=100)
    team: TeamRank | None = None
    division: int | None = Field(None, ge=0, le=3)
    role_secondary: str | None = Field(None, max_length=100)

    @field_validator("pseudo", "email", "team", "division")
    @classmethod
    def required_fields_not_cleared(cls, v):
        # Omit the field to leave it unchanged; these columns cannot be emptied
        if v is None:
            raise ValueError("This field cannot be cleared")
        return v


class UserStatusUpdate(BaseModel):
    """Schema for activating or deactivating an account."""
    is_active: bool


class UserResponse(UserBase):
    """Schema for user responses."""
    id: str
    phone: str | None = None
    discord_username: str | None = None
    entity: str | None = None
    team: TeamRank
    division: int
    role_secondary: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

