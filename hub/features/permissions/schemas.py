"""
Pydantic schemas for permission queries.

Read-only views over the capability registry, a caller's memberships and the
field edit policy, consumed by presentation code to gate affordances.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from hub.features.permissions.roles import GroupRole, TeamRank


class CapabilityRequirementResponse(BaseModel):
    """One registry entry."""
    capability: str
    resource: str
    action: str
    min_role: Optional[GroupRole] = None
    roles: List[GroupRole] = []


class GroupAccessResponse(BaseModel):
    """The caller's role in one group and what it grants there."""
    group_id: str
    role: GroupRole
    capabilities: List[str] = []


class MyPermissionsResponse(BaseModel):
    """Everything the caller may do, group by group."""
    user_id: str
    is_owner_of_any: bool
    groups: List[GroupAccessResponse] = []


class PermissionCheckRequest(BaseModel):
    """Schema for checking one capability in one group."""
    group_id: str = Field(..., min_length=1, description="Group the action happens in")
    capability: str = Field(..., description="Capability id, e.g. 'groups:edit'")


class PermissionCheckResponse(BaseModel):
    """Schema for permission check response."""
    allowed: bool
    reason: Optional[str] = None


class FieldPolicyResponse(BaseModel):
    """Field editability for the caller's team rank."""
    team: TeamRank
    can_edit: bool
    fields: Dict[str, bool]
