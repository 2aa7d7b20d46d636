"""
Permission routes.

Read-only views used by presentation code to decide which affordances to
render. The server actions re-check everything on mutation.
"""
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, HTTPException, status

from hub.core.actions import message
from hub.features.permissions import capabilities
from hub.features.permissions.access import IdentityWithAccess, get_membership
from hub.features.permissions.capabilities import Capability, ExplicitRoles, MinRole
from hub.features.permissions.dependencies import get_current_identity, require_capability
from hub.features.permissions.field_policy import can_edit, editable_fields
from hub.features.permissions.guards import can_do, is_owner_of_any
from hub.features.permissions.schemas import (
    CapabilityRequirementResponse,
    FieldPolicyResponse,
    GroupAccessResponse,
    MyPermissionsResponse,
    PermissionCheckRequest,
    PermissionCheckResponse,
)
from hub.features.users.dependencies import require_current_user
from hub.features.users.models import User
from hub.utils import get_logger


log = get_logger(__name__)

router = APIRouter(tags=["permissions"])


def _require_identity(identity: Optional[IdentityWithAccess]) -> IdentityWithAccess:
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=message("unauthenticated"),
        )
    return identity


def _group_access(identity: IdentityWithAccess, group_id: str) -> GroupAccessResponse:
    membership = get_membership(identity, group_id)
    return GroupAccessResponse(
        group_id=group_id,
        role=membership.role,
        capabilities=[cap.value for cap in capabilities.get_capabilities_for_role(membership.role)],
    )


@router.get("/capabilities", response_model=list[CapabilityRequirementResponse])
async def list_capabilities():
    """List the compiled-in capability registry."""
    entries = []
    for capability, requirement in capabilities.CAPABILITY_REGISTRY.items():
        entry = CapabilityRequirementResponse(
            capability=capability.value,
            resource=capability.resource,
            action=capability.action,
        )
        if isinstance(requirement, MinRole):
            entry.min_role = requirement.role
        elif isinstance(requirement, ExplicitRoles):
            entry.roles = sorted(requirement.roles)
        entries.append(entry)
    return entries


@router.get("/me", response_model=MyPermissionsResponse)
async def get_my_permissions(
    identity: Annotated[Optional[IdentityWithAccess], Depends(get_current_identity)]
):
    """Get the caller's role and capabilities in every group it belongs to."""
    identity = _require_identity(identity)
    return MyPermissionsResponse(
        user_id=identity.id,
        is_owner_of_any=is_owner_of_any(identity),
        groups=[_group_access(identity, m.group_id) for m in identity.memberships],
    )


@router.get("/groups/{group_id}", response_model=GroupAccessResponse)
async def get_group_permissions(
    group_id: str,
    identity: Annotated[IdentityWithAccess, Depends(require_capability(Capability.GROUPS_VIEW))]
):
    """Get the caller's role and capabilities in one group."""
    return _group_access(identity, group_id)


@router.post("/check", response_model=PermissionCheckResponse)
async def check_permission(
    check: PermissionCheckRequest,
    identity: Annotated[Optional[IdentityWithAccess], Depends(get_current_identity)]
):
    """
    Check one capability in one group for the caller.

    Capability ids come from the client here, so unknown ids are rejected as
    bad input instead of reaching the guard.
    """
    identity = _require_identity(identity)
    if not capabilities.is_registered(check.capability):
        log.info(f"Permission check for unknown capability {check.capability!r}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown capability: {check.capability}",
        )

    allowed = can_do(identity, check.group_id, check.capability)
    return PermissionCheckResponse(
        allowed=allowed,
        reason=None if allowed else message("forbidden"),
    )


@router.get("/fields", response_model=FieldPolicyResponse)
async def get_field_policy(
    user: Annotated[User, Depends(require_current_user)]
):
    """Which profile fields the caller may edit on other people's profiles."""
    return FieldPolicyResponse(
        team=user.team,
        can_edit=can_edit(user.team),
        fields=editable_fields(user.team),
    )
