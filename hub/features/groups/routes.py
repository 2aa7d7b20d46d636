"""
Group feature routes.

Thin HTTP wrappers over the group server actions; failed results become
HTTP errors through raise_for_result.
"""
from typing import Annotated, Any, Optional
from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from hub.core.actions import raise_for_result
from hub.core.database.engine import get_db
from hub.features.groups import actions
from hub.features.groups.schemas import MemberAdd, MemberRoleUpdate
from hub.features.permissions.access import IdentityWithAccess
from hub.features.permissions.dependencies import get_current_identity


router = APIRouter(tags=["groups"])

Identity = Annotated[Optional[IdentityWithAccess], Depends(get_current_identity)]
Session = Annotated[AsyncSession, Depends(get_db)]


@router.post("/", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_group(
    payload: Annotated[dict[str, Any], Body()],
    identity: Identity,
    db: Session
):
    """Create a new group (owners of at least one group only)."""
    result = raise_for_result(await actions.create_group_action(db, identity, payload))
    return result.data


@router.get("/", response_model=dict)
async def list_groups(
    identity: Identity,
    db: Session,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100)
):
    """List the groups the caller belongs to and may view."""
    result = raise_for_result(await actions.get_groups_action(db, identity, page, page_size))
    return result.data


@router.get("/{group_id}", response_model=dict)
async def get_group(group_id: str, identity: Identity, db: Session):
    """Get group by ID."""
    result = raise_for_result(await actions.get_group_action(db, identity, group_id))
    return result.data


@router.patch("/{group_id}", response_model=dict)
async def update_group(
    group_id: str,
    payload: Annotated[dict[str, Any], Body()],
    identity: Identity,
    db: Session
):
    """Update group information (groups:edit)."""
    result = raise_for_result(await actions.update_group_action(db, identity, group_id, payload))
    return result.data


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(group_id: str, identity: Identity, db: Session):
    """Delete a group (groups:delete)."""
    raise_for_result(await actions.delete_group_action(db, identity, group_id))


# Member management endpoints
@router.get("/{group_id}/members", response_model=dict)
async def list_members(group_id: str, identity: Identity, db: Session):
    """List group members with their roles."""
    result = raise_for_result(await actions.list_group_members_action(db, identity, group_id))
    return result.data


@router.post("/{group_id}/members", response_model=dict, status_code=status.HTTP_201_CREATED)
async def add_member(
    group_id: str,
    add_data: MemberAdd,
    identity: Identity,
    db: Session
):
    """Add a user to the group (Admin or above)."""
    result = raise_for_result(
        await actions.add_group_member_action(db, identity, group_id, add_data.user_id, add_data.role)
    )
    return result.data


@router.patch("/{group_id}/members/{user_id}", response_model=dict)
async def update_member_role(
    group_id: str,
    user_id: str,
    role_data: MemberRoleUpdate,
    identity: Identity,
    db: Session
):
    """Change a member's role (Admin or above, never one's own)."""
    result = raise_for_result(
        await actions.update_member_role_action(db, identity, group_id, user_id, role_data.role)
    )
    return result.data


@router.delete("/{group_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(group_id: str, user_id: str, identity: Identity, db: Session):
    """Remove a member from the group (Admin or above, never oneself)."""
    raise_for_result(await actions.remove_group_member_action(db, identity, group_id, user_id))
