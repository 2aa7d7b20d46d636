"""
User feature routes.

User management happens inside a group, passed as the `group_id` query
parameter. The caller's TeamRank comes from their own profile.
"""
from typing import Annotated, Any, Optional
from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from hub.core.actions import raise_for_result
from hub.core.database.engine import get_db
from hub.features.permissions.access import IdentityWithAccess
from hub.features.permissions.dependencies import get_current_identity
from hub.features.users import actions
from hub.features.users.dependencies import get_current_user, require_current_user
from hub.features.users.models import User
from hub.features.users.schemas import UserResponse


router = APIRouter(tags=["users"])

Identity = Annotated[Optional[IdentityWithAccess], Depends(get_current_identity)]
Caller = Annotated[Optional[User], Depends(get_current_user)]
Session = Annotated[AsyncSession, Depends(get_db)]
GroupId = Annotated[str, Query(description="Group the operation is performed in")]


def _team(caller: Optional[User]):
    return caller.team if caller is not None else None


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    user: Annotated[User, Depends(require_current_user)]
):
    """Get current caller's profile."""
    return user


@router.patch("/me", response_model=dict)
async def update_current_user_profile(
    payload: Annotated[dict[str, Any], Body()],
    caller: Caller,
    identity: Identity,
    db: Session
):
    """Update the caller's own profile."""
    user_id = caller.id if caller is not None else ""
    result = raise_for_result(
        await actions.update_user_action(db, identity, _team(caller), "", user_id, payload)
    )
    return result.data


@router.get("/", response_model=dict)
async def list_users(
    group_id: GroupId,
    identity: Identity,
    db: Session,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100)
):
    """List the users of a group (users:view)."""
    result = raise_for_result(await actions.get_users_action(db, identity, group_id, page, page_size))
    return result.data


@router.post("/", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_user(
    group_id: GroupId,
    payload: Annotated[dict[str, Any], Body()],
    caller: Caller,
    identity: Identity,
    db: Session
):
    """Create a user as a member of the group (users:create)."""
    result = raise_for_result(
        await actions.create_user_action(db, identity, _team(caller), group_id, payload)
    )
    return result.data


@router.get("/{user_id}", response_model=dict)
async def get_user(user_id: str, group_id: GroupId, identity: Identity, db: Session):
    """Get a profile."""
    result = raise_for_result(await actions.get_user_action(db, identity, group_id, user_id))
    return result.data


@router.patch("/{user_id}", response_model=dict)
async def update_user(
    user_id: str,
    group_id: GroupId,
    payload: Annotated[dict[str, Any], Body()],
    caller: Caller,
    identity: Identity,
    db: Session
):
    """Update a profile; every submitted field is checked against the field policy."""
    result = raise_for_result(
        await actions.update_user_action(db, identity, _team(caller), group_id, user_id, payload)
    )
    return result.data


@router.patch("/{user_id}/status", response_model=dict)
async def update_user_status(
    user_id: str,
    group_id: GroupId,
    payload: Annotated[dict[str, Any], Body()],
    identity: Identity,
    db: Session
):
    """Activate or deactivate an account."""
    result = raise_for_result(
        await actions.update_user_status_action(db, identity, group_id, user_id, payload)
    )
    return result.data


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, group_id: GroupId, identity: Identity, db: Session):
    """Delete a user account (users:delete, never one's own)."""
    raise_for_result(await actions.delete_user_action(db, identity, group_id, user_id))
