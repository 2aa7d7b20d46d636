"""
Identity loading and FastAPI dependencies for capability checks.

The membership snapshot is read from the database once per request and
wrapped in an immutable IdentityWithAccess. Permission results are never
cached; only the snapshot lives for the duration of one request.
"""
from typing import Annotated, Optional, Union
from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hub.core.actions import message
from hub.core.database.engine import get_db
from hub.features.groups.dependencies import get_group_by_id
from hub.features.groups.models import Group, group_memberships
from hub.features.permissions.access import IdentityWithAccess, Membership
from hub.features.permissions.capabilities import Capability
from hub.features.permissions.guards import can_do
from hub.features.users.dependencies import get_current_user
from hub.features.users.models import User
from hub.utils import get_logger


log = get_logger(__name__)


async def load_identity_with_access(db: AsyncSession, user: User) -> IdentityWithAccess:
    """
    Build the caller's IdentityWithAccess from the membership store.

    Args:
        db: Database session
        user: Already authenticated user

    Returns:
        Immutable identity with every current membership
    """
    result = await db.execute(
        select(group_memberships.c.group_id, group_memberships.c.role)
        .where(group_memberships.c.user_id == user.id)
        .order_by(group_memberships.c.group_id)
    )
    memberships = [Membership(group_id=row.group_id, role=row.role) for row in result.all()]
    log.debug(f"Loaded {len(memberships)} memberships for user {user.id}")
    return IdentityWithAccess(id=user.id, memberships=memberships)


async def get_current_identity(
    user: Annotated[Optional[User], Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Optional[IdentityWithAccess]:
    """The caller's IdentityWithAccess, or None when nobody is authenticated."""
    if user is None:
        return None
    return await load_identity_with_access(db, user)


def require_capability(capability: Union[Capability, str]):
    """
    FastAPI dependency factory guarding a `/{group_id}/...` route with one capability.

    The group is looked up first so that a missing group answers 404 whoever
    asks; then 401 for anonymous callers and 403 on denial.

    Usage:
        @router.get("/{group_id}/members")
        async def list_members(
            identity: IdentityWithAccess = Depends(require_capability(Capability.MEMBERS_VIEW))
        ):
            ...
    """
    async def capability_dependency(
        group: Annotated[Group, Depends(get_group_by_id)],
        identity: Annotated[Optional[IdentityWithAccess], Depends(get_current_identity)]
    ) -> IdentityWithAccess:
        if identity is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=message("unauthenticated"),
            )
        if not can_do(identity, group.id, capability):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=message("forbidden"),
            )
        return identity

    return capability_dependency
