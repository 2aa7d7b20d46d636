"""
Group-related lookups and dependency injection functions.
"""
from typing import Annotated, Optional
from fastapi import Depends, HTTPException, status
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hub.core.actions import message
from hub.core.database.engine import get_db
from hub.features.groups.models import Group, group_memberships
from hub.features.permissions.roles import GroupRole


async def find_group(db: AsyncSession, group_id: str) -> Optional[Group]:
    result = await db.execute(select(Group).where(Group.id == group_id))
    return result.scalar_one_or_none()


async def get_member_role(db: AsyncSession, group_id: str, user_id: str) -> Optional[GroupRole]:
    """Role of `user_id` in `group_id`, or None when not a member."""
    result = await db.execute(
        select(group_memberships.c.role).where(
            and_(
                group_memberships.c.group_id == group_id,
                group_memberships.c.user_id == user_id
            )
        )
    )
    return result.scalar_one_or_none()


async def get_group_by_id(
    group_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Group:
    """
    Get group by ID or raise 404.

    Raises:
        HTTPException: 404 if group not found
    """
    group = await find_group(db, group_id)
    if group is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=message("group_not_found")
        )
    return group
