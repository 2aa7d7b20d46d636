"""
Group server actions.

Every action follows the same order: authenticate, validate input, confirm
the target exists, authorize, then mutate. Expected failures come back as
ActionResult values; nothing is written unless every check passed.
"""
from datetime import datetime
from typing import Any, Mapping, Optional, Union
from pydantic import BaseModel, ValidationError
from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hub.core.actions import ActionErrorCode, ActionResult
from hub.features.groups.dependencies import find_group, get_member_role
from hub.features.groups.models import Group, group_memberships
from hub.features.groups.permissions import (
    can_assign_role,
    can_create_group,
    can_delete_group,
    can_edit_group,
    can_manage_members,
    can_remove_member,
    can_view_groups,
    can_view_members,
    outranks_caller,
)
from hub.features.groups.schemas import (
    GroupCreate,
    GroupResponse,
    GroupUpdate,
    MemberResponse,
)
from hub.features.permissions.access import IdentityWithAccess
from hub.features.permissions.roles import GroupRole
from hub.features.users.dependencies import get_user_by_id
from hub.features.users.models import User
from hub.utils import get_logger


log = get_logger(__name__)

FormData = Union[Mapping[str, Any], BaseModel]

_UNAUTHENTICATED = ActionErrorCode.UNAUTHENTICATED
_INVALID = ActionErrorCode.INVALID
_NOT_FOUND = ActionErrorCode.NOT_FOUND
_FORBIDDEN = ActionErrorCode.FORBIDDEN
_CONFLICT = ActionErrorCode.CONFLICT


def _as_dict(form_data: FormData) -> Any:
    if isinstance(form_data, BaseModel):
        return form_data.model_dump(exclude_unset=True)
    return form_data


def _parse_role(role: Union[GroupRole, str]) -> Optional[GroupRole]:
    try:
        return GroupRole.parse(role)
    except ValueError:
        return None


async def _member_count(db: AsyncSession, group_id: str) -> int:
    result = await db.execute(
        select(func.count()).select_from(group_memberships).where(group_memberships.c.group_id == group_id)
    )
    return result.scalar_one()


async def _group_data(db: AsyncSession, group: Group) -> dict:
    response = GroupResponse.model_validate(group)
    response.member_count = await _member_count(db, group.id)
    return response.model_dump(mode="json")


async def create_group_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    form_data: FormData
) -> ActionResult:
    """
    Create a new group; the creator becomes its Owner.

    Only owners of at least one existing group may found a new one.
    """
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    try:
        data = GroupCreate.model_validate(_as_dict(form_data))
    except ValidationError as e:
        return ActionResult.invalid(e)

    if not can_create_group(identity):
        return ActionResult.fail(_FORBIDDEN)

    group = Group(**data.model_dump(mode="json"))
    db.add(group)
    await db.flush()

    await db.execute(
        group_memberships.insert().values(
            user_id=identity.id,
            group_id=group.id,
            role=GroupRole.OWNER,
            joined_at=datetime.now()
        )
    )
    await db.commit()
    await db.refresh(group)

    log.info(f"Group {group.id} created by user {identity.id}")
    return ActionResult.ok({"id": group.id})


async def update_group_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    group_id: str,
    form_data: FormData
) -> ActionResult:
    """Update group information (groups:edit)."""
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    try:
        data = GroupUpdate.model_validate(_as_dict(form_data))
    except ValidationError as e:
        return ActionResult.invalid(e)

    group = await find_group(db, group_id)
    if group is None:
        return ActionResult.fail(_NOT_FOUND, "group_not_found")

    if not can_edit_group(identity, group_id):
        return ActionResult.fail(_FORBIDDEN)

    # Update only provided fields
    for field, value in data.model_dump(mode="json", exclude_unset=True).items():
        setattr(group, field, value)

    await db.commit()
    await db.refresh(group)

    log.info(f"Group {group_id} updated by user {identity.id}")
    return ActionResult.ok(await _group_data(db, group))


async def delete_group_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    group_id: str
) -> ActionResult:
    """Delete a group and its memberships (groups:delete)."""
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    group = await find_group(db, group_id)
    if group is None:
        return ActionResult.fail(_NOT_FOUND, "group_not_found")

    if not can_delete_group(identity, group_id):
        return ActionResult.fail(_FORBIDDEN)

    await db.execute(group_memberships.delete().where(group_memberships.c.group_id == group_id))
    await db.delete(group)
    await db.commit()

    log.info(f"Group {group_id} deleted by user {identity.id}")
    return ActionResult.ok()


async def get_group_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    group_id: str
) -> ActionResult:
    """Get a single group (groups:view)."""
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    group = await find_group(db, group_id)
    if group is None:
        return ActionResult.fail(_NOT_FOUND, "group_not_found")

    if not can_view_groups(identity, group_id):
        return ActionResult.fail(_FORBIDDEN)

    return ActionResult.ok(await _group_data(db, group))


async def get_groups_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    page: int = 1,
    page_size: int = 20
) -> ActionResult:
    """
    List the groups the caller may view, paginated.

    Groups the caller does not belong to are never listed.
    """
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    if page < 1 or page_size < 1:
        return ActionResult.fail(_INVALID)

    visible_ids = [m.group_id for m in identity.memberships if can_view_groups(identity, m.group_id)]
    if not visible_ids:
        return ActionResult.ok({"groups": [], "total": 0, "page": page, "page_size": page_size})

    total = (await db.execute(
        select(func.count()).select_from(Group).where(Group.id.in_(visible_ids))
    )).scalar_one()
    result = await db.execute(
        select(Group)
        .where(Group.id.in_(visible_ids))
        .order_by(Group.created_at.desc(), Group.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    groups = [await _group_data(db, group) for group in result.scalars().all()]

    return ActionResult.ok({"groups": groups, "total": total, "page": page, "page_size": page_size})


async def list_group_members_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    group_id: str
) -> ActionResult:
    """List a group's members with their roles (members:view)."""
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    if await find_group(db, group_id) is None:
        return ActionResult.fail(_NOT_FOUND, "group_not_found")

    if not can_view_members(identity, group_id):
        return ActionResult.fail(_FORBIDDEN)

    result = await db.execute(
        select(User.id, User.pseudo, User.email, group_memberships.c.role, group_memberships.c.joined_at)
        .join(group_memberships, group_memberships.c.user_id == User.id)
        .where(group_memberships.c.group_id == group_id)
        .order_by(User.pseudo)
    )
    members = [
        MemberResponse(
            user_id=row.id,
            pseudo=row.pseudo,
            email=row.email,
            role=row.role,
            joined_at=row.joined_at,
        ).model_dump(mode="json")
        for row in result.all()
    ]
    return ActionResult.ok({"members": members})


async def add_group_member_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    group_id: str,
    user_id: str,
    role: Union[GroupRole, str]
) -> ActionResult:
    """Add a user to a group with a role no higher than the caller's own."""
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    new_role = _parse_role(role)
    if new_role is None:
        return ActionResult.fail(_INVALID, "unknown_role", role=role)

    if await find_group(db, group_id) is None:
        return ActionResult.fail(_NOT_FOUND, "group_not_found")
    if await get_user_by_id(db, user_id) is None:
        return ActionResult.fail(_NOT_FOUND, "user_not_found")

    if not can_manage_members(identity, group_id):
        return ActionResult.fail(_FORBIDDEN)
    if not can_assign_role(identity, group_id, new_role):
        return ActionResult.fail(_FORBIDDEN, "forbidden_role")

    if await get_member_role(db, group_id, user_id) is not None:
        return ActionResult.fail(_CONFLICT, "already_member")

    await db.execute(
        group_memberships.insert().values(
            user_id=user_id,
            group_id=group_id,
            role=new_role,
            joined_at=datetime.now()
        )
    )
    await db.commit()

    log.info(f"User {user_id} added to group {group_id} as {new_role} by user {identity.id}")
    return ActionResult.ok({"user_id": user_id, "group_id": group_id, "role": new_role.value})


async def remove_group_member_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    group_id: str,
    user_id: str
) -> ActionResult:
    """Remove a member from a group. Nobody removes themselves."""
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    if await find_group(db, group_id) is None:
        return ActionResult.fail(_NOT_FOUND, "group_not_found")
    target_role = await get_member_role(db, group_id, user_id)
    if target_role is None:
        return ActionResult.fail(_NOT_FOUND, "member_not_found")

    if identity.id == user_id:
        return ActionResult.fail(_FORBIDDEN, "self_remove")
    if not can_remove_member(identity, group_id, user_id):
        return ActionResult.fail(_FORBIDDEN)
    if outranks_caller(identity, group_id, target_role):
        return ActionResult.fail(_FORBIDDEN, "forbidden_outranked")

    await db.execute(
        group_memberships.delete().where(
            and_(
                group_memberships.c.group_id == group_id,
                group_memberships.c.user_id == user_id
            )
        )
    )
    await db.commit()

    log.info(f"User {user_id} removed from group {group_id} by user {identity.id}")
    return ActionResult.ok()


async def update_member_role_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    group_id: str,
    user_id: str,
    role: Union[GroupRole, str]
) -> ActionResult:
    """
    Change a member's role in a group.

    Requires Admin in that group. The caller cannot change their own role,
    cannot touch a member who outranks them, and cannot grant a role above
    their own.
    """
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    new_role = _parse_role(role)
    if new_role is None:
        return ActionResult.fail(_INVALID, "unknown_role", role=role)

    if await find_group(db, group_id) is None:
        return ActionResult.fail(_NOT_FOUND, "group_not_found")
    current_role = await get_member_role(db, group_id, user_id)
    if current_role is None:
        return ActionResult.fail(_NOT_FOUND, "member_not_found")

    if identity.id == user_id:
        return ActionResult.fail(_FORBIDDEN, "self_role")
    if not can_manage_members(identity, group_id):
        return ActionResult.fail(_FORBIDDEN)
    if outranks_caller(identity, group_id, current_role):
        return ActionResult.fail(_FORBIDDEN, "forbidden_outranked")
    if not can_assign_role(identity, group_id, new_role):
        return ActionResult.fail(_FORBIDDEN, "forbidden_role")

    await db.execute(
        group_memberships.update()
        .where(
            and_(
                group_memberships.c.group_id == group_id,
                group_memberships.c.user_id == user_id
            )
        )
        .values(role=new_role)
    )
    await db.commit()

    log.info(f"User {user_id} in group {group_id} re-roled {current_role} -> {new_role} by user {identity.id}")
    return ActionResult.ok({"user_id": user_id, "group_id": group_id, "role": new_role.value})
