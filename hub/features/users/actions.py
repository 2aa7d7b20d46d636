"""
User server actions.

Users are managed from inside a group: the caller's group role gates the
coarse action (create, edit, delete) and, when editing someone else, the
caller's TeamRank gates each individual field. Order: authenticate, validate,
confirm targets exist, authorize, mutate.
"""
from datetime import datetime
from typing import Any, Mapping, Optional, Union
from pydantic import BaseModel, ValidationError
from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hub.core.actions import ActionErrorCode, ActionResult
from hub.features.groups.dependencies import find_group, get_member_role
from hub.features.groups.models import group_memberships
from hub.features.groups.permissions import can_assign_role, outranks_caller
from hub.features.permissions.access import IdentityWithAccess
from hub.features.permissions.field_policy import ORG_IDENTITY_FIELDS, can_edit_field
from hub.features.permissions.roles import TeamRank
from hub.features.users.dependencies import get_user_by_id
from hub.features.users.models import User
from hub.features.users.permissions import (
    can_create_user,
    can_delete_user,
    can_edit_user,
    can_view_users,
)
from hub.features.users.schemas import UserCreate, UserResponse, UserStatusUpdate, UserUpdate
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


def _user_data(user: User) -> dict:
    return UserResponse.model_validate(user).model_dump(mode="json")


async def _email_taken(db: AsyncSession, email: str, exclude_user_id: Optional[str] = None) -> bool:
    query = select(User.id).where(func.lower(User.email) == email.lower())
    if exclude_user_id is not None:
        query = query.where(User.id != exclude_user_id)
    return (await db.execute(query)).first() is not None


def _denied_field(
    identity: IdentityWithAccess,
    viewer_team: Optional[TeamRank],
    target_user_id: str,
    fields: list[str]
) -> Optional[str]:
    """
    First field the caller may not write, or None.

    On one's own profile only the organizational identity fields go through
    the field policy; on anyone else's every field does.
    """
    is_self = identity.id == target_user_id
    for field in fields:
        if is_self and field not in ORG_IDENTITY_FIELDS:
            continue
        if not can_edit_field(viewer_team, field):
            return field
    return None


async def create_user_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    viewer_team: Optional[TeamRank],
    group_id: str,
    form_data: FormData
) -> ActionResult:
    """Create a user and make it a member of `group_id` (users:create)."""
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    try:
        data = UserCreate.model_validate(_as_dict(form_data))
    except ValidationError as e:
        return ActionResult.invalid(e)

    if await find_group(db, group_id) is None:
        return ActionResult.fail(_NOT_FOUND, "group_not_found")

    if not can_create_user(identity, group_id):
        return ActionResult.fail(_FORBIDDEN)
    if not can_assign_role(identity, group_id, data.role):
        return ActionResult.fail(_FORBIDDEN, "forbidden_role")
    if data.team is not None and not can_edit_field(viewer_team, "team"):
        return ActionResult.fail(_FORBIDDEN, "forbidden_field", field="team")

    if await _email_taken(db, data.email):
        return ActionResult.fail(_CONFLICT, "email_taken")

    user = User(**data.model_dump(exclude={"role", "team"}))
    if data.team is not None:
        user.team = data.team
    db.add(user)
    await db.flush()

    await db.execute(
        group_memberships.insert().values(
            user_id=user.id,
            group_id=group_id,
            role=data.role,
            joined_at=datetime.now()
        )
    )
    await db.commit()

    log.info(f"User {user.id} created in group {group_id} by user {identity.id}")
    return ActionResult.ok({"id": user.id})


async def update_user_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    viewer_team: Optional[TeamRank],
    group_id: str,
    user_id: str,
    form_data: FormData
) -> ActionResult:
    """
    Update a profile.

    Editing one's own profile is always allowed (organizational identity
    fields aside). Editing someone else's needs users:edit in a group the
    target belongs to, and each submitted field must pass the field policy
    for the caller's TeamRank.
    """
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    try:
        data = UserUpdate.model_validate(_as_dict(form_data))
    except ValidationError as e:
        return ActionResult.invalid(e)

    target = await get_user_by_id(db, user_id)
    if target is None:
        return ActionResult.fail(_NOT_FOUND, "user_not_found")
    if identity.id != user_id and await get_member_role(db, group_id, user_id) is None:
        return ActionResult.fail(_NOT_FOUND, "user_not_found")

    if not can_edit_user(identity, group_id, user_id):
        return ActionResult.fail(_FORBIDDEN)

    changes = data.model_dump(exclude_unset=True)
    denied = _denied_field(identity, viewer_team, user_id, list(changes))
    if denied is not None:
        return ActionResult.fail(_FORBIDDEN, "forbidden_field", field=denied)

    if changes.get("email") and changes["email"].lower() != target.email.lower():
        if await _email_taken(db, changes["email"], exclude_user_id=user_id):
            return ActionResult.fail(_CONFLICT, "email_taken")

    for field, value in changes.items():
        setattr(target, field, value)

    await db.commit()
    await db.refresh(target)

    log.info(f"User {user_id} updated by user {identity.id} (fields: {sorted(changes)})")
    return ActionResult.ok(_user_data(target))


async def delete_user_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    group_id: str,
    user_id: str
) -> ActionResult:
    """Delete a user account and its memberships (users:delete, never oneself or a higher-ranked member)."""
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    target = await get_user_by_id(db, user_id)
    target_role = await get_member_role(db, group_id, user_id) if target is not None else None
    if target_role is None:
        return ActionResult.fail(_NOT_FOUND, "user_not_found")

    # Prevent self-deletion
    if identity.id == user_id:
        return ActionResult.fail(_FORBIDDEN, "self_delete")
    if not can_delete_user(identity, group_id, user_id):
        return ActionResult.fail(_FORBIDDEN)
    if outranks_caller(identity, group_id, target_role):
        return ActionResult.fail(_FORBIDDEN, "forbidden_outranked")

    await db.execute(group_memberships.delete().where(group_memberships.c.user_id == user_id))
    await db.delete(target)
    await db.commit()

    log.info(f"User {user_id} deleted by user {identity.id}")
    return ActionResult.ok()


async def update_user_status_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    group_id: str,
    user_id: str,
    form_data: FormData
) -> ActionResult:
    """
    Activate or deactivate an account (users:edit).

    Deactivating oneself is refused like deleting oneself.
    """
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    try:
        data = UserStatusUpdate.model_validate(_as_dict(form_data))
    except ValidationError as e:
        return ActionResult.invalid(e)

    target = await get_user_by_id(db, user_id)
    target_role = await get_member_role(db, group_id, user_id) if target is not None else None
    if target_role is None:
        return ActionResult.fail(_NOT_FOUND, "user_not_found")

    if identity.id == user_id:
        return ActionResult.fail(_FORBIDDEN, "self_deactivate")
    if not can_edit_user(identity, group_id, user_id):
        return ActionResult.fail(_FORBIDDEN)
    if outranks_caller(identity, group_id, target_role):
        return ActionResult.fail(_FORBIDDEN, "forbidden_outranked")

    target.is_active = data.is_active
    await db.commit()
    await db.refresh(target)

    log.info(f"User {user_id} set active={data.is_active} by user {identity.id}")
    return ActionResult.ok(_user_data(target))


async def get_user_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    group_id: str,
    user_id: str
) -> ActionResult:
    """Get a single profile: one's own, or a member of a group where users:view is held."""
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    target = await get_user_by_id(db, user_id)
    if target is None:
        return ActionResult.fail(_NOT_FOUND, "user_not_found")
    if identity.id == user_id:
        return ActionResult.ok(_user_data(target))
    if await get_member_role(db, group_id, user_id) is None:
        return ActionResult.fail(_NOT_FOUND, "user_not_found")

    if not can_view_users(identity, group_id):
        return ActionResult.fail(_FORBIDDEN)

    return ActionResult.ok(_user_data(target))


async def get_users_action(
    db: AsyncSession,
    identity: Optional[IdentityWithAccess],
    group_id: str,
    page: int = 1,
    page_size: int = 20
) -> ActionResult:
    """List a group's users, paginated (users:view)."""
    if identity is None:
        return ActionResult.fail(_UNAUTHENTICATED)

    if page < 1 or page_size < 1:
        return ActionResult.fail(_INVALID)

    if await find_group(db, group_id) is None:
        return ActionResult.fail(_NOT_FOUND, "group_not_found")

    if not can_view_users(identity, group_id):
        return ActionResult.fail(_FORBIDDEN)

    in_group = and_(
        group_memberships.c.user_id == User.id,
        group_memberships.c.group_id == group_id
    )
    total = (await db.execute(
        select(func.count()).select_from(User).join(group_memberships, in_group)
    )).scalar_one()
    result = await db.execute(
        select(User)
        .join(group_memberships, in_group)
        .order_by(User.pseudo, User.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    users = [_user_data(user) for user in result.scalars().all()]

    return ActionResult.ok({"users": users, "total": total, "page": page, "page_size": page_size})
