"""
Group permission wrappers.

Business questions about groups and their members, answered with the guards.
Callers confirm the target group exists before asking.
"""
from hub.features.permissions.access import IdentityWithAccess, get_role_for_group
from hub.features.permissions.capabilities import Capability
from hub.features.permissions.guards import can_do, has_min_role, is_owner_of_any
from hub.features.permissions.roles import GroupRole


def can_view_groups(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.GROUPS_VIEW)


def can_create_group(user: IdentityWithAccess) -> bool:
    """
    Founding a new group is open to anyone who owns at least one group.

    There is no target group to scope the check to yet.
    """
    return is_owner_of_any(user)


def can_edit_group(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.GROUPS_EDIT)


def can_delete_group(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.GROUPS_DELETE)


def can_view_members(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.MEMBERS_VIEW)


def can_manage_members(user: IdentityWithAccess, group_id: str) -> bool:
    """Adding, removing and re-roling members requires Admin in that group."""
    return has_min_role(user, group_id, GroupRole.ADMIN)


def can_remove_member(user: IdentityWithAccess, group_id: str, target_user_id: str) -> bool:
    # Removing one's own membership is always denied
    if user.id == target_user_id:
        return False
    return can_manage_members(user, group_id)


def can_assign_role(user: IdentityWithAccess, group_id: str, role: GroupRole) -> bool:
    """Member managers may hand out roles up to, and including, their own."""
    if not can_manage_members(user, group_id):
        return False
    own_role = get_role_for_group(user, group_id)
    return own_role is not None and role.rank <= own_role.rank


def outranks_caller(user: IdentityWithAccess, group_id: str, target_role: GroupRole) -> bool:
    own_role = get_role_for_group(user, group_id)
    return own_role is None or target_role.rank > own_role.rank
