"""
User permission wrappers.

Self-action overrides come first and do not depend on the capability
registry: editing one's own record is always allowed, deleting it never is.
"""
from hub.features.permissions.access import IdentityWithAccess
from hub.features.permissions.capabilities import Capability
from hub.features.permissions.guards import can_do, has_min_role, is_owner_of_any
from hub.features.permissions.roles import GroupRole


def can_view_users(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.USERS_VIEW)


def can_create_user(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.USERS_CREATE)


def can_edit_user(user: IdentityWithAccess, group_id: str, target_user_id: str) -> bool:
    # Users can always edit their own profile
    if user.id == target_user_id:
        return True
    return can_do(user, group_id, Capability.USERS_EDIT)


def can_delete_user(user: IdentityWithAccess, group_id: str, target_user_id: str) -> bool:
    # Cannot delete self
    if user.id == target_user_id:
        return False
    return can_do(user, group_id, Capability.USERS_DELETE)


def can_manage_roles(user: IdentityWithAccess, group_id: str) -> bool:
    return has_min_role(user, group_id, GroupRole.ADMIN)


def can_access_users_panel(user: IdentityWithAccess) -> bool:
    """The cross-group users panel is reserved to owners."""
    return is_owner_of_any(user)
