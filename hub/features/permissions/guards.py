"""
Authorization guards.

Pure, synchronous checks over an IdentityWithAccess snapshot and the
compiled-in capability registry. A denial is always a plain `False`.
"""
from typing import Union

from hub.core import config
from hub.features.permissions import capabilities
from hub.features.permissions.access import IdentityWithAccess, get_role_for_group
from hub.features.permissions.capabilities import Capability, UnknownCapabilityError
from hub.features.permissions.roles import GroupRole
from hub.utils import get_logger


log = get_logger(__name__)


def has_min_role(identity: IdentityWithAccess, group_id: str, min_role: GroupRole) -> bool:
    """
    Check that the caller holds at least `min_role` in `group_id`.

    Not being a member of the group is never an error; it simply denies.
    """
    role = get_role_for_group(identity, group_id)
    if role is None:
        log.debug(f"User {identity.id} has no membership in group {group_id}")
        return False
    return role.rank >= min_role.rank


def can_do(identity: IdentityWithAccess, group_id: str, capability: Union[Capability, str]) -> bool:
    """
    Check whether the caller may perform `capability` in `group_id`.

    Args:
        identity: Caller with its membership snapshot
        group_id: Target group
        capability: Capability member or its `resource:action` id

    Returns:
        True if the caller's role in the group satisfies the capability requirement

    Raises:
        UnknownCapabilityError: capability not registered and STRICT_CAPABILITIES is on
    """
    try:
        requirement = capabilities.resolve(capability)
    except UnknownCapabilityError:
        if config.STRICT_CAPABILITIES:
            raise
        log.error(f"Unregistered capability {capability!r} checked for user {identity.id}; denying")
        return False

    role = get_role_for_group(identity, group_id)
    if role is None:
        log.debug(f"User {identity.id} denied {capability} in group {group_id}: not a member")
        return False

    allowed = requirement.allows(role)
    log.debug(
        f"User {identity.id} {'granted' if allowed else 'denied'} {capability} "
        f"in group {group_id} as {role}"
    )
    return allowed


def is_owner_of_any(identity: IdentityWithAccess) -> bool:
    """True if the caller is Owner of at least one group, whichever it is."""
    return any(m.role is GroupRole.OWNER for m in identity.memberships)


def is_admin_or_above(identity: IdentityWithAccess, group_id: str) -> bool:
    return has_min_role(identity, group_id, GroupRole.ADMIN)
