"""
Permission feature module.

Group-scoped capability checks (RBAC over GroupRole) and the TeamRank based
field edit policy.
"""
from hub.features.permissions.access import IdentityWithAccess, Membership
from hub.features.permissions.capabilities import Capability, UnknownCapabilityError
from hub.features.permissions.field_policy import can_edit, can_edit_field
from hub.features.permissions.guards import can_do, has_min_role, is_admin_or_above, is_owner_of_any
from hub.features.permissions.roles import GroupRole, TeamRank, compare, rank

__all__ = [
    "Capability",
    "GroupRole",
    "IdentityWithAccess",
    "Membership",
    "TeamRank",
    "UnknownCapabilityError",
    "can_do",
    "can_edit",
    "can_edit_field",
    "compare",
    "has_min_role",
    "is_admin_or_above",
    "is_owner_of_any",
    "rank",
]
