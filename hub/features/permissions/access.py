"""
Membership index.

IdentityWithAccess is the complete, immutable view the authorization core needs
about a caller: its id and its (group, role) memberships. It is loaded once
per request (see `dependencies.load_identity_with_access`) and never re-read
during a check.
"""
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from hub.features.permissions.roles import GroupRole


class Membership(BaseModel):
    """Binding of an identity to one group with one role."""
    group_id: str
    role: GroupRole

    model_config = ConfigDict(frozen=True, from_attributes=True)


class IdentityWithAccess(BaseModel):
    """An already-authenticated caller with its membership snapshot."""
    id: str
    memberships: Tuple[Membership, ...] = ()

    model_config = ConfigDict(frozen=True)

    @field_validator("memberships", mode="before")
    @classmethod
    def memberships_as_tuple(cls, v):
        return tuple(v) if v is not None else ()

    @model_validator(mode="after")
    def one_membership_per_group(self) -> "IdentityWithAccess":
        seen = set()
        for membership in self.memberships:
            if membership.group_id in seen:
                raise ValueError(f"Duplicate membership for group {membership.group_id!r}")
            seen.add(membership.group_id)
        return self


def get_membership(identity: IdentityWithAccess, group_id: str) -> Optional[Membership]:
    for membership in identity.memberships:
        if membership.group_id == group_id:
            return membership
    return None


def get_role_for_group(identity: IdentityWithAccess, group_id: str) -> Optional[GroupRole]:
    """The caller's role in `group_id`, or None when it is not a member."""
    membership = get_membership(identity, group_id)
    return membership.role if membership else None


def is_member_of_group(identity: IdentityWithAccess, group_id: str) -> bool:
    return get_membership(identity, group_id) is not None


def get_groups_with_role(identity: IdentityWithAccess, min_role: GroupRole) -> list[Membership]:
    """Memberships whose role is at or above `min_role`."""
    return [m for m in identity.memberships if m.role.rank >= min_role.rank]
