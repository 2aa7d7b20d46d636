"""
Role hierarchies.

Two independent, strictly ordered rank enumerations:

- GroupRole: group-scoped rank used by capability checks.
- TeamRank: organizational rank used only by the field edit policy.

Several labels ("Owner") are spelled the same on both axes. The enums carry no
`str` mix-in, so a member never equals its label or a member of the other
hierarchy, and ordering comparisons across hierarchies raise TypeError.
"""
import enum
from functools import total_ordering
from typing import TypeVar


R = TypeVar("R", bound="_RankedEnum")


@total_ordering
class _RankedEnum(enum.Enum):
    """Enum whose declaration order is its rank (first member = lowest)."""

    @property
    def rank(self) -> int:
        return list(type(self)).index(self) + 1

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def parse(cls: type[R], value: "str | R") -> R:
        """Resolve a label (case-insensitive) or a member into a member."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        raise ValueError(f"Unknown {cls.__name__}: {value!r}")

    def __lt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.rank < other.rank

    def __str__(self) -> str:
        return self.value


class GroupRole(_RankedEnum):
    """Rank of an identity inside one group."""
    GUEST = "Guest"
    COLLABORATOR = "Collaborator"
    MANAGER = "Manager"
    ADMIN = "Admin"
    OWNER = "Owner"


class TeamRank(_RankedEnum):
    """Organizational team of a profile, independent of any group."""
    SQUAD = "Squad"
    MOMENTUM = "Momentum"
    TALENT = "Talent"
    LEGACY = "Legacy"
    MARSHA_TEAM = "Marsha Team"
    EXECUTIVE = "Executive"
    OWNER = "Owner"


GROUP_ROLE_LABELS: dict[GroupRole, str] = {
    GroupRole.OWNER: "Propriétaire",
    GroupRole.ADMIN: "Administrateur",
    GroupRole.MANAGER: "Responsable",
    GroupRole.COLLABORATOR: "Collaborateur",
    GroupRole.GUEST: "Invité",
}


def rank(role: _RankedEnum) -> int:
    """Position of `role` in its own hierarchy (1 = lowest)."""
    return role.rank


def compare(a: R, b: R) -> int:
    """
    Three-way comparison of two ranks from the same hierarchy.

    Returns -1, 0 or 1. Raises TypeError when `a` and `b` belong to different
    hierarchies.
    """
    if type(a) is not type(b):
        raise TypeError(f"Cannot compare {type(a).__name__} with {type(b).__name__}")
    return (a.rank > b.rank) - (a.rank < b.rank)


def roles_at_or_below(role: GroupRole) -> list[GroupRole]:
    """All group roles a holder of `role` outranks or equals, lowest first."""
    return [r for r in GroupRole if r.rank <= role.rank]
