"""
Field edit policy.

Decides which individual profile fields a viewer may edit on someone else's
record, from the viewer's TeamRank alone. Unrelated to group roles.

Resolution per field:
1. Owner, Executive and Marsha Team edit every field.
2. Ranks outside the editor set (Talent, Momentum, Squad, none) edit nothing.
3. Remaining editors edit every field unless a FieldEditRule denies their rank.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from hub.features.permissions.roles import TeamRank


@dataclass(frozen=True)
class FieldEditRule:
    field: str
    denied_for: frozenset[TeamRank]


UNRESTRICTED_RANKS: frozenset[TeamRank] = frozenset({
    TeamRank.OWNER,
    TeamRank.EXECUTIVE,
    TeamRank.MARSHA_TEAM,
})

EDITOR_RANKS: frozenset[TeamRank] = UNRESTRICTED_RANKS | {TeamRank.LEGACY}

# Organizational identity of a profile
ORG_IDENTITY_FIELDS: frozenset[str] = frozenset({"division", "team", "entity", "role_secondary"})

FIELD_EDIT_RULES: Mapping[str, FieldEditRule] = MappingProxyType({
    name: FieldEditRule(field=name, denied_for=frozenset({TeamRank.LEGACY}))
    for name in sorted(ORG_IDENTITY_FIELDS)
})

PROFILE_FIELDS: tuple[str, ...] = (
    "pseudo",
    "first_name",
    "last_name",
    "email",
    "phone",
    "discord_username",
    "entity",
    "team",
    "division",
    "role_secondary",
)


def can_edit(viewer_rank: Optional[TeamRank]) -> bool:
    """Coarse gate: may this rank edit anything on another profile at all."""
    return viewer_rank in EDITOR_RANKS


def can_edit_field(viewer_rank: Optional[TeamRank], field: str) -> bool:
    if viewer_rank in UNRESTRICTED_RANKS:
        return True
    if not can_edit(viewer_rank):
        return False
    rule = FIELD_EDIT_RULES.get(field)
    return rule is None or viewer_rank not in rule.denied_for


def editable_fields(viewer_rank: Optional[TeamRank], fields: Iterable[str] = PROFILE_FIELDS) -> dict[str, bool]:
    """Per-field editability, for rendering a profile with mixed rows."""
    return {field: can_edit_field(viewer_rank, field) for field in fields}
