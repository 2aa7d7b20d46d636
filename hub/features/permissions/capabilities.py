"""
Capability registry.

A compiled-in table mapping every `resource:action` capability to the group
role requirement that grants it. The table never changes at runtime; new
policy ships with a new build.

Requirements come in two shapes:

- MinRole(role): hierarchical, any role at or above `role` qualifies.
- ExplicitRoles(roles): only the listed roles qualify, for rules that do not
  follow rank order.
"""
import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Union

from hub.features.permissions.roles import GroupRole


class UnknownCapabilityError(LookupError):
    """A capability id that is not present in the registry (a calling-code defect)."""

    def __init__(self, capability: object):
        self.capability = capability
        super().__init__(f"Unregistered capability: {capability!r}")


class Capability(enum.Enum):
    GROUPS_VIEW = "groups:view"
    GROUPS_CREATE = "groups:create"
    GROUPS_EDIT = "groups:edit"
    GROUPS_DELETE = "groups:delete"

    USERS_VIEW = "users:view"
    USERS_CREATE = "users:create"
    USERS_EDIT = "users:edit"
    USERS_DELETE = "users:delete"

    MEMBERS_VIEW = "members:view"

    PROJECTS_VIEW = "projects:view"
    PROJECTS_CREATE = "projects:create"
    PROJECTS_EDIT = "projects:edit"
    PROJECTS_DELETE = "projects:delete"
    PROJECTS_ARCHIVE = "projects:archive"
    PROJECTS_MANAGE_MEMBERS = "projects:manage_members"
    PROJECTS_VIEW_STATS = "projects:view_stats"
    PROJECTS_EXPORT = "projects:export"

    TASKS_VIEW = "tasks:view"
    TASKS_VIEW_ALL = "tasks:view_all"
    TASKS_CREATE = "tasks:create"
    TASKS_EDIT = "tasks:edit"
    TASKS_DELETE = "tasks:delete"
    TASKS_ASSIGN = "tasks:assign"
    TASKS_MANAGE_SUBTASKS = "tasks:manage_subtasks"
    TASKS_CHANGE_STATUS = "tasks:change_status"
    TASKS_CHANGE_PRIORITY = "tasks:change_priority"
    TASKS_EXPORT = "tasks:export"

    MEETINGS_VIEW = "meetings:view"
    MEETINGS_CREATE = "meetings:create"
    MEETINGS_EDIT = "meetings:edit"
    MEETINGS_DELETE = "meetings:delete"
    MEETINGS_MANAGE_ATTENDEES = "meetings:manage_attendees"
    MEETINGS_VIEW_NOTES = "meetings:view_notes"
    MEETINGS_EDIT_NOTES = "meetings:edit_notes"
    MEETINGS_EXPORT = "meetings:export"

    ABSENCES_VIEW = "absences:view"
    ABSENCES_CREATE = "absences:create"
    ABSENCES_APPROVE = "absences:approve"

    RECRUITMENT_VIEW = "recruitment:view"
    RECRUITMENT_CREATE = "recruitment:create"
    RECRUITMENT_EDIT = "recruitment:edit"

    TRAINING_VIEW = "training:view"
    TRAINING_CREATE = "training:create"
    TRAINING_EDIT = "training:edit"

    STATS_VIEW = "stats:view"

    SETTINGS_VIEW = "settings:view"
    SETTINGS_EDIT = "settings:edit"

    ADMIN_PANEL = "admin:panel"

    @property
    def resource(self) -> str:
        return self.value.split(":", 1)[0]

    @property
    def action(self) -> str:
        return self.value.split(":", 1)[1]

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class MinRole:
    role: GroupRole

    def allows(self, role: GroupRole) -> bool:
        return role.rank >= self.role.rank


@dataclass(frozen=True)
class ExplicitRoles:
    roles: frozenset[GroupRole]

    def allows(self, role: GroupRole) -> bool:
        return role in self.roles


CapabilityRequirement = Union[MinRole, ExplicitRoles]


_GUEST = MinRole(GroupRole.GUEST)
_COLLABORATOR = MinRole(GroupRole.COLLABORATOR)
_MANAGER = MinRole(GroupRole.MANAGER)
_ADMIN = MinRole(GroupRole.ADMIN)
_OWNER = MinRole(GroupRole.OWNER)

C = Capability

CAPABILITY_REGISTRY: Mapping[Capability, CapabilityRequirement] = MappingProxyType({
    # Groups
    C.GROUPS_VIEW: _GUEST,
    C.GROUPS_CREATE: _OWNER,
    C.GROUPS_EDIT: _ADMIN,
    C.GROUPS_DELETE: _ADMIN,

    # Users and memberships
    C.USERS_VIEW: _COLLABORATOR,
    C.USERS_CREATE: _ADMIN,
    C.USERS_EDIT: _ADMIN,
    C.USERS_DELETE: _ADMIN,
    C.MEMBERS_VIEW: _GUEST,

    # Projects
    C.PROJECTS_VIEW: _GUEST,
    C.PROJECTS_CREATE: _MANAGER,
    C.PROJECTS_EDIT: _MANAGER,
    C.PROJECTS_DELETE: _ADMIN,
    C.PROJECTS_ARCHIVE: _MANAGER,
    C.PROJECTS_MANAGE_MEMBERS: _MANAGER,
    C.PROJECTS_VIEW_STATS: _MANAGER,
    C.PROJECTS_EXPORT: _ADMIN,

    # Tasks: guests read assigned tasks, collaborators read and write
    C.TASKS_VIEW: _GUEST,
    C.TASKS_VIEW_ALL: _MANAGER,
    C.TASKS_CREATE: _COLLABORATOR,
    C.TASKS_EDIT: _MANAGER,
    C.TASKS_DELETE: _MANAGER,
    C.TASKS_ASSIGN: _MANAGER,
    C.TASKS_MANAGE_SUBTASKS: _COLLABORATOR,
    C.TASKS_CHANGE_STATUS: _COLLABORATOR,
    C.TASKS_CHANGE_PRIORITY: _MANAGER,
    C.TASKS_EXPORT: _MANAGER,

    # Meetings: collaborators only read
    C.MEETINGS_VIEW: _COLLABORATOR,
    C.MEETINGS_CREATE: _MANAGER,
    C.MEETINGS_EDIT: _MANAGER,
    C.MEETINGS_DELETE: _MANAGER,
    C.MEETINGS_MANAGE_ATTENDEES: _MANAGER,
    C.MEETINGS_VIEW_NOTES: _COLLABORATOR,
    C.MEETINGS_EDIT_NOTES: _MANAGER,
    C.MEETINGS_EXPORT: _ADMIN,

    # Absences: owners are not part of the staff planning
    C.ABSENCES_VIEW: _COLLABORATOR,
    C.ABSENCES_CREATE: ExplicitRoles(frozenset({
        GroupRole.COLLABORATOR, GroupRole.MANAGER, GroupRole.ADMIN,
    })),
    C.ABSENCES_APPROVE: _MANAGER,

    # Recruitment and training are run by admins
    C.RECRUITMENT_VIEW: _MANAGER,
    C.RECRUITMENT_CREATE: _ADMIN,
    C.RECRUITMENT_EDIT: _ADMIN,
    C.TRAINING_VIEW: _COLLABORATOR,
    C.TRAINING_CREATE: _ADMIN,
    C.TRAINING_EDIT: _ADMIN,

    # Group dashboard and settings
    C.STATS_VIEW: _MANAGER,
    C.SETTINGS_VIEW: _GUEST,
    C.SETTINGS_EDIT: _ADMIN,
    C.ADMIN_PANEL: _OWNER,
})


def is_registered(capability: object) -> bool:
    """True if `capability` (a Capability or its id string) has a registry entry."""
    try:
        resolve(capability)
    except UnknownCapabilityError:
        return False
    return True


def resolve(capability: Union[Capability, str]) -> CapabilityRequirement:
    """
    Look up the requirement for `capability`.

    Accepts a Capability member or its `resource:action` id.

    Raises:
        UnknownCapabilityError: the id is not in the registry
    """
    key = capability
    if isinstance(capability, str):
        try:
            key = Capability(capability)
        except ValueError:
            raise UnknownCapabilityError(capability) from None
    try:
        return CAPABILITY_REGISTRY[key]
    except (KeyError, TypeError):
        raise UnknownCapabilityError(capability) from None


def role_has_capability(role: GroupRole, capability: Union[Capability, str]) -> bool:
    """Whether holding `role` in a group grants `capability` there."""
    return resolve(capability).allows(role)


def get_capabilities_for_role(role: GroupRole) -> list[Capability]:
    """Every registered capability granted to `role`, in registry order."""
    return [cap for cap, requirement in CAPABILITY_REGISTRY.items() if requirement.allows(role)]
