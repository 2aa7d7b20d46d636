"""
Project permission wrappers.
"""
from hub.features.permissions.access import IdentityWithAccess
from hub.features.permissions.capabilities import Capability
from hub.features.permissions.guards import can_do


def can_view_projects(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.PROJECTS_VIEW)


def can_create_project(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.PROJECTS_CREATE)


def can_edit_project(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.PROJECTS_EDIT)


def can_delete_project(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.PROJECTS_DELETE)


def can_archive_project(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.PROJECTS_ARCHIVE)


def can_view_project_stats(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.PROJECTS_VIEW_STATS)


def can_export_project(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.PROJECTS_EXPORT)


def can_manage_project_members(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.PROJECTS_MANAGE_MEMBERS)
