"""
Task permission wrappers.

The assignee of a task may always edit it, whatever their role.
"""
from typing import Optional

from hub.features.permissions.access import IdentityWithAccess
from hub.features.permissions.capabilities import Capability
from hub.features.permissions.guards import can_do


def can_view_tasks(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.TASKS_VIEW)


def can_view_all_tasks(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.TASKS_VIEW_ALL)


def can_create_task(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.TASKS_CREATE)


def can_edit_task(user: IdentityWithAccess, group_id: str, assignee_id: Optional[str] = None) -> bool:
    if assignee_id is not None and assignee_id == user.id:
        return True
    return can_do(user, group_id, Capability.TASKS_EDIT)


def can_delete_task(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.TASKS_DELETE)


def can_assign_task(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.TASKS_ASSIGN)


def can_manage_subtasks(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.TASKS_MANAGE_SUBTASKS)


def can_change_task_status(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.TASKS_CHANGE_STATUS)


def can_change_task_priority(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.TASKS_CHANGE_PRIORITY)


def can_export_tasks(user: IdentityWithAccess, group_id: str) -> bool:
    return can_do(user, group_id, Capability.TASKS_EXPORT)
