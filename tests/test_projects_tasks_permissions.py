"""
Project and task permission wrappers.
"""
from hub.features.permissions import capabilities
from hub.features.permissions.capabilities import Capability, MinRole
from hub.features.permissions.roles import GroupRole
from hub.features.projects.permissions import (
    can_archive_project,
    can_create_project,
    can_delete_project,
    can_edit_project,
    can_export_project,
    can_manage_project_members,
    can_view_project_stats,
    can_view_projects,
)
from hub.features.tasks.permissions import (
    can_assign_task,
    can_change_task_priority,
    can_change_task_status,
    can_create_task,
    can_delete_task,
    can_edit_task,
    can_export_tasks,
    can_manage_subtasks,
    can_view_all_tasks,
    can_view_tasks,
)


def test_project_permissions_by_role(make_identity):
    guest = make_identity("u1", g1=GroupRole.GUEST)
    manager = make_identity("u2", g1=GroupRole.MANAGER)
    admin = make_identity("u3", g1=GroupRole.ADMIN)

    assert can_view_projects(guest, "g1")
    assert not can_create_project(guest, "g1")

    assert can_create_project(manager, "g1")
    assert can_edit_project(manager, "g1")
    assert can_archive_project(manager, "g1")
    assert can_view_project_stats(manager, "g1")
    assert can_manage_project_members(manager, "g1")
    assert not can_delete_project(manager, "g1")
    assert not can_export_project(manager, "g1")

    assert can_delete_project(admin, "g1")
    assert can_export_project(admin, "g1")


def test_task_permissions_by_role(make_identity):
    guest = make_identity("u1", g1=GroupRole.GUEST)
    collaborator = make_identity("u2", g1=GroupRole.COLLABORATOR)
    manager = make_identity("u3", g1=GroupRole.MANAGER)

    assert can_view_tasks(guest, "g1")
    assert not can_create_task(guest, "g1")
    assert not can_view_all_tasks(collaborator, "g1")

    assert can_create_task(collaborator, "g1")
    assert can_manage_subtasks(collaborator, "g1")
    assert can_change_task_status(collaborator, "g1")
    assert not can_change_task_priority(collaborator, "g1")
    assert not can_assign_task(collaborator, "g1")

    for check in (can_view_all_tasks, can_delete_task, can_assign_task, can_change_task_priority, can_export_tasks):
        assert check(manager, "g1")


def test_assignee_edits_own_task(make_identity):
    collaborator = make_identity("u2", g1=GroupRole.COLLABORATOR)
    assert not can_edit_task(collaborator, "g1")
    assert not can_edit_task(collaborator, "g1", assignee_id="u9")
    assert can_edit_task(collaborator, "g1", assignee_id="u2")
    assert can_edit_task(make_identity("u3", g1=GroupRole.MANAGER), "g1")


def test_project_member_management_follows_the_registry(make_identity, monkeypatch):
    assert not can_manage_project_members(make_identity("u1", g1=GroupRole.COLLABORATOR), "g1")

    monkeypatch.setattr(
        capabilities, "CAPABILITY_REGISTRY", {Capability.PROJECTS_MANAGE_MEMBERS: MinRole(GroupRole.OWNER)}
    )
    assert not can_manage_project_members(make_identity("u2", g1=GroupRole.ADMIN), "g1")
