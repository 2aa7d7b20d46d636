"""
Group server actions against an in-memory database.
"""
import pytest
from sqlalchemy import select

from hub.core.actions import ActionErrorCode
from hub.features.groups.actions import (
    add_group_member_action,
    create_group_action,
    delete_group_action,
    get_group_action,
    get_groups_action,
    list_group_members_action,
    remove_group_member_action,
    update_group_action,
    update_member_role_action,
)
from hub.features.groups.dependencies import find_group, get_member_role
from hub.features.groups.models import Group
from hub.features.permissions.roles import GroupRole


pytestmark = pytest.mark.anyio


async def test_owner_creates_group_and_becomes_its_owner(db, factory):
    owner = await factory.user("Marsha")
    bazalthe = await factory.group("bazalthe")
    await factory.member(owner, bazalthe, GroupRole.OWNER)

    result = await create_group_action(db, await factory.identity(owner), {"name": "Nouveau", "logo_url": ""})

    assert result.success
    group_id = result.data["id"]
    assert (await find_group(db, group_id)).name == "Nouveau"
    assert await get_member_role(db, group_id, owner.id) is GroupRole.OWNER


async def test_non_owner_cannot_create_group(db, factory):
    admin = await factory.user("Admin")
    group = await factory.group("bazalthe")
    await factory.member(admin, group, GroupRole.ADMIN)

    result = await create_group_action(db, await factory.identity(admin), {"name": "Nouveau"})

    assert not result.success
    assert result.code == ActionErrorCode.FORBIDDEN
    created = (await db.execute(select(Group).where(Group.name == "Nouveau"))).first()
    assert created is None


async def test_create_group_unauthenticated_and_invalid(db, factory):
    owner = await factory.user("Marsha")
    group = await factory.group("bazalthe")
    await factory.member(owner, group, GroupRole.OWNER)

    result = await create_group_action(db, None, {"name": "Nouveau"})
    assert result.code == ActionErrorCode.UNAUTHENTICATED

    result = await create_group_action(db, await factory.identity(owner), {"name": "x"})
    assert result.code == ActionErrorCode.INVALID
    assert result.error


async def test_collaborator_cannot_delete_group(db, factory):
    collaborator = await factory.user("Collab")
    group = await factory.group("bazalthe")
    await factory.member(collaborator, group, GroupRole.COLLABORATOR)

    result = await delete_group_action(db, await factory.identity(collaborator), group.id)

    assert result.code == ActionErrorCode.FORBIDDEN
    assert await find_group(db, group.id) is not None


async def test_admin_deletes_group(db, factory):
    admin = await factory.user("Admin")
    group = await factory.group("bazalthe")
    await factory.member(admin, group, GroupRole.ADMIN)

    result = await delete_group_action(db, await factory.identity(admin), group.id)

    assert result.success
    assert await find_group(db, group.id) is None
    assert await get_member_role(db, group.id, admin.id) is None


async def test_missing_group_is_not_found_before_forbidden(db, factory):
    nobody = await factory.user("Nobody")
    identity = await factory.identity(nobody)

    assert (await delete_group_action(db, identity, "missing")).code == ActionErrorCode.NOT_FOUND
    assert (await get_group_action(db, identity, "missing")).code == ActionErrorCode.NOT_FOUND
    assert (await update_group_action(db, identity, "missing", {"name": "abc"})).code == ActionErrorCode.NOT_FOUND


async def test_update_group(db, factory):
    admin = await factory.user("Admin")
    manager = await factory.user("Manager")
    group = await factory.group("bazalthe")
    await factory.member(admin, group, GroupRole.ADMIN)
    await factory.member(manager, group, GroupRole.MANAGER)

    denied = await update_group_action(db, await factory.identity(manager), group.id, {"name": "Renamed"})
    assert denied.code == ActionErrorCode.FORBIDDEN

    result = await update_group_action(
        db, await factory.identity(admin), group.id,
        {"description": "Le groupement", "logo_url": "https://cdn.example.com/logo.png"}
    )
    assert result.success
    assert result.data["name"] == "bazalthe"
    assert result.data["description"] == "Le groupement"
    assert result.data["logo_url"] == "https://cdn.example.com/logo.png"
    assert result.data["member_count"] == 2


async def test_list_groups_only_shows_memberships(db, factory):
    user = await factory.user("Squad")
    mine = await factory.group("inoxtag")
    await factory.group("doigby")
    await factory.member(user, mine, GroupRole.GUEST)

    result = await get_groups_action(db, await factory.identity(user))

    assert result.success
    assert result.data["total"] == 1
    assert [g["id"] for g in result.data["groups"]] == [mine.id]


async def test_list_members(db, factory):
    guest = await factory.user("Guest")
    owner = await factory.user("Owner")
    outsider = await factory.user("Outsider")
    group = await factory.group("michou")
    await factory.member(guest, group, GroupRole.GUEST)
    await factory.member(owner, group, GroupRole.OWNER)

    result = await list_group_members_action(db, await factory.identity(guest), group.id)
    assert result.success
    assert {(m["pseudo"], m["role"]) for m in result.data["members"]} == {("Guest", "Guest"), ("Owner", "Owner")}

    denied = await list_group_members_action(db, await factory.identity(outsider), group.id)
    assert denied.code == ActionErrorCode.FORBIDDEN


async def test_admin_re_roles_member_only_where_admin(db, factory):
    x = await factory.user("X")
    y = await factory.user("Y")
    g1 = await factory.group("g1")
    g2 = await factory.group("g2")
    await factory.member(x, g1, GroupRole.ADMIN)
    await factory.member(y, g1, GroupRole.COLLABORATOR)
    await factory.member(y, g2, GroupRole.COLLABORATOR)
    identity = await factory.identity(x)

    result = await update_member_role_action(db, identity, g1.id, y.id, "Manager")
    assert result.success
    assert await get_member_role(db, g1.id, y.id) is GroupRole.MANAGER

    result = await update_member_role_action(db, identity, g2.id, y.id, GroupRole.MANAGER)
    assert result.code == ActionErrorCode.FORBIDDEN
    assert await get_member_role(db, g2.id, y.id) is GroupRole.COLLABORATOR


async def test_re_role_limits(db, factory):
    admin = await factory.user("Admin")
    owner = await factory.user("Owner")
    member = await factory.user("Member")
    group = await factory.group("anthony")
    await factory.member(admin, group, GroupRole.ADMIN)
    await factory.member(owner, group, GroupRole.OWNER)
    await factory.member(member, group, GroupRole.GUEST)
    identity = await factory.identity(admin)

    result = await update_member_role_action(db, identity, group.id, member.id, GroupRole.OWNER)
    assert result.code == ActionErrorCode.FORBIDDEN

    result = await update_member_role_action(db, identity, group.id, owner.id, GroupRole.GUEST)
    assert result.code == ActionErrorCode.FORBIDDEN
    assert await get_member_role(db, group.id, owner.id) is GroupRole.OWNER

    result = await update_member_role_action(db, identity, group.id, admin.id, GroupRole.OWNER)
    assert result.code == ActionErrorCode.FORBIDDEN

    result = await update_member_role_action(db, identity, group.id, member.id, "Superuser")
    assert result.code == ActionErrorCode.INVALID

    result = await update_member_role_action(db, identity, group.id, "missing", GroupRole.GUEST)
    assert result.code == ActionErrorCode.NOT_FOUND


async def test_add_member(db, factory):
    admin = await factory.user("Admin")
    newcomer = await factory.user("Newcomer")
    group = await factory.group("bazalthe")
    await factory.member(admin, group, GroupRole.ADMIN)
    identity = await factory.identity(admin)

    result = await add_group_member_action(db, identity, group.id, newcomer.id, GroupRole.OWNER)
    assert result.code == ActionErrorCode.FORBIDDEN

    result = await add_group_member_action(db, identity, group.id, newcomer.id, "collaborator")
    assert result.success
    assert result.data["role"] == "Collaborator"

    result = await add_group_member_action(db, identity, group.id, newcomer.id, GroupRole.GUEST)
    assert result.code == ActionErrorCode.CONFLICT

    result = await add_group_member_action(db, identity, group.id, "missing", GroupRole.GUEST)
    assert result.code == ActionErrorCode.NOT_FOUND


async def test_remove_member(db, factory):
    admin = await factory.user("Admin")
    owner = await factory.user("Owner")
    member = await factory.user("Member")
    group = await factory.group("bazalthe")
    await factory.member(admin, group, GroupRole.ADMIN)
    await factory.member(owner, group, GroupRole.OWNER)
    await factory.member(member, group, GroupRole.MANAGER)
    identity = await factory.identity(admin)

    assert (await remove_group_member_action(db, identity, group.id, admin.id)).code == ActionErrorCode.FORBIDDEN
    assert (await remove_group_member_action(db, identity, group.id, owner.id)).code == ActionErrorCode.FORBIDDEN

    result = await remove_group_member_action(db, identity, group.id, member.id)
    assert result.success
    assert await get_member_role(db, group.id, member.id) is None

    result = await remove_group_member_action(db, identity, group.id, member.id)
    assert result.code == ActionErrorCode.NOT_FOUND
