"""
User server actions: group role gates the action, TeamRank gates each field.
"""
import pytest

from hub.core.actions import ActionErrorCode
from hub.features.groups.dependencies import get_member_role
from hub.features.permissions.roles import GroupRole, TeamRank
from hub.features.users.actions import (
    create_user_action,
    delete_user_action,
    get_user_action,
    get_users_action,
    update_user_action,
    update_user_status_action,
)
from hub.features.users.dependencies import get_user_by_id


pytestmark = pytest.mark.anyio


@pytest.fixture
async def bazalthe(factory):
    """A group with an Admin of rank Legacy and a Collaborator target."""
    group = await factory.group("bazalthe")
    editor = await factory.user("Editor", team=TeamRank.LEGACY)
    target = await factory.user("Target", team=TeamRank.SQUAD, phone="0600000000")
    await factory.member(editor, group, GroupRole.ADMIN)
    await factory.member(target, group, GroupRole.COLLABORATOR)
    return group, editor, target


async def test_legacy_cannot_change_team_but_can_change_phone(db, factory, bazalthe):
    group, editor, target = bazalthe
    identity = await factory.identity(editor)

    result = await update_user_action(db, identity, editor.team, group.id, target.id, {"team": "Talent"})
    assert result.code == ActionErrorCode.FORBIDDEN
    assert "team" in result.error
    assert (await get_user_by_id(db, target.id)).team is TeamRank.SQUAD

    result = await update_user_action(db, identity, editor.team, group.id, target.id, {"phone": "0611111111"})
    assert result.success
    assert result.data["phone"] == "0611111111"


async def test_one_denied_field_rejects_the_whole_update(db, factory, bazalthe):
    group, editor, target = bazalthe
    identity = await factory.identity(editor)

    result = await update_user_action(
        db, identity, editor.team, group.id, target.id, {"phone": "0622222222", "division": 2}
    )

    assert result.code == ActionErrorCode.FORBIDDEN
    assert (await get_user_by_id(db, target.id)).phone == "0600000000"


async def test_admin_without_editor_rank_edits_nothing(db, factory, bazalthe):
    group, _, target = bazalthe
    talent = await factory.user("Talent", team=TeamRank.TALENT)
    await factory.member(talent, group, GroupRole.ADMIN)

    result = await update_user_action(
        db, await factory.identity(talent), talent.team, group.id, target.id, {"phone": "0633333333"}
    )
    assert result.code == ActionErrorCode.FORBIDDEN


async def test_executive_needs_users_edit_in_the_group(db, factory, bazalthe):
    group, _, target = bazalthe
    executive = await factory.user("Exec", team=TeamRank.EXECUTIVE)
    await factory.member(executive, group, GroupRole.MANAGER)

    result = await update_user_action(
        db, await factory.identity(executive), executive.team, group.id, target.id, {"team": "Legacy"}
    )
    assert result.code == ActionErrorCode.FORBIDDEN


async def test_self_edit(db, factory, bazalthe):
    group, _, target = bazalthe
    identity = await factory.identity(target)

    result = await update_user_action(db, identity, target.team, group.id, target.id, {"discord_username": "target#1"})
    assert result.success
    assert result.data["discord_username"] == "target#1"

    # no self-promotion
    result = await update_user_action(db, identity, target.team, group.id, target.id, {"team": "Owner"})
    assert result.code == ActionErrorCode.FORBIDDEN


async def test_update_validation_and_conflicts(db, factory, bazalthe):
    group, editor, target = bazalthe
    identity = await factory.identity(editor)

    result = await update_user_action(db, identity, editor.team, group.id, target.id, {"email": "not-an-email"})
    assert result.code == ActionErrorCode.INVALID

    result = await update_user_action(db, identity, editor.team, group.id, target.id, {"email": editor.email})
    assert result.code == ActionErrorCode.CONFLICT

    result = await update_user_action(db, identity, editor.team, group.id, "missing", {"phone": "1"})
    assert result.code == ActionErrorCode.NOT_FOUND


async def test_target_outside_group_is_not_found(db, factory, bazalthe):
    group, editor, _ = bazalthe
    stranger = await factory.user("Stranger")

    result = await update_user_action(
        db, await factory.identity(editor), editor.team, group.id, stranger.id, {"phone": "1"}
    )
    assert result.code == ActionErrorCode.NOT_FOUND


async def test_create_user(db, factory, bazalthe):
    group, editor, _ = bazalthe
    identity = await factory.identity(editor)

    result = await create_user_action(
        db, identity, editor.team, group.id,
        {"email": "new@hub-mail.fr", "pseudo": "Nouveau", "role": "Manager"}
    )
    assert result.success
    assert await get_member_role(db, group.id, result.data["id"]) is GroupRole.MANAGER

    result = await create_user_action(
        db, identity, editor.team, group.id, {"email": "new@hub-mail.fr", "pseudo": "Again"}
    )
    assert result.code == ActionErrorCode.CONFLICT

    # Legacy may not set the team
    result = await create_user_action(
        db, identity, editor.team, group.id, {"email": "other@hub-mail.fr", "pseudo": "Other", "team": "Talent"}
    )
    assert result.code == ActionErrorCode.FORBIDDEN

    result = await create_user_action(
        db, identity, editor.team, group.id, {"email": "boss@hub-mail.fr", "pseudo": "Boss", "role": "Owner"}
    )
    assert result.code == ActionErrorCode.FORBIDDEN


async def test_collaborator_cannot_create_user(db, factory, bazalthe):
    group, _, target = bazalthe

    result = await create_user_action(
        db, await factory.identity(target), target.team, group.id, {"email": "x@hub-mail.fr", "pseudo": "Xx"}
    )
    assert result.code == ActionErrorCode.FORBIDDEN


async def test_delete_user(db, factory, bazalthe):
    group, editor, target = bazalthe
    identity = await factory.identity(editor)

    result = await delete_user_action(db, identity, group.id, editor.id)
    assert result.code == ActionErrorCode.FORBIDDEN
    assert await get_user_by_id(db, editor.id) is not None

    result = await delete_user_action(db, await factory.identity(target), group.id, editor.id)
    assert result.code == ActionErrorCode.FORBIDDEN

    result = await delete_user_action(db, identity, group.id, target.id)
    assert result.success
    assert await get_user_by_id(db, target.id) is None
    assert await get_member_role(db, group.id, target.id) is None


async def test_deactivate_user(db, factory, bazalthe):
    group, editor, target = bazalthe
    identity = await factory.identity(editor)

    result = await update_user_status_action(db, identity, group.id, editor.id, {"is_active": False})
    assert result.code == ActionErrorCode.FORBIDDEN

    result = await update_user_status_action(db, identity, group.id, target.id, {"is_active": False})
    assert result.success
    assert result.data["is_active"] is False


async def test_get_users(db, factory, bazalthe):
    group, editor, target = bazalthe
    guest = await factory.user("Guest")
    await factory.member(guest, group, GroupRole.GUEST)

    result = await get_users_action(db, await factory.identity(editor), group.id, page=1, page_size=2)
    assert result.success
    assert result.data["total"] == 3
    assert len(result.data["users"]) == 2

    assert (await get_users_action(db, await factory.identity(guest), group.id)).code == ActionErrorCode.FORBIDDEN
    assert (await get_users_action(db, None, group.id)).code == ActionErrorCode.UNAUTHENTICATED

    # anyone reads their own profile
    result = await get_user_action(db, await factory.identity(guest), "", guest.id)
    assert result.success
    assert result.data["pseudo"] == "Guest"
    assert (await get_user_action(db, await factory.identity(guest), group.id, target.id)).code == ActionErrorCode.FORBIDDEN


@pytest.mark.parametrize("field", ["pseudo", "email", "team", "division"])
async def test_required_fields_cannot_be_cleared(db, factory, bazalthe, field):
    group, _, target = bazalthe
    owner = await factory.user("Boss", team=TeamRank.OWNER)
    await factory.member(owner, group, GroupRole.OWNER)

    result = await update_user_action(
        db, await factory.identity(owner), owner.team, group.id, target.id, {field: None}
    )

    assert result.code == ActionErrorCode.INVALID
    assert (await get_user_by_id(db, target.id)).pseudo == "Target"


async def test_optional_fields_can_be_cleared(db, factory, bazalthe):
    group, editor, target = bazalthe

    result = await update_user_action(
        db, await factory.identity(editor), editor.team, group.id, target.id, {"phone": None}
    )

    assert result.success
    assert result.data["phone"] is None


async def test_admin_cannot_delete_or_deactivate_owner(db, factory, bazalthe):
    group, editor, _ = bazalthe
    owner = await factory.user("Boss", team=TeamRank.OWNER)
    await factory.member(owner, group, GroupRole.OWNER)
    identity = await factory.identity(editor)

    result = await delete_user_action(db, identity, group.id, owner.id)
    assert result.code == ActionErrorCode.FORBIDDEN
    assert await get_user_by_id(db, owner.id) is not None
    assert await get_member_role(db, group.id, owner.id) is GroupRole.OWNER

    result = await update_user_status_action(db, identity, group.id, owner.id, {"is_active": False})
    assert result.code == ActionErrorCode.FORBIDDEN
    assert (await get_user_by_id(db, owner.id)).is_active is True


async def test_admin_deletes_another_admin(db, factory, bazalthe):
    group, editor, _ = bazalthe
    peer = await factory.user("Peer")
    await factory.member(peer, group, GroupRole.ADMIN)

    result = await delete_user_action(db, await factory.identity(editor), group.id, peer.id)

    assert result.success
