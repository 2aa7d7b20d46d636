"""
Seed script to populate demo groups and users.

Run this script after database initialization to create:
- The demo groups
- A few users with their team ranks
- Group memberships with roles

Usage:
    uv run python -m scripts.seed_hub
"""
import asyncio
from datetime import datetime
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hub.core.database.engine import get_db, init_db
from hub.features.groups.models import Group, group_memberships
from hub.features.permissions.roles import GroupRole, TeamRank
from hub.features.users.models import User
from hub.utils import get_logger


log = get_logger(__name__)


DEFAULT_GROUPS = [
    ("bazalthe", "Groupement Bazalthe"),
    ("inoxtag", "Groupement Inoxtag"),
    ("doigby", "Groupement Doigby"),
    ("michou", "Groupement Michou"),
    ("anthony", "Groupement Anthony"),
]

# (email, pseudo, team, {group name: role})
DEFAULT_USERS = [
    ("owner@hub-mail.fr", "Marsha", TeamRank.OWNER, {
        "bazalthe": GroupRole.OWNER,
        "inoxtag": GroupRole.OWNER,
    }),
    ("executive@hub-mail.fr", "Exec", TeamRank.EXECUTIVE, {
        "bazalthe": GroupRole.ADMIN,
        "doigby": GroupRole.OWNER,
    }),
    ("legacy@hub-mail.fr", "Legacy", TeamRank.LEGACY, {
        "bazalthe": GroupRole.ADMIN,
        "michou": GroupRole.MANAGER,
    }),
    ("talent@hub-mail.fr", "Talent", TeamRank.TALENT, {
        "bazalthe": GroupRole.MANAGER,
        "anthony": GroupRole.COLLABORATOR,
    }),
    ("squad@hub-mail.fr", "Squad", TeamRank.SQUAD, {
        "bazalthe": GroupRole.COLLABORATOR,
        "inoxtag": GroupRole.GUEST,
    }),
]


async def seed_groups(db: AsyncSession) -> dict[str, Group]:
    """
    Create the demo groups, skipping the ones already present.

    Returns:
        Dictionary of group name -> Group object
    """
    log.info("Creating demo groups...")
    groups_map = {}

    for name, description in DEFAULT_GROUPS:
        result = await db.execute(select(Group).where(Group.name == name))
        existing = result.scalars().first()

        if existing:
            log.debug(f"Group '{name}' already exists, skipping")
            groups_map[name] = existing
            continue

        group = Group(name=name, description=description)
        db.add(group)
        groups_map[name] = group

    await db.flush()
    log.info(f"{len(groups_map)} groups ready")
    return groups_map


async def seed_users(db: AsyncSession, groups_map: dict[str, Group]):
    """
    Create demo users and their memberships.

    Args:
        db: Database session
        groups_map: Dictionary of group name -> Group object
    """
    log.info("Creating demo users...")

    for email, pseudo, team, roles in DEFAULT_USERS:
        result = await db.execute(select(User).where(User.email == email))
        if result.scalars().first():
            log.debug(f"User '{email}' already exists, skipping")
            continue

        user = User(email=email, pseudo=pseudo, team=team)
        db.add(user)
        await db.flush()

        for group_name, role in roles.items():
            await db.execute(
                group_memberships.insert().values(
                    user_id=user.id,
                    group_id=groups_map[group_name].id,
                    role=role,
                    joined_at=datetime.now()
                )
            )
        log.info(f"Created user '{pseudo}' ({team}) in {len(roles)} groups")

    await db.commit()
    log.info("Demo users created successfully")


async def main():
    """Main function to seed groups and users."""
    log.info("Starting hub seeding...")

    # Initialize database tables first
    log.info("Initializing database tables...")
    await init_db()

    async for db in get_db():
        try:
            groups_map = await seed_groups(db)
            await seed_users(db, groups_map)
            log.info("Hub seeding completed successfully!")
        except Exception as e:
            log.error(f"Error seeding hub: {e}", exc_info=True)
            await db.rollback()
            raise

        break  # Only use first session


if __name__ == "__main__":
    asyncio.run(main())
