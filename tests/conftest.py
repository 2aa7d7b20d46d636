"""
Pytest configuration for hub tests.

Tests run against an in-memory SQLite database; each test gets a fresh
schema. AnyIO is pinned to the asyncio backend.
"""
import os

os.environ.setdefault("HUB_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from datetime import datetime  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from hub.core.database.engine import get_db, init_db  # noqa: E402
from hub.features.groups.models import Group, group_memberships  # noqa: E402
from hub.features.permissions.access import IdentityWithAccess, Membership  # noqa: E402
from hub.features.permissions.dependencies import load_identity_with_access  # noqa: E402
from hub.features.permissions.roles import GroupRole, TeamRank  # noqa: E402
from hub.features.users.models import User  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


def _identity(user_id: str, **roles: GroupRole) -> IdentityWithAccess:
    return IdentityWithAccess(
        id=user_id,
        memberships=[Membership(group_id=g, role=r) for g, r in roles.items()],
    )


@pytest.fixture
def make_identity():
    """In-memory identity: make_identity("u1", g1=GroupRole.ADMIN)."""
    return _identity


@pytest.fixture
async def engine(anyio_backend):
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


class Factory:
    """Creates rows directly, bypassing the permission checks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def user(self, pseudo: str, team: TeamRank = TeamRank.SQUAD, **fields) -> User:
        user = User(email=f"{pseudo.lower()}@hub-mail.fr", pseudo=pseudo, team=team, **fields)
        self.db.add(user)
        await self.db.commit()
        return user

    async def group(self, name: str) -> Group:
        group = Group(name=name)
        self.db.add(group)
        await self.db.commit()
        return group

    async def member(self, user: User, group: Group, role: GroupRole):
        await self.db.execute(
            group_memberships.insert().values(
                user_id=user.id, group_id=group.id, role=role, joined_at=datetime.now()
            )
        )
        await self.db.commit()

    async def identity(self, user: User) -> IdentityWithAccess:
        return await load_identity_with_access(self.db, user)


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
async def client(session_factory):
    from hub.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
