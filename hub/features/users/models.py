"""
User model with ULID primary keys.

A user carries a profile (organizational identity included) and a TeamRank.
Group membership lives in `group_memberships` (see groups.models).
"""
from sqlalchemy import String, Boolean, Integer, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from hub.core.database.base import Base, TimestampMixin, generate_ulid
from hub.features.permissions.roles import TeamRank


class User(Base, TimestampMixin):
    """
    User model representing hub members.

    `team` is the organizational rank consulted by the field edit policy; it is
    unrelated to the roles the user holds in groups.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    # Identity
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    pseudo: Mapped[str] = mapped_column(String(100), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    discord_username: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Organization
    entity: Mapped[str | None] = mapped_column(String(100), nullable=True)
    team: Mapped[TeamRank] = mapped_column(
        SQLEnum(TeamRank, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        default=TeamRank.SQUAD,
        nullable=False,
    )
    division: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # 0 (recruit) to 3
    role_secondary: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Status flags
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r}, team={self.team})>"
