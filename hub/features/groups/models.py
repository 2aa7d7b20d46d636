"""
Group models.

Groups are the tenant boundary of the hub. A user belongs to any number of
groups through `group_memberships`, holding exactly one GroupRole in each
(the composite primary key forbids a second row for the same pair).
"""
from datetime import datetime
from sqlalchemy import String, ForeignKey, Table, Column, DateTime, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from hub.core.database.base import Base, TimestampMixin, generate_ulid
from hub.features.permissions.roles import GroupRole


group_memberships = Table(
    "group_memberships",
    Base.metadata,
    Column("user_id", String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("group_id", String(26), ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "role",
        SQLEnum(GroupRole, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        nullable=False,
        default=GroupRole.COLLABORATOR,
    ),
    Column("joined_at", DateTime(timezone=True), nullable=False, default=datetime.now),
)


class Group(Base, TimestampMixin):
    """A hub entity (e.g. one creator's team) whose members hold group roles."""
    __tablename__ = "groups"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    logo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<Group(id={self.id}, name={self.name!r})>"
