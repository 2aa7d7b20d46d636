"""
SQLAlchemy declarative base and common model utilities.

All SQLAlchemy models inherit from Base.
"""
from datetime import datetime
from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
import ulid


def generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ulid.new())


class Base(DeclarativeBase):
    """Base class for all hub models."""
    pass


class TimestampMixin:
    """
    Mixin adding created_at and updated_at timestamps to models.

    Usage:
        class Group(Base, TimestampMixin):
            __tablename__ = "groups"
            id: Mapped[str] = mapped_column(primary_key=True)
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
