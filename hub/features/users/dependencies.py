"""
FastAPI dependencies resolving the caller.

Authentication happens upstream: the gateway forwards the authenticated user
id in `config.USER_ID_HEADER`. These dependencies only look the user up; a
missing header, an unknown id or a deactivated account all resolve to None so
that actions can report "not authenticated" themselves.
"""
from typing import Annotated, Optional
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hub.core import config
from hub.core.actions import message
from hub.core.database.engine import get_db
from hub.features.users.models import User
from hub.utils import get_logger


log = get_logger(__name__)


async def get_user_by_id(db: AsyncSession, user_id: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_current_user(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Optional[User]:
    """
    Get the calling user from the gateway header, or None.

    Usage:
        @router.get("/me")
        async def get_me(user: Optional[User] = Depends(get_current_user)):
            ...
    """
    user_id = request.headers.get(config.USER_ID_HEADER)
    if not user_id:
        return None

    user = await get_user_by_id(db, user_id)
    if user is None:
        log.info(f"Caller id {user_id!r} does not match any user")
        return None
    if not user.is_active:
        log.info(f"Caller {user_id} is deactivated")
        return None
    return user


async def require_current_user(
    user: Annotated[Optional[User], Depends(get_current_user)]
) -> User:
    """Like get_current_user, but answers 401 when nobody is calling."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=message("unauthenticated"),
        )
    return user


def get_caller_key(request: Request) -> str:
    """
    Extract the caller id for rate limiting.
    Used with slowapi Limiter.
    """
    return request.headers.get(config.USER_ID_HEADER) or "anonymous"
