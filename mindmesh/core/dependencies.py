"""
FastAPI dependencies. Injected into route handlers.
"""

from typing import Optional

from fastapi import Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from .auth import AuthenticatedUser, get_current_user
from .database import get_db as _get_db, is_configured


async def get_db() -> AsyncSession:
    """Yields an async DB session per request."""
    async for session in _get_db():
        yield session


async def get_optional_db() -> Optional[AsyncSession]:
    """Like get_db, but yields None when no DATABASE_URL is set."""
    if not is_configured():
        yield None
        return
    async for session in _get_db():
        yield session


async def get_user(
    authorization: str = Header(default=""),
) -> AuthenticatedUser:
    """
    Resolve authenticated user from Authorization header.
    Returns dev user if FF_USE_AUTH=false.
    """
    try:
        return await get_current_user(authorization)
    except PermissionError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_optional_user(
    authorization: str = Header(default=""),
) -> Optional[AuthenticatedUser]:
    """Same as get_user, but anonymous callers get None instead of a 401."""
    try:
        return await get_current_user(authorization)
    except PermissionError:
        return None
