"""Caller identity for MCP tools and REST dependencies: X-User-Id -> active User."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.crud import crud_user
from app.models.user import User

logger = logging.getLogger(__name__)


class AuthError(Exception):
    pass


class UnknownUserError(AuthError):
    pass


async def resolve_user(db: AsyncSession, user_id: Optional[int]) -> User:
    """Return the active user for user_id or raise AuthError."""
    if user_id is None:
        raise AuthError("X-User-Id header is required")
    user = await crud_user.get(db, user_id)
    if user is None or not user.is_active:
        logger.info("Rejected unknown or inactive user id %s", user_id)
        raise UnknownUserError("Unknown user")
    return user
