"""FastAPI dependencies."""

from typing import Annotated, Optional
from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.mcp.auth import resolve_user, AuthError, UnknownUserError
from app.models.user import User


async def get_user_id(
    x_user_id: Annotated[Optional[int], Header()] = None,
) -> Optional[int]:
    return x_user_id


async def require_user(
    user_id: Annotated[Optional[int], Depends(get_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    try:
        return await resolve_user(db, user_id)
    except UnknownUserError as exc:
        raise HTTPException(status_code=403, detail=str(exc))
    except AuthError as exc:
        raise HTTPException(status_code=401, detail=str(exc))
