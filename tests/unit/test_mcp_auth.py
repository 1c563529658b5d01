"""Tests for caller identity resolution shared by MCP tools and REST routes."""

import pytest

from app.mcp.auth import AuthError, UnknownUserError, resolve_user


@pytest.mark.asyncio
async def test_missing_user_id_is_rejected(db):
    with pytest.raises(AuthError, match="required"):
        await resolve_user(db, None)


@pytest.mark.asyncio
async def test_unknown_user_is_rejected(db):
    with pytest.raises(UnknownUserError):
        await resolve_user(db, 12345)


@pytest.mark.asyncio
async def test_inactive_user_is_rejected(db, make_user):
    user = await make_user("Gone", is_active=False)
    with pytest.raises(UnknownUserError):
        await resolve_user(db, user.id)


@pytest.mark.asyncio
async def test_active_user_is_returned(db, make_user):
    user = await make_user("Here")
    resolved = await resolve_user(db, user.id)
    assert resolved.id == user.id
