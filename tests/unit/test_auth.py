"""Unit tests for auth module."""

import uuid

import pytest
from fastapi import HTTPException

from backend.app.api.auth import DEV_USER_ID, get_current_context


@pytest.mark.asyncio
async def test_get_current_context_no_header_uses_defaults() -> None:
    """Test that missing auth header uses the development user."""
    ctx = await get_current_context(authorization=None)

    assert ctx.user_id == DEV_USER_ID


@pytest.mark.asyncio
async def test_get_current_context_valid_token_format() -> None:
    """Test valid user token format."""
    user_id = uuid.uuid4()

    ctx = await get_current_context(authorization=f"Bearer {user_id}")

    assert ctx.user_id == user_id


@pytest.mark.asyncio
async def test_get_current_context_invalid_bearer_format() -> None:
    """Test invalid bearer format raises 401."""
    with pytest.raises(HTTPException) as exc_info:
        await get_current_context(authorization="NotBearer token")

    assert exc_info.value.status_code == 401
    assert "Invalid authorization header format" in exc_info.value.detail


@pytest.mark.asyncio
async def test_get_current_context_invalid_uuid_format() -> None:
    """Test invalid UUID format raises 401."""
    with pytest.raises(HTTPException) as exc_info:
        await get_current_context(authorization="Bearer not-a-uuid")

    assert exc_info.value.status_code == 401
