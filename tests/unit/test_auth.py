"""Unit tests for the auth dependency."""

import pytest

from docqa.app.api.auth import get_current_context
from docqa.app.errors import UnauthorizedError


@pytest.mark.asyncio
async def test_get_current_context_valid_bearer() -> None:
    """Test that the bearer token becomes the caller's user_id."""
    ctx = await get_current_context(authorization="Bearer user_2abc")

    assert ctx.user_id == "user_2abc"


@pytest.mark.asyncio
async def test_get_current_context_missing_header_is_unauthorized() -> None:
    """Test that a missing header never falls back to a default identity."""
    with pytest.raises(UnauthorizedError) as exc_info:
        await get_current_context(authorization=None)

    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "Unauthorized. Please sign in."


@pytest.mark.asyncio
@pytest.mark.parametrize("header", ["NotBearer token", "Bearer", "Bearer    ", "Basic dXNlcg=="])
async def test_get_current_context_malformed_header_is_unauthorized(header: str) -> None:
    """Test that non-bearer or empty tokens are rejected."""
    with pytest.raises(UnauthorizedError):
        await get_current_context(authorization=header)
