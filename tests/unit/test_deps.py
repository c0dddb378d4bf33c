"""Unit tests for FastAPI dependency injection functions."""

import time
from unittest.mock import MagicMock, patch

import pytest
from fastapi import HTTPException

from src.api.deps import get_current_user, is_staff
from src.api.middleware.auth import AuthError, AuthErrorCode
from src.schemas.auth import TokenPayload, UserContext

USER_ID = "550e8400-e29b-41d4-a716-446655440000"


def _payload(role: str | None = "authenticated") -> TokenPayload:
    now = int(time.time())
    return TokenPayload(sub=USER_ID, email="buyer@example.com", role=role, exp=now + 3600, iat=now)


class TestGetCurrentUser:
    """Tests for get_current_user dependency."""

    @pytest.mark.asyncio
    @patch("src.api.deps.decode_jwt")
    async def test_extracts_user_context(self, mock_decode: MagicMock) -> None:
        mock_decode.return_value = _payload()

        user = await get_current_user("Bearer valid-token")

        mock_decode.assert_called_once_with("valid-token")
        assert isinstance(user, UserContext)
        assert str(user.user_id) == USER_ID
        assert user.role == "authenticated"

    @pytest.mark.asyncio
    async def test_missing_header_is_401(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user("")

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_malformed_header_is_401(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user("Token abc")

        assert exc_info.value.status_code == 401
        assert "Bearer" in exc_info.value.detail

    @pytest.mark.asyncio
    @patch("src.api.deps.decode_jwt")
    async def test_expired_token_is_401(self, mock_decode: MagicMock) -> None:
        mock_decode.side_effect = AuthError("Token has expired", AuthErrorCode.TOKEN_EXPIRED)

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user("Bearer expired")

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"


class TestIsStaff:
    """Tests for is_staff."""

    def test_staff_role(self, test_settings: object) -> None:
        assert is_staff(_payload(role="admin").to_user_context())

    def test_regular_user(self, test_settings: object) -> None:
        assert not is_staff(_payload().to_user_context())

    def test_no_role(self, test_settings: object) -> None:
        assert not is_staff(_payload(role=None).to_user_context())
