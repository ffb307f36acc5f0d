"""
Tests for bearer token handling
"""

from datetime import timedelta

import pytest

from content_service.auth import create_access_token, decode_access_token, get_current_user_id
from content_service.exceptions import AuthenticationError, InvalidTokenError, TokenExpiredError


class TestAccessTokens:
    def test_round_trip_returns_subject(self):
        token = create_access_token({"sub": "user-7"})
        assert decode_access_token(token) == "user-7"

    def test_missing_sub_is_rejected(self):
        with pytest.raises(ValueError):
            create_access_token({"role": "editor"})

    def test_expired_token(self):
        token = create_access_token({"sub": "user-7"}, expires_delta=timedelta(minutes=-1))
        with pytest.raises(TokenExpiredError):
            decode_access_token(token)

    def test_garbage_token(self):
        with pytest.raises(InvalidTokenError):
            decode_access_token("not.a.token")

    @pytest.mark.asyncio
    async def test_current_user_requires_token(self):
        with pytest.raises(AuthenticationError):
            await get_current_user_id(None)

    @pytest.mark.asyncio
    async def test_current_user_from_token(self):
        token = create_access_token({"sub": "user-9"})
        assert await get_current_user_id(token) == "user-9"
