"""
Tests for the four auth use cases.
"""

from unittest.mock import AsyncMock, patch

import pytest

from auth.errors import (
    CreationRejected,
    DuplicateUser,
    InvalidCredentials,
    InvalidExternalToken,
    UserNotFound,
)
from auth.models import LoginRequest, RegisterRequest


def _register(name: str = "alice", password: str | None = "Pw1!") -> RegisterRequest:
    return RegisterRequest(username=name, password=password)


class TestRegister:
    @pytest.mark.asyncio
    async def test_new_user_gets_buyer_role(self, service, token_service):
        resp = await service.register(_register())
        assert resp.username == "alice"
        assert resp.roles == ["buyer"]
        claims = token_service.decode_token(resp.token)
        assert claims.username == "alice"
        assert claims.roles == resp.roles

    @pytest.mark.asyncio
    async def test_second_registration_is_duplicate(self, service):
        await service.register(_register(password="Pw1!"))
        with pytest.raises(DuplicateUser):
            await service.register(_register(password="Pw2!"))

    @pytest.mark.asyncio
    async def test_weak_password_rejected_with_reasons(self, service):
        with pytest.raises(CreationRejected) as exc_info:
            await service.register(_register(password="weak"))
        assert exc_info.value.reasons
        assert "uppercase" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_missing_password_rejected(self, service, store):
        with pytest.raises(CreationRejected):
            await service.register(_register(password=None))
        assert await store.find_by_username("alice") is None

    @pytest.mark.asyncio
    async def test_store_level_duplicate_becomes_duplicate_user(self, service, store, db):
        await service.register(_register(password="Pw1!"))
        await db.commit()

        # Both lookups miss, as when a concurrent request inserts the name first
        with patch.object(store, "find_by_username", AsyncMock(return_value=None)):
            with pytest.raises(DuplicateUser):
                await service.register(_register(password="Pw2!"))

    @pytest.mark.asyncio
    async def test_explicit_role(self, service):
        resp = await service.register(_register(), role="seller")
        assert resp.roles == ["seller"]


class TestLogin:
    @pytest.mark.asyncio
    async def test_success(self, service, token_service):
        await service.register(_register())
        resp = await service.login(LoginRequest(username="alice", password="Pw1!"))
        assert resp.roles == ["buyer"]
        assert token_service.decode_token(resp.token).username == "alice"

    @pytest.mark.asyncio
    async def test_wrong_password(self, service):
        await service.register(_register())
        with pytest.raises(InvalidCredentials):
            await service.login(LoginRequest(username="alice", password="wrong"))

    @pytest.mark.asyncio
    async def test_missing_password_is_wrong_password(self, service):
        await service.register(_register())
        with pytest.raises(InvalidCredentials):
            await service.login(LoginRequest(username="alice"))

    @pytest.mark.asyncio
    async def test_unknown_user_is_distinct_error(self, service):
        with pytest.raises(UserNotFound) as exc_info:
            await service.login(LoginRequest(username="nobody", password="Pw1!"))
        assert exc_info.value.detail == "There is not user with username nobody"

    @pytest.mark.asyncio
    async def test_repeated_failures_do_not_lock_out(self, service):
        await service.register(_register())
        for _ in range(5):
            with pytest.raises(InvalidCredentials):
                await service.login(LoginRequest(username="alice", password="wrong"))
        resp = await service.login(LoginRequest(username="alice", password="Pw1!"))
        assert resp.token


class TestGoogleFlows:
    @pytest.mark.asyncio
    async def test_register_assigns_default_role(self, service, make_google_token, token_service):
        resp = await service.oauth_register(make_google_token("bob@example.com"))
        assert resp.username == "bob@example.com"
        assert resp.roles == ["buyer"]
        assert token_service.decode_token(resp.token).roles == ["buyer"]

    @pytest.mark.asyncio
    async def test_register_twice_is_duplicate(self, service, make_google_token):
        await service.oauth_register(make_google_token())
        with pytest.raises(DuplicateUser):
            await service.oauth_register(make_google_token())

    @pytest.mark.asyncio
    async def test_register_clashes_with_local_account(self, service, make_google_token):
        await service.register(_register(name="bob@example.com"))
        with pytest.raises(DuplicateUser):
            await service.oauth_register(make_google_token("bob@example.com"))

    @pytest.mark.asyncio
    async def test_google_account_cannot_use_password_login(self, service, make_google_token):
        await service.oauth_register(make_google_token("bob@example.com"))
        with pytest.raises(InvalidCredentials):
            await service.login(LoginRequest(username="bob@example.com", password=""))

    @pytest.mark.asyncio
    async def test_login(self, service, make_google_token):
        await service.oauth_register(make_google_token())
        resp = await service.oauth_login(make_google_token())
        assert resp.username == "bob@example.com"
        assert resp.roles == ["buyer"]

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, service, make_google_token):
        with pytest.raises(UserNotFound):
            await service.oauth_login(make_google_token("ghost@example.com"))

    @pytest.mark.asyncio
    async def test_invalid_token(self, service):
        with pytest.raises(InvalidExternalToken):
            await service.oauth_register("garbage")
        with pytest.raises(InvalidExternalToken):
            await service.oauth_login("garbage")
