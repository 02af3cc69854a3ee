"""
Auth use cases — register, login, Google register, Google login.

Each operation returns a ``UserResponse`` (username, roles, fresh session
token) or raises an ``AuthError`` describing why it was refused.
"""

from __future__ import annotations

import logging
from typing import Optional

from auth.errors import CreationRejected, DuplicateUser, InvalidCredentials, UserNotFound
from auth.google import GoogleTokenDecoder
from auth.identity_store import IdentityResult, IdentityStore
from auth.jwt import TokenService
from auth.mapping import to_user_response, user_from_descriptor, user_from_registration
from auth.models import LoginRequest, RegisterRequest, User, UserResponse
from config.settings import config

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        store: IdentityStore,
        tokens: TokenService,
        google: GoogleTokenDecoder,
        *,
        default_role: Optional[str] = None,
    ) -> None:
        self.store = store
        self.tokens = tokens
        self.google = google
        self.default_role = default_role or config.default_role

    async def register(self, req: RegisterRequest, role: Optional[str] = None) -> UserResponse:
        if await self.store.find_by_username(req.username) is not None:
            logger.info("Registration refused, %s already exists", req.username)
            raise DuplicateUser()

        user = user_from_registration(req)
        result = await self.store.create_user(user, req.password or "")
        self._raise_for_result(result, req.username)

        response = await self._provision(user, role or self.default_role)
        logger.info("Registered user %s (%s)", user.username, user.user_id)
        return response

    async def login(self, req: LoginRequest) -> UserResponse:
        user = await self.store.find_by_username(req.username)
        if user is None:
            logger.info("Login failed, no user %s", req.username)
            raise UserNotFound(req.username)

        if not await self.store.check_password(user, req.password or ""):
            logger.info("Login failed, wrong password for %s", user.username)
            raise InvalidCredentials()

        logger.info("Login: %s (%s)", user.username, user.user_id)
        return await self._issue(user)

    async def oauth_register(self, external_token: str) -> UserResponse:
        descriptor = await self.google.decode(external_token)

        if await self.store.find_by_username(descriptor.username) is not None:
            logger.info("Google registration refused, %s already exists", descriptor.username)
            raise DuplicateUser()

        user = user_from_descriptor(descriptor)
        result = await self.store.create_user(user, None)
        self._raise_for_result(result, descriptor.username)

        response = await self._provision(user, self.default_role)
        logger.info("Registered Google user %s (%s)", user.username, user.user_id)
        return response

    async def oauth_login(self, external_token: str) -> UserResponse:
        descriptor = await self.google.decode(external_token)

        user = await self.store.find_by_username(descriptor.username)
        if user is None:
            logger.info("Google login failed, no user %s", descriptor.username)
            raise UserNotFound(descriptor.username)

        logger.info("Google login: %s (%s)", user.username, user.user_id)
        return await self._issue(user)

    # ── helpers ──────────────────────────────────────────────────────────

    async def _provision(self, user: User, role: str) -> UserResponse:
        await self.store.add_to_role(user, role)
        return await self._issue(user)

    async def _issue(self, user: User) -> UserResponse:
        roles = await self.store.get_roles(user)
        token = self.tokens.create_token(user, roles)
        return to_user_response(user, roles, token)

    @staticmethod
    def _raise_for_result(result: IdentityResult, username: str) -> None:
        if result.succeeded:
            return
        if result.has_error("DuplicateUserName"):
            raise DuplicateUser()
        logger.info("Creation of %s rejected: %s", username, result.errors_string())
        raise CreationRejected([e.description for e in result.errors])
