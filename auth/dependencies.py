"""
FastAPI dependencies for authentication.

Provides ``db_session`` and the collaborators the auth routes are built
from. Tests swap any of them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from auth.google import GoogleTokenDecoder
from auth.identity_store import IdentityStore
from auth.jwt import TokenService
from auth.service import AuthService
from config.settings import config
from database.session import get_db_session


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


@lru_cache
def get_token_service() -> TokenService:
    return TokenService()


@lru_cache
def get_google_decoder() -> GoogleTokenDecoder:
    return GoogleTokenDecoder(config.google_client_id)


async def get_auth_service(
    session: AsyncSession = Depends(db_session),
    tokens: TokenService = Depends(get_token_service),
    google: GoogleTokenDecoder = Depends(get_google_decoder),
) -> AuthService:
    return AuthService(IdentityStore(session), tokens, google)
