"""
User API routes — register, login, Google register, Google login.

Route prefix: /api/user
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from auth.dependencies import get_auth_service
from auth.models import LoginRequest, RegisterRequest, UserResponse
from auth.service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["user"])


@router.post("/register", response_model=UserResponse)
async def register(
    req: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Register a new user with a username and password."""
    return await service.register(req)


@router.post("/login", response_model=UserResponse)
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Login with username + password."""
    return await service.login(req)


@router.post("/google-register", response_model=UserResponse)
async def google_register(
    token: str = Query(..., description="Google ID token"),
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Create an account from a Google ID token (no local password)."""
    return await service.oauth_register(token)


@router.post("/google-login", response_model=UserResponse)
async def google_login(
    token: str = Query(..., description="Google ID token"),
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Login with a Google ID token for an existing account."""
    return await service.oauth_login(token)
