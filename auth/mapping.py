"""Conversions between ``User`` entities and the auth API schemas."""

from __future__ import annotations

from typing import Iterable

from auth.models import OAuthDescriptor, RegisterRequest, User, UserResponse


def user_from_registration(req: RegisterRequest) -> User:
    return User(
        username=req.username,
        email=req.email,
        first_name=req.first_name,
        last_name=req.last_name,
        auth_provider="local",
    )


def user_from_descriptor(descriptor: OAuthDescriptor) -> User:
    return User(
        username=descriptor.username,
        email=descriptor.email,
        first_name=descriptor.first_name,
        last_name=descriptor.last_name,
        auth_provider="google",
    )


def to_user_response(user: User, roles: Iterable[str], token: str) -> UserResponse:
    return UserResponse(username=user.username, roles=sorted(roles), token=token)
