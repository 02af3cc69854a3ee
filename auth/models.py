"""Request / response schemas for the auth routes.

Also re-exports the ``User`` ORM model for use in authentication-related code.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from database.models import User  # noqa: F401

__all__ = [
    "User",
    "RegisterRequest",
    "LoginRequest",
    "UserResponse",
    "OAuthDescriptor",
    "TokenClaims",
]


class RegisterRequest(BaseModel):
    username: str = Field(..., max_length=256)
    password: Optional[str] = Field(None, max_length=128)
    email: Optional[str] = Field(None, max_length=256)
    first_name: Optional[str] = Field(None, max_length=128)
    last_name: Optional[str] = Field(None, max_length=128)


class LoginRequest(BaseModel):
    username: str
    password: Optional[str] = None


class UserResponse(BaseModel):
    username: str
    roles: List[str]
    token: str


class OAuthDescriptor(BaseModel):
    """Identity fields taken from a verified Google ID token."""

    username: str
    email: str
    subject: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class TokenClaims(BaseModel):
    sub: str
    username: str
    roles: List[str] = Field(default_factory=list)
    iat: int
    exp: int
    iss: str
