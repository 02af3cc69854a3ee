"""
Session token creation and verification.

Tokens are HS256 JWTs carrying the user id, username and role names.
Secret key is loaded from ``config.jwt_secret`` (env var: ``JWT_SECRET``).
"""

from __future__ import annotations

import time
from typing import Iterable

import jwt as pyjwt

from auth.errors import InvalidToken
from auth.models import TokenClaims, User
from config.settings import config


class TokenService:
    def __init__(
        self,
        secret: str | None = None,
        *,
        algorithm: str | None = None,
        expiry_seconds: int | None = None,
        issuer: str | None = None,
    ) -> None:
        self.secret = secret or config.jwt_secret
        self.algorithm = algorithm or config.jwt_algorithm
        self.expiry_seconds = expiry_seconds if expiry_seconds is not None else config.jwt_expiry_seconds
        self.issuer = issuer or config.jwt_issuer

    def create_token(self, user: User, roles: Iterable[str]) -> str:
        """Create a signed token containing the user's identity and roles."""
        now = int(time.time())
        payload = {
            "sub": str(user.user_id),
            "username": user.username,
            "roles": sorted(roles),
            "iat": now,
            "exp": now + self.expiry_seconds,
            "iss": self.issuer,
        }
        return pyjwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> TokenClaims:
        """
        Verify a token issued by :meth:`create_token` and return its claims.

        Raises ``InvalidToken`` on a bad signature, wrong issuer or expiry.
        """
        try:
            payload = pyjwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except pyjwt.PyJWTError as exc:
            raise InvalidToken(f"Invalid or expired token: {exc}") from exc
        return TokenClaims(**payload)
