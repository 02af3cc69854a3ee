"""
Google ID token verification for the OAuth register / login flows.

The frontend performs Google sign-in and posts the resulting ID token.
Here we verify it against Google's published signing keys and extract
the identity fields we need to find or provision a local account.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

import jwt as pyjwt
from jwt import PyJWKClient

from auth.errors import InvalidExternalToken
from auth.models import OAuthDescriptor
from config.settings import config

logger = logging.getLogger(__name__)

KeyResolver = Callable[[str], Any]


class GoogleTokenDecoder:
    """
    Verifies Google-issued ID tokens (RS256) and turns them into an
    ``OAuthDescriptor``.

    ``key_resolver`` maps a raw token to the public key that signed it.
    By default it is backed by a ``PyJWKClient`` on Google's JWKS
    endpoint, which caches the key set between calls.
    """

    def __init__(
        self,
        client_id: str,
        *,
        issuers: Optional[List[str]] = None,
        jwks_url: Optional[str] = None,
        key_resolver: Optional[KeyResolver] = None,
        leeway: Optional[int] = None,
    ) -> None:
        self.client_id = client_id
        self.leeway = leeway if leeway is not None else config.google_clock_skew_seconds
        self.issuers = issuers or list(config.google_issuers)
        if key_resolver is None:
            jwks_client = PyJWKClient(
                jwks_url or config.google_jwks_url,
                cache_keys=True,
                lifespan=3600,
            )

            def key_resolver(token: str) -> Any:
                return jwks_client.get_signing_key_from_jwt(token).key

        self._resolve_key = key_resolver

    async def decode(self, token: str) -> OAuthDescriptor:
        """
        Verify ``token`` and return the identity it asserts.

        Raises ``InvalidExternalToken`` when Google sign-in is not configured
        or the token fails verification.
        """
        if not self.client_id:
            logger.warning("Google token rejected: GOOGLE_CLIENT_ID is not configured")
            raise InvalidExternalToken()
        if not token:
            raise InvalidExternalToken()

        try:
            # JWKS lookup may hit the network
            key = await asyncio.to_thread(self._resolve_key, token)
            claims = pyjwt.decode(
                token,
                key,
                algorithms=["RS256"],
                audience=self.client_id,
                leeway=self.leeway,
                options={"require": ["exp", "iss", "aud", "sub"]},
            )
        except pyjwt.PyJWTError as exc:
            logger.info("Google token rejected: %s", exc)
            raise InvalidExternalToken() from exc

        if claims.get("iss") not in self.issuers:
            logger.info("Google token rejected: unexpected issuer %r", claims.get("iss"))
            raise InvalidExternalToken()

        return self._descriptor_from_claims(claims)

    @staticmethod
    def _descriptor_from_claims(claims: Dict[str, Any]) -> OAuthDescriptor:
        email = claims.get("email")
        if not email:
            logger.info("Google token rejected: no email claim")
            raise InvalidExternalToken()
        return OAuthDescriptor(
            username=email,
            email=email,
            subject=str(claims["sub"]),
            first_name=claims.get("given_name"),
            last_name=claims.get("family_name"),
        )
