"""
Failure kinds surfaced by the auth use cases.

Each error carries the HTTP status and the human-readable ``detail`` that
the API returns; ``api.middleware`` turns them into JSON responses.
"""

from __future__ import annotations

from typing import List

from fastapi import status


class AuthError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    detail: str = "Authentication failed"

    def __init__(self, detail: str | None = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class DuplicateUser(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "User with this name already exists"


class CreationRejected(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, reasons: List[str]) -> None:
        self.reasons = list(reasons)
        super().__init__(" ".join(self.reasons))


class UserNotFound(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"There is not user with username {username}")


class InvalidCredentials(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Wrong password"


class InvalidExternalToken(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid external token"


class InvalidToken(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid or expired token"
