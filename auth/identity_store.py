"""
Identity store — user persistence, password checks and role membership.

All operations run on the caller's ``AsyncSession`` so that creating a
user and assigning its first role commit (or roll back) together at the
end of the request.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.models import User
from auth.password import PasswordPolicy, hash_password, verify_password
from database.models import Role, UserRole

logger = logging.getLogger(__name__)

_USERNAME_PATTERN = re.compile(r"[A-Za-z0-9\-._@+]+")


def normalize(name: str) -> str:
    return name.strip().upper()


@dataclass(frozen=True)
class IdentityError:
    code: str
    description: str


@dataclass
class IdentityResult:
    succeeded: bool
    errors: List[IdentityError] = field(default_factory=list)

    @classmethod
    def success(cls) -> "IdentityResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls, *errors: IdentityError) -> "IdentityResult":
        return cls(succeeded=False, errors=list(errors))

    def has_error(self, code: str) -> bool:
        return any(e.code == code for e in self.errors)

    def errors_string(self) -> str:
        return " ".join(e.description for e in self.errors)


def _duplicate_error(username: str) -> IdentityError:
    return IdentityError("DuplicateUserName", f"Username '{username}' is already taken.")


class IdentityStore:
    def __init__(self, session: AsyncSession, policy: Optional[PasswordPolicy] = None) -> None:
        self.session = session
        self.policy = policy or PasswordPolicy.from_settings()

    async def find_by_username(self, username: str) -> Optional[User]:
        """Case-insensitive lookup; ``None`` when no such user exists."""
        result = await self.session.execute(
            select(User).where(User.normalized_username == normalize(username))
        )
        return result.scalar_one_or_none()

    async def create_user(self, user: User, password: Optional[str]) -> IdentityResult:
        """
        Validate and insert ``user``.

        ``password=None`` provisions an externally authenticated account
        that has no local password at all.
        """
        errors = self._validate_username(user.username)
        if password is not None:
            errors.extend(
                IdentityError(v.code, v.description) for v in self.policy.validate(password)
            )
        if errors:
            return IdentityResult.failed(*errors)

        user.normalized_username = normalize(user.username)
        if await self.find_by_username(user.username) is not None:
            return IdentityResult.failed(_duplicate_error(user.username))

        user.password_hash = hash_password(password) if password is not None else None
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name
            await self.session.rollback()
            logger.info("Unique constraint rejected username %s", user.username)
            return IdentityResult.failed(_duplicate_error(user.username))

        logger.debug("Created user %s (%s)", user.username, user.user_id)
        return IdentityResult.success()

    async def add_to_role(self, user: User, role_name: str) -> None:
        """Add ``user`` to ``role_name``, creating the role on first use."""
        role = await self._get_or_create_role(role_name)
        existing = await self.session.get(UserRole, (user.user_id, role.role_id))
        if existing is None:
            self.session.add(UserRole(user_id=user.user_id, role_id=role.role_id))
            await self.session.flush()

    async def get_roles(self, user: User) -> List[str]:
        result = await self.session.execute(
            select(Role.name)
            .join(UserRole, UserRole.role_id == Role.role_id)
            .where(UserRole.user_id == user.user_id)
            .order_by(Role.name)
        )
        return list(result.scalars().all())

    async def check_password(self, user: User, password: str) -> bool:
        if not user.password_hash:
            return False
        return verify_password(password, user.password_hash)

    async def _find_role(self, role_name: str) -> Optional[Role]:
        result = await self.session.execute(
            select(Role).where(Role.normalized_name == normalize(role_name))
        )
        return result.scalar_one_or_none()

    async def _get_or_create_role(self, role_name: str) -> Role:
        role = await self._find_role(role_name)
        if role is not None:
            return role

        try:
            # Savepoint keeps the user created earlier in this request
            async with self.session.begin_nested():
                role = Role(name=role_name, normalized_name=normalize(role_name))
                self.session.add(role)
        except IntegrityError:
            logger.info("Role %s was created concurrently, reusing it", role_name)
            role = await self._find_role(role_name)
            if role is None:
                raise
        return role

    @staticmethod
    def _validate_username(username: str) -> List[IdentityError]:
        if not username or not _USERNAME_PATTERN.fullmatch(username):
            return [IdentityError(
                "InvalidUserName",
                f"Username '{username}' is invalid, can only contain letters or digits.",
            )]
        return []
