"""
Password hashing, verification and the password policy.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import bcrypt

from config.settings import config


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt (auto-salted, work factor from settings)."""
    salt = bcrypt.gensalt(rounds=rounds or config.bcrypt_rounds)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except (ValueError, TypeError):
        return False


@dataclass(frozen=True)
class PolicyViolation:
    code: str
    description: str


@dataclass(frozen=True)
class PasswordPolicy:
    min_length: int = 4
    require_digit: bool = True
    require_lowercase: bool = True
    require_uppercase: bool = True
    require_non_alphanumeric: bool = True

    @classmethod
    def from_settings(cls) -> "PasswordPolicy":
        return cls(
            min_length=config.password_min_length,
            require_digit=config.password_require_digit,
            require_lowercase=config.password_require_lowercase,
            require_uppercase=config.password_require_uppercase,
            require_non_alphanumeric=config.password_require_non_alphanumeric,
        )

    def validate(self, password: str) -> List[PolicyViolation]:
        """Return every rule the password breaks (empty list when it is acceptable)."""
        violations: List[PolicyViolation] = []
        if len(password) < self.min_length:
            violations.append(PolicyViolation(
                "PasswordTooShort",
                f"Passwords must be at least {self.min_length} characters.",
            ))
        if self.require_non_alphanumeric and all(ch.isalnum() for ch in password):
            violations.append(PolicyViolation(
                "PasswordRequiresNonAlphanumeric",
                "Passwords must have at least one non alphanumeric character.",
            ))
        if self.require_digit and not any(ch.isdigit() for ch in password):
            violations.append(PolicyViolation(
                "PasswordRequiresDigit",
                "Passwords must have at least one digit ('0'-'9').",
            ))
        if self.require_lowercase and not any(ch.islower() for ch in password):
            violations.append(PolicyViolation(
                "PasswordRequiresLower",
                "Passwords must have at least one lowercase ('a'-'z').",
            ))
        if self.require_uppercase and not any(ch.isupper() for ch in password):
            violations.append(PolicyViolation(
                "PasswordRequiresUpper",
                "Passwords must have at least one uppercase ('A'-'Z').",
            ))
        return violations
