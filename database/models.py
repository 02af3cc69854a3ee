"""
SQLAlchemy ORM models for user accounts and role membership.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    String,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    user_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(256), nullable=False)
    # Upper-cased username; lookups and uniqueness go through this column.
    normalized_username = Column(String(256), unique=True, nullable=False, index=True)
    email = Column(String(256))
    first_name = Column(String(128))
    last_name = Column(String(128))
    # NULL for accounts that authenticate through an external provider
    password_hash = Column(String(255), nullable=True)
    auth_provider = Column(String(32), nullable=False, default="local")
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class Role(Base):
    __tablename__ = "roles"

    role_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(64), nullable=False)
    normalized_name = Column(String(64), unique=True, nullable=False)


class UserRole(Base):
    __tablename__ = "user_roles"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    role_id = Column(Uuid(as_uuid=True), ForeignKey("roles.role_id", ondelete="CASCADE"), primary_key=True)
