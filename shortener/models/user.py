"""
User model with role-based access control.
Implements a simple ADMIN/USER role system.
"""

import secrets
from datetime import datetime
from enum import Enum
from typing import List

from sqlmodel import JSON, Column, Field, SQLModel

from shortener.models.types import UTCDateTime, utcnow


class UserRole(str, Enum):
    """User role enumeration for RBAC."""

    ADMIN = "ADMIN"
    USER = "USER"


ROLE_ADMIN = UserRole.ADMIN.value
ROLE_USER = UserRole.USER.value


def new_user_id() -> str:
    """Fresh 12-byte identifier, hex encoded."""
    return secrets.token_hex(12)


class User(SQLModel, table=True):
    """
    User model with authentication and role support.

    Attributes:
        id: 12-byte identifier, hex encoded (24 characters)
        full_name: Optional user's full name
        email: Unique email address (used for login)
        hashed_password: Bcrypt hashed password, never serialized to clients
        roles: Role names held by the user
        created_at: Timestamp of account creation
        updated_at: Timestamp of last update
    """

    __tablename__ = "users"  # type: ignore

    id: str = Field(default_factory=new_user_id, primary_key=True, max_length=24)
    full_name: str = Field(default="", max_length=30)
    email: str = Field(unique=True, index=True, max_length=255)
    hashed_password: str
    roles: List[str] = Field(
        default_factory=lambda: [UserRole.USER.value], sa_column=Column(JSON, nullable=False)
    )
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
