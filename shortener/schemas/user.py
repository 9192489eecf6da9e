"""
User schemas for API request/response validation.
Separates internal models from API contracts using Pydantic.
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, TypeAdapter, field_validator

USER_ID_PATTERN = re.compile(r"^[0-9a-f]{24}$")

_email_adapter = TypeAdapter(EmailStr)


def is_valid_user_id(value: str) -> bool:
    """True for a hex encoded 12-byte identifier."""
    return bool(USER_ID_PATTERN.match(value))


def normalize_email(value: str) -> str:
    """
    Email in the form it is stored at signup (domain lowercased).

    Raises:
        pydantic.ValidationError: Not an email address
    """
    return _email_adapter.validate_python(value)


class UserCreate(BaseModel):
    """Schema for user registration."""

    full_name: str = Field(default="", max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=30)


class UserUpdate(BaseModel):
    """
    Schema for a profile update.

    Fields left as None are not changed. ``current_password`` must match the
    stored password of the account being updated.
    """

    id: str
    full_name: Optional[str] = Field(default=None, max_length=30)
    email: Optional[EmailStr] = None
    current_password: str = Field(..., min_length=8, max_length=30)
    new_password: Optional[str] = Field(default=None, min_length=8, max_length=30)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not is_valid_user_id(v):
            raise ValueError("id must be a 24 character hex string")
        return v


class UserResponse(BaseModel):
    """
    Schema for user data in API responses.
    Excludes sensitive information like hashed_password.
    """

    id: str
    full_name: str
    email: EmailStr
    roles: List[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
