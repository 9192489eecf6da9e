"""Pydantic schemas for request/response validation."""

from shortener.schemas.token import Claims, Token
from shortener.schemas.url import URLCreate, URLResponse, URLUpdate
from shortener.schemas.user import UserCreate, UserResponse, UserUpdate

__all__ = [
    "Claims",
    "Token",
    "URLCreate",
    "URLResponse",
    "URLUpdate",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
]
