"""
URL schemas for API request/response validation.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import AnyUrl, BaseModel, Field, TypeAdapter, ValidationError, field_validator

# Characters allowed in a short link id.
LINK_ID_PATTERN = r"^[A-Za-z0-9_-]+$"

_url_adapter = TypeAdapter(AnyUrl)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _must_be_future(value: datetime) -> datetime:
    value = _as_utc(value)
    if value <= datetime.now(timezone.utc):
        raise ValueError("expiration_date must be in the future")
    return value


class URLCreate(BaseModel):
    """
    Schema for link creation.

    ``user_id`` is never read from the request body; the route fills it
    from the verified token (or leaves it empty for anonymous links).
    """

    id: Optional[str] = Field(default=None, min_length=7, max_length=20, pattern=LINK_ID_PATTERN)
    link: str
    expiration_date: Optional[datetime] = None
    user_id: str = Field(default="", exclude=True)

    @field_validator("link")
    @classmethod
    def validate_link(cls, v: str) -> str:
        try:
            _url_adapter.validate_python(v)
        except ValidationError as exc:
            raise ValueError("link must be a valid URL") from exc
        return v

    @field_validator("expiration_date")
    @classmethod
    def validate_expiration(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is None:
            return v
        return _must_be_future(v)


class URLUpdate(BaseModel):
    """Schema for changing a link's expiration date."""

    id: str = Field(..., min_length=1, max_length=20, pattern=LINK_ID_PATTERN)
    expiration_date: datetime

    @field_validator("expiration_date")
    @classmethod
    def validate_expiration(cls, v: datetime) -> datetime:
        return _must_be_future(v)


class URLResponse(BaseModel):
    """Schema for link data in API responses."""

    id: str
    link: str
    expiration_date: datetime
    user_id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
