"""
Shortened link model.
"""

from datetime import datetime

from sqlmodel import Field, SQLModel

from shortener.models.types import UTCDateTime, utcnow


class URL(SQLModel, table=True):
    """
    A shortened link.

    Attributes:
        id: Short token, user-supplied or generated
        link: Target URL of the redirect
        expiration_date: Stored attribute only; lookups do not filter on it
        user_id: Owning user's ID, empty string for anonymous links
        created_at: Timestamp of creation
        updated_at: Timestamp of last update
    """

    __tablename__ = "urls"  # type: ignore

    id: str = Field(primary_key=True, max_length=20)
    link: str
    expiration_date: datetime = Field(sa_type=UTCDateTime)
    user_id: str = Field(default="", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
