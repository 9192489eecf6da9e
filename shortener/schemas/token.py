"""
Token schemas for JWT authentication.
"""

from datetime import datetime, timedelta
from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shortener.models.user import UserRole


class Token(BaseModel):
    """Schema for the token endpoint response."""

    token: str


class Claims(BaseModel):
    """
    Identity asserted by a verified token.

    Serialized with the registered JWT claim names (``sub``, ``iat``,
    ``exp``) plus ``roles``. Instances are immutable.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    subject: str = Field(..., alias="sub", min_length=1)
    roles: List[str] = Field(..., min_length=1)
    issued_at: int = Field(..., alias="iat")
    expires_at: int = Field(..., alias="exp")

    @model_validator(mode="after")
    def check_validity_window(self) -> "Claims":
        if self.expires_at <= self.issued_at:
            raise ValueError("exp must be after iat")
        return self

    @classmethod
    def new(
        cls, subject: str, roles: List[str], now: datetime, expires: timedelta
    ) -> "Claims":
        """Construct claims for the identified user, valid from ``now``."""
        return cls(
            subject=subject,
            roles=list(roles),
            issued_at=int(now.timestamp()),
            expires_at=int((now + expires).timestamp()),
        )

    def has_role(self, *roles: str) -> bool:
        """True if the claims hold at least one of the given roles."""
        wanted = {r.value if isinstance(r, UserRole) else r for r in roles}
        return any(role in wanted for role in self.roles)

    def to_payload(self) -> dict:
        """JWT payload representation."""
        return self.model_dump(by_alias=True)
