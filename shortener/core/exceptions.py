"""
Error taxonomy for the shortener service.

Usecases and repositories raise these; the HTTP layer maps them to status
codes in ``shortener.api.errors``. Wrap lower-level failures with
``raise ... from exc`` so the cause stays available for diagnostics.
"""

from typing import Any, Optional


class ShortenerError(Exception):
    """
    Base exception for all shortener errors.

    Subclasses set ``default_message`` so they can be raised bare.
    """

    default_message = "Unexpected error"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(ShortenerError):
    """Requested entity does not exist."""

    default_message = "Your requested item is not found"


class NoAffectedError(ShortenerError):
    """A mutation matched zero records."""

    default_message = "No rows were affected"


class ConflictError(ShortenerError):
    """Creation collides with an existing unique identifier."""

    default_message = "Your item already exists"


class BadParamInputError(ShortenerError):
    """Malformed identifier or input the usecase rejects."""

    default_message = "Given param is not valid"


class ForbiddenError(ShortenerError):
    """Authenticated principal has no rights over the target resource."""

    default_message = "Attempted action is not allowed"


class AuthenticationFailureError(ShortenerError):
    """Credentials are missing or do not match."""

    default_message = "Authentication failed"


class InternalServerError(ShortenerError):
    """Unexpected persistence or cryptographic failure."""

    default_message = "Internal server error"


class OperationTimeoutError(ShortenerError):
    """The bounded scope of an operation expired before it completed."""

    default_message = "Operation timed out"

    def __init__(self, operation: str):
        super().__init__(
            f"{operation} did not complete in time",
            code="OPERATION_TIMEOUT",
            details={"operation": operation},
        )


class MissingTokenError(AuthenticationFailureError):
    """No bearer token, or one that cannot be parsed."""

    default_message = "missing or malformed token"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, code="MISSING_TOKEN")


class InvalidTokenError(AuthenticationFailureError):
    """Token is well formed but not acceptable (expired, wrong algorithm)."""

    default_message = "invalid or expired token"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, code="INVALID_TOKEN")


class TokenSignatureError(AuthenticationFailureError):
    """Token signature does not verify against the looked-up key."""

    default_message = "signature verification error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, code="TOKEN_SIGNATURE")


class ClaimsDecodeError(InternalServerError):
    """A verified token payload does not have the shape of Claims."""

    default_message = "can't decode token claims"


class KeyLookupError(ShortenerError):
    """No public key is registered for the requested key id."""

    def __init__(self, key_id: str):
        super().__init__(
            f"no public key for key id {key_id!r}",
            code="UNKNOWN_KEY_ID",
            details={"key_id": key_id},
        )
