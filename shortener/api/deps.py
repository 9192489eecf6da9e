"""
API dependencies for FastAPI dependency injection.
Provides reusable dependencies for authentication, authorization and services.
"""

from datetime import timedelta
from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.config import settings
from shortener.core.exceptions import ForbiddenError, MissingTokenError
from shortener.core.logging import get_logger
from shortener.core.security import Authenticator, load_private_key
from shortener.db.session import get_session
from shortener.models.user import UserRole
from shortener.repositories.url_repository import SQLURLRepository
from shortener.repositories.user_repository import SQLUserRepository
from shortener.schemas.token import Claims
from shortener.services.url_service import URLService
from shortener.services.user_service import UserService

logger = get_logger(__name__)

# Bearer scheme; missing headers are reported by get_current_claims
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_authenticator() -> Authenticator:
    """
    Authenticator built once from the configured private key.

    Raises:
        InternalServerError: If the key file cannot be read or parsed
    """
    logger.info(f"Loading signing key {settings.AUTH_KEY_ID} from {settings.AUTH_PRIVATE_KEY_FILE}")
    return Authenticator.from_private_key(
        load_private_key(settings.AUTH_PRIVATE_KEY_FILE),
        settings.AUTH_KEY_ID,
        settings.AUTH_ALGORITHM,
    )


def get_current_claims(
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> Claims:
    """
    Dependency to get the verified claims of the bearer token.

    Args:
        authenticator: Token verifier
        credentials: Parsed ``Authorization: Bearer`` header, if any

    Returns:
        Verified claims

    Raises:
        MissingTokenError: No bearer token in the request
        InvalidTokenError: Token expired or signed with another algorithm
        TokenSignatureError: Signature does not verify
    """
    if credentials is None or not credentials.credentials:
        raise MissingTokenError("expected authorization header format: Bearer <token>")
    return authenticator.parse_claims(credentials.credentials)


def require_admin(
    claims: Annotated[Claims, Depends(get_current_claims)],
) -> Claims:
    """
    Dependency to ensure the caller holds the ADMIN role.

    Raises:
        ForbiddenError: If the claims lack ADMIN
    """
    if not claims.has_role(UserRole.ADMIN):
        logger.warning(f"Non-admin user {claims.subject} attempted admin access")
        raise ForbiddenError("you are not authorized for that action")
    return claims


def get_url_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SQLURLRepository:
    return SQLURLRepository(session)


def get_user_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SQLUserRepository:
    return SQLUserRepository(session)


def get_url_service(
    repository: Annotated[SQLURLRepository, Depends(get_url_repository)],
) -> URLService:
    return URLService(
        repository,
        timeout=settings.CONTEXT_TIMEOUT_SECONDS,
        url_expiration_years=settings.URL_EXPIRATION_YEARS,
        max_attempts=settings.SHORT_ID_MAX_ATTEMPTS,
    )


def get_user_service(
    repository: Annotated[SQLUserRepository, Depends(get_user_repository)],
) -> UserService:
    return UserService(
        repository,
        timeout=settings.CONTEXT_TIMEOUT_SECONDS,
        token_ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


ClaimsDep = Annotated[Claims, Depends(get_current_claims)]
AdminClaimsDep = Annotated[Claims, Depends(require_admin)]
URLServiceDep = Annotated[URLService, Depends(get_url_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
AuthenticatorDep = Annotated[Authenticator, Depends(get_authenticator)]
