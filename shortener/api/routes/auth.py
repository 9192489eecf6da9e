"""
Authentication routes for user registration and token issuance.
Provides JWT token-based authentication.
"""

from datetime import datetime, timezone
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from shortener.api.deps import AuthenticatorDep, UserServiceDep
from shortener.core.exceptions import AuthenticationFailureError
from shortener.core.logging import get_logger
from shortener.schemas.token import Token
from shortener.schemas.user import UserCreate, UserResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/user", tags=["auth"])

basic_scheme = HTTPBasic(auto_error=False)


@router.post("/create", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user_in: UserCreate, service: UserServiceDep) -> UserResponse:
    """
    Register a new user.

    Args:
        user_in: User registration data
        service: User service

    Returns:
        Created user data

    Raises:
        BadParamInputError: If email already registered
    """
    user = await service.create(user_in)
    logger.info(f"New user registered: {user.email} (ID: {user.id})")
    return UserResponse.model_validate(user)


@router.get("/token", response_model=Token)
async def token(
    service: UserServiceDep,
    authenticator: AuthenticatorDep,
    credentials: Annotated[Optional[HTTPBasicCredentials], Depends(basic_scheme)],
) -> Token:
    """
    Exchange HTTP Basic credentials (email, password) for a bearer token.

    Raises:
        AuthenticationFailureError: Missing or wrong credentials
    """
    if credentials is None:
        raise AuthenticationFailureError("must provide email and password in Basic auth")

    claims = await service.authenticate(
        datetime.now(timezone.utc), credentials.username, credentials.password
    )
    logger.info(f"Token issued for user {claims.subject}")
    return Token(token=authenticator.generate_token(claims))
