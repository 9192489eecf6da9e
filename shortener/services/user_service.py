"""
User service layer implementing business logic for user operations.
Separates business logic from API routes and database operations.
"""

import asyncio
from datetime import datetime, timedelta
from typing import List, Optional

from pydantic import ValidationError

from shortener.core.exceptions import (
    AuthenticationFailureError,
    BadParamInputError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from shortener.core.security import get_password_hash, verify_password
from shortener.models.types import utcnow
from shortener.models.user import ROLE_USER, User, UserRole, new_user_id
from shortener.repositories.interfaces import UserRepository
from shortener.schemas.token import Claims
from shortener.schemas.user import UserCreate, UserUpdate, is_valid_user_id, normalize_email
from shortener.services.deadline import bounded
from shortener.services.policy import is_authorized


def _check_user_id(user_id: str) -> None:
    if not is_valid_user_id(user_id):
        raise BadParamInputError(f"user ID is not a valid 12-byte hex id: {user_id!r}")


class UserService:
    """
    Service class for user-related operations.

    Args:
        repository: Account storage
        timeout: Seconds each operation may take
        token_ttl: Validity window of claims issued by authenticate
    """

    def __init__(
        self,
        repository: UserRepository,
        timeout: float,
        token_ttl: timedelta = timedelta(hours=1),
    ) -> None:
        self._repository = repository
        self._timeout = timeout
        self._token_ttl = token_ttl

    async def get_by_id(self, user_id: str) -> User:
        """
        Retrieve a user by ID.

        Raises:
            BadParamInputError: ID is not a 24 character hex string
            NotFoundError: No such user
        """
        _check_user_id(user_id)
        async with bounded(self._timeout, "user get"):
            return await self._repository.get_by_id(user_id)

    async def create(self, user_create: UserCreate, roles: Optional[List[str]] = None) -> User:
        """
        Create a new user with hashed password.

        Args:
            user_create: User creation data
            roles: Roles of the new account, defaults to [USER]

        Returns:
            Created user instance

        Raises:
            BadParamInputError: Email already registered
        """
        async with bounded(self._timeout, "user create"):
            try:
                await self._repository.get_by_email(user_create.email)
            except NotFoundError:
                pass
            else:
                raise self._email_taken(user_create.email)

            hashed_password = await asyncio.to_thread(get_password_hash, user_create.password)
            now = utcnow()
            user = User(
                id=new_user_id(),
                full_name=user_create.full_name,
                email=user_create.email,
                hashed_password=hashed_password,
                roles=list(roles or [ROLE_USER]),
                created_at=now,
                updated_at=now,
            )

            try:
                await self._repository.create(user)
            except ConflictError as exc:
                raise self._email_taken(user_create.email) from exc
            return user

    async def update(self, user_update: UserUpdate, claims: Claims) -> None:
        """
        Update a user's profile.

        The current password of the target account is checked before the
        ownership rule, so a wrong password fails even for an ADMIN.

        Raises:
            NotFoundError: No such user
            AuthenticationFailureError: current_password does not match
            ForbiddenError: Caller is neither the user nor an ADMIN
        """
        async with bounded(self._timeout, "user update"):
            user = await self._repository.get_by_id(user_update.id)

            matches = await asyncio.to_thread(
                verify_password, user_update.current_password, user.hashed_password
            )
            if not matches:
                raise AuthenticationFailureError("current password does not match")

            if not is_authorized(user.id, claims):
                raise ForbiddenError()

            if user_update.full_name is not None:
                user.full_name = user_update.full_name
            if user_update.email is not None:
                user.email = user_update.email
            if user_update.new_password is not None:
                user.hashed_password = await asyncio.to_thread(
                    get_password_hash, user_update.new_password
                )
            user.updated_at = utcnow()

            try:
                await self._repository.update(user)
            except ConflictError as exc:
                raise self._email_taken(user.email) from exc

    async def delete(self, user_id: str, claims: Claims) -> None:
        """
        Delete a user. ADMIN only.

        Raises:
            BadParamInputError: ID is not a 24 character hex string
            ForbiddenError: Caller is not an ADMIN
            NoAffectedError: No such user
        """
        _check_user_id(user_id)
        if not claims.has_role(UserRole.ADMIN):
            raise ForbiddenError("only ADMIN can delete users")

        async with bounded(self._timeout, "user delete"):
            await self._repository.delete(user_id)

    async def authenticate(self, now: datetime, email: str, password: str) -> Claims:
        """
        Authenticate a user by email and password.

        Unknown email and wrong password produce the same error. The email is
        normalized the way signup stores it before the lookup.

        Args:
            now: Issue time of the returned claims
            email: User's email
            password: Plain text password

        Returns:
            Claims for the user, valid for token_ttl from now
        """
        try:
            email = normalize_email(email)
        except ValidationError as exc:
            raise AuthenticationFailureError() from exc

        async with bounded(self._timeout, "user authenticate"):
            try:
                user = await self._repository.get_by_email(email)
            except NotFoundError as exc:
                raise AuthenticationFailureError() from exc

            if not await asyncio.to_thread(verify_password, password, user.hashed_password):
                raise AuthenticationFailureError()

            return Claims.new(user.id, user.roles, now, self._token_ttl)

    @staticmethod
    def _email_taken(email: str) -> BadParamInputError:
        return BadParamInputError(f"user with {email} email already exists, try another one")
