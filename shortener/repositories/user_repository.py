"""
SQL implementation of the user repository.
"""

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import (
    ConflictError,
    InternalServerError,
    NoAffectedError,
    NotFoundError,
)
from shortener.models.user import User


class SQLUserRepository:
    """User repository backed by an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: str) -> User:
        try:
            user = await self._session.get(User, user_id)
        except SQLAlchemyError as exc:
            raise InternalServerError(f"User get error: {user_id}") from exc

        if user is None:
            raise NotFoundError(f"User was not found: {user_id}")
        return user

    async def get_by_email(self, email: str) -> User:
        try:
            result = await self._session.execute(select(User).where(User.email == email))
        except SQLAlchemyError as exc:
            raise InternalServerError("User get by email error") from exc

        user = result.scalars().first()
        if user is None:
            raise NotFoundError("User was not found")
        return user

    async def create(self, user: User) -> None:
        self._session.add(user)
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ConflictError("User with this id or email already exists") from exc
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise InternalServerError("User store error") from exc

    async def update(self, user: User) -> None:
        statement = (
            update(User)
            .where(User.id == user.id)
            .values(
                full_name=user.full_name,
                email=user.email,
                hashed_password=user.hashed_password,
                roles=list(user.roles),
                updated_at=user.updated_at,
            )
        )
        try:
            result = await self._session.execute(statement)
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ConflictError("User with this email already exists") from exc
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise InternalServerError(f"User update error: {user.id}") from exc

        if result.rowcount == 0:
            raise NoAffectedError(f"User was not updated: {user.id}")

    async def delete(self, user_id: str) -> None:
        try:
            result = await self._session.execute(delete(User).where(User.id == user_id))
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise InternalServerError(f"User delete error: {user_id}") from exc

        if result.rowcount == 0:
            raise NoAffectedError(f"User was not deleted: {user_id}")
