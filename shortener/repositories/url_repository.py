"""
SQL implementation of the URL repository.
"""

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import (
    ConflictError,
    InternalServerError,
    NoAffectedError,
    NotFoundError,
)
from shortener.models.url import URL


class SQLURLRepository:
    """URL repository backed by an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, url_id: str) -> URL:
        try:
            url = await self._session.get(URL, url_id)
        except SQLAlchemyError as exc:
            raise InternalServerError(f"URL get error: {url_id}") from exc

        if url is None:
            raise NotFoundError(f"URL was not found: {url_id}")
        return url

    async def store(self, url: URL) -> None:
        self._session.add(url)
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ConflictError(f"URL already exists: {url.id}") from exc
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise InternalServerError(f"URL store error: {url.id}") from exc

    async def update(self, url: URL) -> None:
        statement = (
            update(URL)
            .where(URL.id == url.id)
            .values(
                link=url.link,
                expiration_date=url.expiration_date,
                user_id=url.user_id,
                updated_at=url.updated_at,
            )
        )
        try:
            result = await self._session.execute(statement)
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise InternalServerError(f"URL update error: {url.id}") from exc

        if result.rowcount == 0:
            raise NoAffectedError(f"URL was not updated: {url.id}")

    async def delete(self, url_id: str) -> None:
        try:
            result = await self._session.execute(delete(URL).where(URL.id == url_id))
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            raise InternalServerError(f"URL delete error: {url_id}") from exc

        if result.rowcount == 0:
            raise NoAffectedError(f"URL was not deleted: {url_id}")
