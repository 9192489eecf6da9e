"""
URL service layer implementing the link lifecycle.
Separates business rules (id allocation, ownership) from API routes and storage.
"""

from datetime import datetime

from shortener.core.exceptions import ConflictError, ForbiddenError, InternalServerError
from shortener.models.types import utcnow
from shortener.models.url import URL
from shortener.repositories.interfaces import URLRepository
from shortener.schemas.token import Claims
from shortener.schemas.url import URLCreate, URLUpdate
from shortener.services.deadline import bounded
from shortener.services.policy import is_authorized
from shortener.services.short_id import ShortIDAllocator


def add_years(moment: datetime, years: int) -> datetime:
    """Shift a datetime by whole years; Feb 29 rolls over to Mar 1."""
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        return moment.replace(year=moment.year + years, month=3, day=1)


class URLService:
    """
    Service class for link operations.

    Args:
        repository: Link storage
        timeout: Seconds each operation may take
        url_expiration_years: Default lifetime of a link without expiration date
        max_attempts: Cap on generated ids tried per link, lookups and inserts together
    """

    def __init__(
        self,
        repository: URLRepository,
        timeout: float,
        url_expiration_years: int = 1,
        max_attempts: int = 10,
    ) -> None:
        self._repository = repository
        self._timeout = timeout
        self._url_expiration_years = url_expiration_years
        self._allocator = ShortIDAllocator(repository.get_by_id, max_attempts=max_attempts)

    async def get_by_id(self, url_id: str) -> URL:
        """
        Retrieve a link by its short id.

        Public lookup: no authorization, and expired links are still returned.
        """
        async with bounded(self._timeout, "URL get"):
            return await self._repository.get_by_id(url_id)

    async def store(self, create: URLCreate) -> URL:
        """
        Create a link.

        Args:
            create: Link data; ``user_id`` is "" for anonymous links

        Returns:
            The stored link

        Raises:
            ConflictError: The supplied id is already taken
            InternalServerError: No free id could be generated
        """
        async with bounded(self._timeout, "URL store"):
            now = utcnow()
            expiration_date = create.expiration_date or add_years(now, self._url_expiration_years)

            # Lookups and inserts of generated ids share one attempt budget
            for _ in range(self._allocator.max_attempts):
                if create.id is not None:
                    url_id = await self._allocator.allocate(create.id)
                else:
                    url_id = await self._allocator.try_generate()
                    if url_id is None:
                        continue

                url = URL(
                    id=url_id,
                    link=create.link,
                    expiration_date=expiration_date,
                    user_id=create.user_id,
                    created_at=now,
                    updated_at=now,
                )
                try:
                    await self._repository.store(url)
                except ConflictError:
                    # The unique key decides; a generated id taken since the
                    # check is replaced, a supplied one is the caller's conflict.
                    if create.id is not None:
                        raise
                    continue
                return url

            raise InternalServerError("can't store URL: generated ids keep colliding")

    async def update(self, update: URLUpdate, claims: Claims) -> None:
        """
        Change a link's expiration date.

        Raises:
            NotFoundError: No such link
            ForbiddenError: Anonymous link, or caller is neither owner nor ADMIN
            NoAffectedError: Storage updated zero records
        """
        async with bounded(self._timeout, "URL update"):
            url = await self._repository.get_by_id(update.id)
            self._check_can_modify(url, claims)

            url.expiration_date = update.expiration_date
            url.updated_at = utcnow()
            await self._repository.update(url)

    async def delete(self, url_id: str, claims: Claims) -> None:
        """
        Delete a link.

        Raises:
            NotFoundError: No such link
            ForbiddenError: Anonymous link, or caller is neither owner nor ADMIN
            NoAffectedError: Storage deleted zero records
        """
        async with bounded(self._timeout, "URL delete"):
            url = await self._repository.get_by_id(url_id)
            self._check_can_modify(url, claims)

            await self._repository.delete(url_id)

    @staticmethod
    def _check_can_modify(url: URL, claims: Claims) -> None:
        if url.user_id == "":
            raise ForbiddenError("this url was created by an anonymous user")
        if not is_authorized(url.user_id, claims):
            raise ForbiddenError()
