"""
Repository contracts.

Services depend on these protocols, not on the SQL implementations, so
tests can substitute in-memory fakes. Implementations signal:

- ``NotFoundError`` when the entity is absent
- ``NoAffectedError`` when an update/delete matched zero records
- ``ConflictError`` when an insert violates a unique constraint
- ``InternalServerError`` for any other storage failure
"""

from typing import Protocol, runtime_checkable

from shortener.models.url import URL
from shortener.models.user import User


@runtime_checkable
class URLRepository(Protocol):
    """Storage of shortened links, keyed by short id."""

    async def get_by_id(self, url_id: str) -> URL:
        ...

    async def store(self, url: URL) -> None:
        ...

    async def update(self, url: URL) -> None:
        ...

    async def delete(self, url_id: str) -> None:
        ...


@runtime_checkable
class UserRepository(Protocol):
    """Storage of user accounts, keyed by user id."""

    async def get_by_id(self, user_id: str) -> User:
        ...

    async def get_by_email(self, email: str) -> User:
        ...

    async def create(self, user: User) -> None:
        ...

    async def update(self, user: User) -> None:
        ...

    async def delete(self, user_id: str) -> None:
        ...
