"""
Short link id generation.
"""

import secrets
import string
from typing import Awaitable, Callable, Optional

from shortener.core.exceptions import ConflictError, InternalServerError, NotFoundError

# URL-safe alphabet, 64 symbols.
ALPHABET = string.ascii_letters + string.digits + "-_"
SHORT_ID_LENGTH = 6


def generate_short_id(length: int = SHORT_ID_LENGTH) -> str:
    """Random token drawn uniformly from ALPHABET."""
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


class ShortIDAllocator:
    """
    Picks the id of a new link.

    ``lookup`` is the repository's get-by-id; it raises NotFoundError when the
    id is free. The check is not atomic with the later insert, so callers
    still have to handle a conflict on insert.

    Args:
        lookup: Async lookup by id
        max_attempts: Generated ids tried before giving up
        generator: Produces candidate ids
    """

    def __init__(
        self,
        lookup: Callable[[str], Awaitable[object]],
        max_attempts: int = 10,
        generator: Callable[[], str] = generate_short_id,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._lookup = lookup
        self._generator = generator
        self.max_attempts = max_attempts

    async def is_free(self, url_id: str) -> bool:
        try:
            await self._lookup(url_id)
        except NotFoundError:
            return True
        return False

    async def try_generate(self) -> Optional[str]:
        """One generated candidate; None when it is already taken."""
        candidate = self._generator()
        if await self.is_free(candidate):
            return candidate
        return None

    async def allocate(self, requested_id: Optional[str] = None) -> str:
        """
        Return an id that is not in use.

        Args:
            requested_id: Caller supplied id, used as-is when free

        Raises:
            ConflictError: The requested id is taken
            InternalServerError: No free id after the allowed attempts
        """
        if requested_id is not None:
            if not await self.is_free(requested_id):
                raise ConflictError(f"can't store URL, already exists: {requested_id}")
            return requested_id

        for _ in range(self.max_attempts):
            candidate = await self.try_generate()
            if candidate is not None:
                return candidate

        raise InternalServerError("can't generate a unique URL id")
