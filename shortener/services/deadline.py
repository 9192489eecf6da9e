"""
Bounded execution scope for service operations.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from shortener.core.exceptions import OperationTimeoutError


@asynccontextmanager
async def bounded(timeout: float, operation: str) -> AsyncIterator[None]:
    """
    Run the enclosed block under a deadline derived from the caller's scope.

    Awaited repository calls are cancelled when the deadline passes and the
    expiry surfaces as OperationTimeoutError. Cancellation of the caller
    itself propagates unchanged.

    Args:
        timeout: Seconds allowed for the block
        operation: Name reported in the timeout error
    """
    try:
        async with asyncio.timeout(timeout):
            yield
    except TimeoutError as exc:
        raise OperationTimeoutError(operation) from exc
