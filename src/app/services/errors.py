import asyncio
import logging
from typing import Awaitable, TypeVar

from sqlalchemy.exc import OperationalError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_STORE_TIMEOUT = 5.0


class StoreUnavailableError(Exception):
    """
    The session store did not answer in time or dropped the connection.

    Distinct from every authorization failure: callers should retry rather
    than force the user to sign in again.
    """

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Session store unavailable during {operation}: {cause!r}")


async def guard_store_call(
    operation: str, call: Awaitable[T], timeout: float = DEFAULT_STORE_TIMEOUT
) -> T:
    """Await a store call, turning timeouts and dropped connections into StoreUnavailableError"""
    try:
        return await asyncio.wait_for(call, timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.error("Session store timed out during %s", operation)
        raise StoreUnavailableError(operation, exc) from exc
    except OperationalError as exc:
        logger.error("Session store failed during %s: %s", operation, exc.orig)
        raise StoreUnavailableError(operation, exc) from exc
