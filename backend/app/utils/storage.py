"""Bounded execution of storage work with a single failure type for callers."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from ..core.errors import StorageError

logger = logging.getLogger("backend.app.storage")

T = TypeVar("T")


async def run_bounded(work: Awaitable[T], operation: str, timeout: Optional[float] = None) -> T:
    """Await ``work``, turning database errors and timeouts into :class:`StorageError`.

    A ``timeout`` of ``None`` or ``0`` means unbounded. On timeout only the wait is
    abandoned: asyncpg cancels the query, while an aiosqlite statement runs to
    completion in its worker thread. Cancellation of the caller
    propagates unchanged; catalog errors raised by ``work`` pass through.
    """
    try:
        if timeout:
            return await asyncio.wait_for(work, timeout)
        return await work
    except asyncio.TimeoutError as exc:
        logger.warning("%s timed out after %.1fs", operation, timeout)
        raise StorageError(f"{operation} timed out") from exc
    except SQLAlchemyError as exc:
        raise StorageError(f"failed to {operation}: {exc.__class__.__name__}") from exc
