"""Transaction boundary helper for application services.

Transaction ownership: application services call run_in_transaction() with a
closure that performs every read-check-write of one operation. The closure is
re-executed from scratch on a retry, so it must re-read any state it depends on.

Only transient PostgreSQL conflicts are retried (serialization failure and
deadlock), and only once. Business errors (AppError) roll back immediately.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MAX_ATTEMPTS = 2
_TRANSIENT_SQLSTATES = frozenset({"40001", "40P01"})


def is_transient(exc: DBAPIError) -> bool:
    """True for serialization_failure (40001) and deadlock_detected (40P01)."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate in _TRANSIENT_SQLSTATES


async def run_in_transaction(
    db: AsyncSession,
    work: Callable[[], Awaitable[T]],
    label: str,
) -> T:
    attempt = 1
    while True:
        try:
            result = await work()
            await db.commit()
            return result
        except DBAPIError as exc:
            await db.rollback()
            if attempt < _MAX_ATTEMPTS and is_transient(exc):
                logger.warning(
                    "Transient conflict in %s (attempt %d), retrying: %s",
                    label,
                    attempt,
                    exc.orig,
                )
                attempt += 1
                continue
            raise
        except Exception:
            await db.rollback()
            raise
