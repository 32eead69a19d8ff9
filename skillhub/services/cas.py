"""Bounded re-run of a read-check-write block on compare-and-swap misses.

Each attempt re-reads current state and re-evaluates every precondition,
so two concurrent enrollments against one balance cannot both pass the
affordability check: the loser's write misses, it re-reads the debited
balance and fails with InsufficientFundsError (or succeeds if it still
fits).  Only ConcurrentUpdateError is re-run; any other StoreError
propagates immediately.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from skillhub.core.config import SETTINGS
from skillhub.core.metrics import CAS_CONFLICTS
from skillhub.services.errors import ConcurrentUpdateError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_with_cas(
    operation: str,
    attempt: Callable[[], Awaitable[T]],
    *,
    max_attempts: int | None = None,
) -> T:
    limit = max_attempts if max_attempts is not None else SETTINGS.cas_max_attempts
    for n in range(1, limit + 1):
        try:
            return await attempt()
        except ConcurrentUpdateError as e:
            CAS_CONFLICTS.labels(record=e.record).inc()
            if n == limit:
                logger.warning(
                    "Giving up op=%s after %d CAS conflicts on %s %s",
                    operation,
                    n,
                    e.record,
                    e.record_id,
                )
                raise
            logger.info(
                "CAS conflict op=%s attempt=%d record=%s id=%s, retrying",
                operation,
                n,
                e.record,
                e.record_id,
            )
    raise AssertionError("unreachable")  # pragma: no cover
