"""Redis connection management.

Mirrors engine.py: when REDIS_URL is configured, a shared connection
pool backs the course read cache; when it is None (local dev, tests),
the cache falls back to an in-process dictionary and no Redis server
is needed.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis

from skillhub.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,
        max_connections=20,
    )
else:
    redis_pool = None


@asynccontextmanager
async def lifespan_redis():
    """Startup/shutdown hook for Redis, called from the FastAPI lifespan."""
    if redis_pool is None:
        logger.info("No REDIS_URL configured: course cache is in-memory")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]
        logger.info("Redis connected: %s", SETTINGS.redis_url)
    except aioredis.RedisError:
        # The cache is an optimisation; serve uncached rather than refuse to start.
        logger.exception("Redis connection failed on startup")
        yield
        return

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")
