"""Translate SQLAlchemy failures into the domain StoreError."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError

from skillhub.services.errors import StoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def store_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Store operation failed op=%s error=%s", operation, e)
        raise StoreError(f"{operation} failed") from e
