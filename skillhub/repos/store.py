"""Store: the four repositories plus a transaction boundary.

Services that touch more than one record (completion credits two
accounts; enrollment debits an account and appends to a course) run the
whole read-check-write inside `store.transaction()`, so either every
write lands or none does.

  InMemoryStore - serialises transactions with an asyncio.Lock and
    restores a snapshot of every repository if the block raises.

  PgStore - wraps the block in a SAVEPOINT on the request-scoped
    session; the outer commit happens in get_async_session().
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from skillhub.repos.account_repo import AccountRepo, InMemoryAccountRepo
from skillhub.repos.course_repo import CourseRepo, InMemoryCourseRepo
from skillhub.repos.pg_account_repo import PgAccountRepo
from skillhub.repos.pg_course_repo import PgCourseRepo
from skillhub.repos.pg_project_repo import PgProjectRepo
from skillhub.repos.pg_review_repo import PgReviewRepo
from skillhub.repos.project_repo import InMemoryProjectRepo, ProjectRepo
from skillhub.repos.review_repo import InMemoryReviewRepo, ReviewRepo
from skillhub.services.errors import StoreError

logger = logging.getLogger(__name__)


class Store(Protocol):
    accounts: AccountRepo
    courses: CourseRepo
    projects: ProjectRepo
    reviews: ReviewRepo

    def transaction(self) -> AbstractAsyncContextManager[None]: ...


class InMemoryStore:
    def __init__(self) -> None:
        self.accounts = InMemoryAccountRepo()
        self.courses = InMemoryCourseRepo()
        self.projects = InMemoryProjectRepo()
        self.reviews = InMemoryReviewRepo()
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    def _get_lock(self) -> asyncio.Lock:
        # One lock per event loop: TestClient and asyncio.run each bring their own.
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self._get_lock():
            snapshot = (
                dict(self.accounts._by_id),
                dict(self.courses._by_id),
                dict(self.projects._by_id),
                list(self.reviews._reviews),
            )
            try:
                yield
            except BaseException:
                (
                    self.accounts._by_id,
                    self.courses._by_id,
                    self.projects._by_id,
                    self.reviews._reviews,
                ) = snapshot
                raise

    def clear(self) -> None:
        self.accounts._by_id.clear()
        self.courses._by_id.clear()
        self.projects._by_id.clear()
        self.reviews._reviews.clear()


class PgStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.accounts = PgAccountRepo(session)
        self.courses = PgCourseRepo(session)
        self.projects = PgProjectRepo(session)
        self.reviews = PgReviewRepo(session)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        try:
            async with self._session.begin_nested():
                yield
        except SQLAlchemyError as e:
            logger.error("Transaction failed: %s", e)
            raise StoreError("transaction failed") from e
