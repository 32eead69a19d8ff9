from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skillhub.api.accounts import router as accounts_router
from skillhub.api.courses import router as courses_router
from skillhub.api.health import router as health_router
from skillhub.api.metrics_endpoint import router as metrics_router
from skillhub.api.projects import router as projects_router
from skillhub.core.config import SETTINGS
from skillhub.core.logging import setup_logging
from skillhub.db.engine import lifespan_db
from skillhub.db.redis import lifespan_redis
from skillhub.middleware.metrics import MetricsMiddleware
from skillhub.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Nested so teardown runs in reverse order.
    async with lifespan_db():
        async with lifespan_redis():
            yield


app = FastAPI(
    title="skillhub-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last-added runs first: RequestContext → Metrics → CORS → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(courses_router)
app.include_router(projects_router)

logger.info(
    "skillhub-service started  env=%s log_level=%s port=%d policy=%s docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.completion_policy,
    "on" if SETTINGS.is_dev else "off",
)
