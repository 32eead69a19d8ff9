"""Prometheus scrape endpoint.

Returns every registered metric (HTTP traffic plus the ledger and
membership counters in skillhub.core.metrics) in the text exposition
format.  Restrict it to the Prometheus server at the network layer.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
