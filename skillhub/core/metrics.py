"""Application metrics (Prometheus client library).

One inventory of everything the service measures.  Other modules import
the metric they own and increment it at the point of action.

HTTP metrics are populated by MetricsMiddleware.  The ledger metrics let
a dashboard answer "how much SVC did completions mint today?" and "how
often do concurrent writers collide on the same account?" without
scanning logs.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Ledger and membership metrics
# ---------------------------------------------------------------------------

LEDGER_OPERATIONS = Counter(
    "skillhub_ledger_operations_total",
    "Enrollment and completion attempts by outcome",
    ["operation", "outcome"],  # enroll|complete, ok|<error class name>
)

SVC_MINTED = Counter(
    "skillhub_svc_minted_total",
    "SVC created by course completions (learner rewards under the mint policy)",
)

SVC_TRANSFERRED = Counter(
    "skillhub_svc_transferred_total",
    "SVC moved between accounts (enrollment debits and teacher payouts)",
    ["direction"],  # debit|payout
)

MEMBERSHIP_CHANGES = Counter(
    "skillhub_membership_changes_total",
    "Project membership changes by action and outcome",
    ["action", "outcome"],  # join|leave|status, ok|<error class name>
)

CAS_CONFLICTS = Counter(
    "skillhub_cas_conflicts_total",
    "Compare-and-swap write misses by record type",
    ["record"],  # account|course|project
)

CACHE_OPERATIONS = Counter(
    "cache_operations_total",
    "Cache get operations by result",
    ["operation"],  # "hit" or "miss"
)
