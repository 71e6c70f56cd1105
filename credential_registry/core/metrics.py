"""Application metrics using the Prometheus client library.

Single inventory of everything the service measures.  Other modules
import specific metrics and increment/observe them at the point of action.

Engine metrics are only touched after a unit of work has committed, so a
rolled-back transition never shows up as a counted one.
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
# Engine metrics
# ---------------------------------------------------------------------------

RECORDS_CREATED = Counter(
    "credential_records_created_total",
    "Credential records created",
    ["domain"],  # education|certification|employment|achievement
)

VERIFICATION_TRANSITIONS = Counter(
    "verification_transitions_total",
    "Committed verification state transitions",
    ["domain", "transition"],  # requested|approved|rejected
)

PENDING_VERIFICATIONS = Gauge(
    "pending_verifications",
    "Records currently awaiting an issuer decision",
    ["domain"],
)

AUTHZ_DENIALS = Counter(
    "authorization_denials_total",
    "Operations refused by the authorization gate",
    ["operation", "kind"],
)

REGISTRY_ERRORS = Counter(
    "registry_errors_total",
    "Engine errors surfaced to HTTP callers",
    ["kind"],
)
