"""Prometheus metric inventory for the consent service.

Every metric the service exposes is declared here; the modules that own
the behavior import and update them at the point of action.

  HTTP metrics:       filled by MetricsMiddleware for every request.
  Consent metrics:    one increment per finished consent session, labeled
                      by how it ended.  approved/denied/failed ratios are
                      the main product signal of this service.
  Upstream metrics:   one observation per call to the authorization
                      server, so a slow or failing upstream is visible
                      separately from our own latency.
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
    # Page loads include one upstream round-trip, so the interesting
    # range is wider than for a pure API.
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Consent flow
# ---------------------------------------------------------------------------

CONSENT_PAGE_LOADS = Counter(
    "consent_page_loads_total",
    "Consent page loads by resulting state",
    ["result"],  # "ready", "invalid_request", "resolver_failed"
)

CONSENT_DECISIONS = Counter(
    "consent_decisions_total",
    "Finished consent sessions by outcome",
    ["outcome"],  # "approved", "denied", "failed"
)

# ---------------------------------------------------------------------------
# Authorization server (upstream)
# ---------------------------------------------------------------------------

AUTH_SERVER_REQUESTS = Counter(
    "auth_server_requests_total",
    "Calls to the authorization server by endpoint and result",
    ["endpoint", "result"],  # result: "ok", "http_error", "network_error"
)

AUTH_SERVER_DURATION = Histogram(
    "auth_server_request_duration_seconds",
    "Authorization server call duration in seconds",
    ["endpoint"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)
