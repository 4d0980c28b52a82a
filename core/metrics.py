"""
Prometheus metrics for the license service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Histogram

# HTTP metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0],
)

# Payment event metrics
payment_events_total = Counter(
    "payment_events_total",
    "Payment processor events by type and ingestion outcome",
    ["event_type", "outcome"],
)

payment_event_rejections_total = Counter(
    "payment_event_rejections_total",
    "Payment processor events rejected at the signature gate",
    ["reason"],
)

# License metrics
licenses_created_total = Counter(
    "licenses_created_total",
    "Total licenses created",
    ["status"],
)

license_status_transitions_total = Counter(
    "license_status_transitions_total",
    "License status transitions applied from payment events",
    ["from_status", "to_status"],
)

license_validations_total = Counter(
    "license_validations_total",
    "License validation queries by result",
    ["result"],
)

license_emails_total = Counter(
    "license_emails_total",
    "License key mail dispatch attempts",
    ["result"],
)

# Checkout metrics
checkout_sessions_total = Counter(
    "checkout_sessions_total",
    "Checkout sessions requested",
    ["plan_type", "result"],
)

# Rate limiting
rate_limited_total = Counter(
    "rate_limited_total",
    "Requests rejected by the rate limiter",
    ["scope"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
