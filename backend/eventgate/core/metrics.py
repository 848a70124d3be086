"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at the /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Registration metrics
registration_outcomes = Counter(
    'registration_outcomes_total',
    'Registration operation outcomes',
    ['operation', 'outcome']  # register/cancel/invite/check_in, admitted/waitlisted/<reason>
)

registration_latency = Histogram(
    'registration_operation_latency_seconds',
    'Latency of locked registration operations',
    ['operation'],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Waitlist metrics
waitlist_promotions = Counter(
    'waitlist_promotions_total',
    'Waitlisted registrations promoted to registered'
)

# Store metrics
store_failures = Counter(
    'registration_store_failures_total',
    'Database errors reported as store_failure results',
    ['operation']
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get, hit/miss
)


def metrics_endpoint() -> Response:
    """Render all registered metrics in the Prometheus text format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_outcome(operation: str, outcome: str):
    registration_outcomes.labels(operation=operation, outcome=outcome).inc()


def record_promotions(count: int):
    if count:
        waitlist_promotions.inc(count)


def record_store_failure(operation: str):
    store_failures.labels(operation=operation).inc()


def record_cache_operation(operation: str, hit: bool):
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
