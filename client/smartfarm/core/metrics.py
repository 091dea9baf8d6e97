"""
Metrics instrumentation for observability.
Prometheus-compatible counters for the booking flow, the API transport
and the real-time event stream.
"""

from prometheus_client import Counter, Histogram, generate_latest

# Booking metrics
booking_attempts = Counter(
    'smartfarm_booking_attempts_total',
    'Total booking submissions',
    ['status']  # success, conflict, invalid, error
)

booking_latency = Histogram(
    'smartfarm_booking_latency_seconds',
    'Create-booking request latency',
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# API transport metrics
api_requests = Counter(
    'smartfarm_api_requests_total',
    'Requests sent to the booking backend',
    ['method', 'status']
)

# Availability cache metrics
cache_operations = Counter(
    'smartfarm_cache_operations_total',
    'Availability cache lookups',
    ['result']  # hit, miss
)

# Real-time event metrics
sse_events = Counter(
    'smartfarm_sse_events_total',
    'Server-sent booking events received',
    ['type']
)

sse_reconnects = Counter(
    'smartfarm_sse_reconnects_total',
    'Event stream reconnect attempts'
)


def render_metrics() -> bytes:
    """Prometheus exposition text for every registered metric."""
    return generate_latest()

# Convenience functions for instrumentation
def record_booking_attempt(status: str):
    """Record booking attempt. Status: success, conflict, invalid, error"""
    booking_attempts.labels(status=status).inc()

def record_api_request(method: str, status_code: int):
    api_requests.labels(method=method, status=str(status_code)).inc()

def record_cache_lookup(hit: bool):
    """Record availability cache lookup."""
    result = "hit" if hit else "miss"
    cache_operations.labels(result=result).inc()

def record_sse_event(event_type: str):
    sse_events.labels(type=event_type).inc()
