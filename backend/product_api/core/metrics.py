import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import Counter, Histogram


HTTP_REQUESTS = Counter(
    "papi_http_requests_total",
    "Total HTTP requests",
    ["method", "route", "status"],
)
HTTP_LATENCY = Histogram(
    "papi_http_request_duration_seconds",
    "HTTP request duration (seconds)",
    ["method", "route"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10),
)
DB_LATENCY = Histogram(
    "papi_db_response_time_seconds",
    "Database response time (seconds)",
    ["operation", "success"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5),
)
TOKEN_REFRESHES = Counter(
    "papi_access_token_refresh_total",
    "In-flight access token refresh attempts",
    ["outcome"],
)


@contextmanager
def observe_db(operation: str) -> Iterator[None]:
    """Time a database call; the `success` label records whether it raised."""
    start = time.perf_counter()
    try:
        yield
    except Exception:
        DB_LATENCY.labels(operation, "false").observe(time.perf_counter() - start)
        raise
    DB_LATENCY.labels(operation, "true").observe(time.perf_counter() - start)
