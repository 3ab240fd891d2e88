# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Prometheus metrics for the member service."""
from prometheus_client import Counter, Gauge, Histogram

MEMBERS_CREATED = Counter(
    "members_created_total", "Total members created", ["placement"]
)
MEMBERS_DELETED = Counter(
    "members_deleted_total", "Total member records removed", ["mode"]
)
MEMBERS_TOTAL = Gauge(
    "members_total", "Current number of members in the store"
)
PLACEMENT_DEPTH = Histogram(
    "member_placement_depth",
    "Levels below the requested upline where a new member was placed",
    buckets=[0, 1, 2, 3, 4, 6, 8, 12, 16],
)
PLACEMENT_RETRIES = Counter(
    "member_placement_retries_total",
    "Placements re-resolved after losing the capacity race",
)
TREE_BUILD_SECONDS = Histogram(
    "member_tree_build_seconds",
    "Time to materialise the full hierarchy",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)
REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "endpoint", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request latency", ["method", "endpoint"]
)
HTTP_ERRORS = Counter(
    "http_errors_total", "Total HTTP errors", ["method", "endpoint", "status"]
)
