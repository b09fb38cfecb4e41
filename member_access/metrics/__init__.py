# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Prometheus metrics: single source of truth for all metric objects.
Imported by services and middleware. Never instantiated in controllers.
"""
from prometheus_client import Counter, Gauge, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "member_access_requests_total", "Total HTTP requests", ["method", "endpoint", "status"]
)
REQUEST_LATENCY = Histogram(
    "member_access_request_duration_seconds", "HTTP request latency", ["method", "endpoint"]
)
HTTP_ERRORS = Counter(
    "member_access_http_errors_total", "Total HTTP errors", ["method", "endpoint", "status"]
)

# ── Business Metrics (updated by service layer only) ──
MEMBERS_TOTAL = Gauge("members_total", "Members currently in the roster")
IMPORT_ROWS = Counter(
    "member_import_rows_total", "Rows processed by bulk imports", ["outcome"]
)
IMPORT_DURATION = Histogram(
    "member_import_duration_seconds",
    "Time to reconcile one bulk import",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)
ACCESS_DECISIONS = Counter(
    "access_decisions_total", "Access gate decisions", ["outcome"]
)
PARKING_OCCUPIED = Gauge("parking_occupied", "Occupied parking spaces")
PARKING_EVENTS = Counter(
    "parking_events_total", "Parking entry/exit events", ["event", "applied"]
)
