"""Prometheus metrics for money movement, admin lifecycle, and request latency"""

from prometheus_client import Counter, Histogram

# Transaction metrics
transaction_counter = Counter(
    "wallet_transaction_total",
    "Transaction engine operations by outcome",
    ["type", "outcome"],  # outcome: committed | rejected | store_failure
)

# Admin lifecycle
admin_transition_counter = Counter(
    "wallet_admin_transition_total",
    "Admin state transitions",
    ["action", "outcome"],  # action: create | activate | deactivate
)

login_counter = Counter(
    "wallet_login_total",
    "Login attempts",
    ["outcome"],  # granted | denied
)

store_failure_counter = Counter(
    "wallet_store_failures_total",
    "Atomic units rolled back on store errors",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transaction(type: str, outcome: str) -> None:
    transaction_counter.labels(type=type, outcome=outcome).inc()


def record_admin_transition(action: str, outcome: str) -> None:
    admin_transition_counter.labels(action=action, outcome=outcome).inc()
