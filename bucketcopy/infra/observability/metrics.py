from prometheus_client import Counter, Histogram

# Low-cardinality labels: operation names only, never container or key values
ATTEMPTS = Counter(
    "storage_attempts_total",
    "Storage operation attempts",
    ["operation", "outcome"],
)

LATENCY = Histogram(
    "storage_operation_duration_seconds",
    "Wall time of a storage operation including retries",
    ["operation"],
)
