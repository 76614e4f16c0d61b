# File: metrics.py

from prometheus_client import Counter, Gauge, Histogram

METRICS = {
    "clusters_total": Gauge("netplane_clusters_total", "Total count of stored clusters"),
    "reconciliation_latency": Histogram(
        "netplane_reconciliation_duration_ms",
        "Time taken for a reconciliation pass in milliseconds",
        buckets=(10, 50, 100, 250, 500, 1000, 2500, 5000),
    ),
    "reconciliation_actions": Counter(
        "netplane_reconciliation_actions_total",
        "Count of reconciliation actions",
        ["action_type"],
    ),
    "reconciliation_faults": Counter(
        "netplane_reconciliation_faults_total",
        "Count of faults raised while reconciling a resource",
        ["fault"],
    ),
    "provider_calls": Counter(
        "netplane_provider_calls_total",
        "Count of EC2 API calls issued",
        ["operation"],
    ),
    "api_requests": Counter(
        "netplane_api_requests_total",
        "Total REST API requests",
        ["method", "endpoint"],
    ),
}
