"""Prometheus metrics for the Agent File service."""

from prometheus_client import Counter, Histogram

TEMPLATE_PUBLISHES = Counter(
    "ams_template_publishes_total",
    "Template version publish attempts",
    labelnames=["outcome"],
)

UPGRADE_ATTEMPTS = Counter(
    "ams_upgrade_attempts_total",
    "Migration attempts by final status",
    labelnames=["status"],
)

UPGRADE_PLAN_STEPS = Histogram(
    "ams_upgrade_plan_steps",
    "Number of migration steps in computed plans",
    buckets=(0, 1, 2, 3, 5, 10, 20, 50),
)

IDEMPOTENCY_REJECTIONS = Counter(
    "ams_idempotency_rejections_total",
    "Requests rejected by the idempotency guard",
    labelnames=["reason"],
)

CACHE_WRITE_FAILURES = Counter(
    "ams_cache_write_failures_total",
    "Best-effort content cache writes that failed",
)

UPSTREAM_LATENCY = Histogram(
    "ams_upstream_latency_seconds",
    "Latency of remote instance API calls",
    labelnames=["operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)
