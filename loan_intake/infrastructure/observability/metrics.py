"""Prometheus metrics for monitoring decision outcomes, scores and storage health"""

from typing import Optional
from prometheus_client import Counter, Histogram

# Decision metrics
decision_counter = Counter(
    "loan_decision_total",
    "Total loan applications decided",
    ["status"],  # inadmissible | rejected | approved
)

score_histogram = Histogram(
    "loan_score",
    "Scores assigned to admissible applications",
    buckets=[10, 25, 40, 55, 70, 85, 100],
)

# Storage metrics
decision_write_retry_counter = Counter(
    "loan_decision_write_retries_total",
    "Decision writes retried after a storage error",
)

persistence_failure_counter = Counter(
    "loan_persistence_failures_total",
    "Submissions that failed to register or record a decision",
    ["stage"],  # register | decision
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_decision(status: str, score: Optional[int]) -> None:
    """Record decision metrics for monitoring approval rates and score distribution"""
    decision_counter.labels(status=status).inc()

    if score is not None:
        score_histogram.observe(score)
