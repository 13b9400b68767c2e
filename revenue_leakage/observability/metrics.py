"""
Prometheus metrics for the revenue leakage pipeline

Tracks ingestion volume, data-quality findings, reconciliation outcomes,
stage durations and the headline leakage of the last run.
"""

from contextlib import contextmanager
from typing import Iterator

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# PIPELINE METRICS
# =======================

records_ingested_total = Counter(
    name="leakage_records_ingested_total",
    documentation="Total number of raw records handed to the pipeline",
    labelnames=["entity_kind"],
    registry=REGISTRY,
)

stage_duration_seconds = Histogram(
    name="leakage_stage_duration_seconds",
    documentation="Time spent in each pipeline stage in seconds",
    labelnames=["stage"],  # stage: integrity, reconciliation, aggregation, ranking
    buckets=[0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0],
    registry=REGISTRY,
)

pipeline_runs_total = Counter(
    name="leakage_pipeline_runs_total",
    documentation="Total number of pipeline runs",
    labelnames=["status"],  # status: success, failure
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

validation_issues_total = Counter(
    name="leakage_validation_issues_total",
    documentation="Total number of integrity findings",
    labelnames=["entity_kind", "issue_kind"],
    registry=REGISTRY,
)

reconciliation_status_total = Counter(
    name="leakage_reconciliation_status_total",
    documentation="Validated records per reconciliation status",
    labelnames=["entity_kind", "status"],
    registry=REGISTRY,
)

# =======================
# LEAKAGE METRICS
# =======================

revenue_leakage_amount = Gauge(
    name="leakage_revenue_diff",
    documentation="Expected minus realized revenue of the last run",
    registry=REGISTRY,
)

revenue_leakage_pct = Gauge(
    name="leakage_revenue_diff_pct",
    documentation="Revenue leakage percentage of the last run",
    registry=REGISTRY,
)

abusive_channels = Gauge(
    name="leakage_abusive_channels",
    documentation="Channels flagged for discount abuse in the last run",
    registry=REGISTRY,
)

customers_by_risk = Gauge(
    name="leakage_customers_by_risk",
    documentation="Customers per risk tier in the last run",
    labelnames=["ranking", "risk_category"],  # ranking: absolute, percentile
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """Render the pipeline registry in the Prometheus text exposition format."""
    return generate_latest(REGISTRY)


def _child(metric, labels: dict):
    return metric.labels(**labels) if labels else metric


@contextmanager
def track_duration(histogram: Histogram, **labels) -> Iterator[None]:
    """
    Observe the wall time of the block, also when it raises.

    Usage:
        with track_duration(stage_duration_seconds, stage="integrity"):
            ...
    """
    with _child(histogram, labels).time():
        yield


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    _child(counter, labels).inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    _child(gauge, labels).set(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    _child(histogram, labels).observe(value)


# =======================
# RUN-SPECIFIC HELPERS
# =======================

def record_ingestion(counts: dict[str, int]) -> None:
    """
    Record raw record counts.

    Args:
        counts: entity_kind -> number of raw records
    """
    for entity_kind, count in counts.items():
        if count > 0:
            increment_counter(records_ingested_total, count, entity_kind=entity_kind)


def record_issues(issues) -> None:
    """Count integrity findings by entity and issue kind."""
    for issue in issues:
        increment_counter(validation_issues_total, 1, entity_kind=issue.entity_kind, issue_kind=issue.issue_kind)


def record_report(report) -> None:
    """
    Record the outcome of a finished run.

    Args:
        report: LeakageReport produced by the pipeline
    """
    for entity_kind, statuses in report.status_counts().items():
        for status, count in statuses.items():
            increment_counter(reconciliation_status_total, count, entity_kind=entity_kind, status=status)

    set_gauge(revenue_leakage_amount, float(report.summary.diff))
    if report.summary.leakage_pct is not None:
        set_gauge(revenue_leakage_pct, float(report.summary.leakage_pct))
    else:
        set_gauge(revenue_leakage_pct, float("nan"))

    set_gauge(abusive_channels, sum(1 for row in report.channel_discount_abuse if row.abuse_flag == "Yes"))

    for ranking, rows in (("absolute", report.customer_risk), ("percentile", report.customer_leakage_ranked)):
        for tier in ("High", "Medium", "Low"):
            set_gauge(
                customers_by_risk,
                sum(1 for row in rows if row.risk_category == tier),
                ranking=ranking,
                risk_category=tier,
            )
