"""
Read-only analysis views over a finished LeakageReport.

These are queries for reporting layers, not stages of the pipeline: they
filter and sort already computed aggregates and never change them.
"""

from collections import Counter
from decimal import Decimal

from revenue_leakage.core.models import (
    CustomerLeakageRanked,
    CustomerRiskProfile,
    LeakageReport,
    MarginPerformance,
)

ZERO = Decimal("0")


def high_risk_customers(report: LeakageReport) -> list[CustomerRiskProfile]:
    """High absolute-risk customers, largest discount leakage first."""
    rows = [row for row in report.customer_risk if row.risk_category == "High"]
    return sorted(rows, key=lambda r: (-r.total_leakage, r.customer_id))


def high_percentile_customers(report: LeakageReport) -> list[CustomerLeakageRanked]:
    """Customers in the High country-relative tier."""
    return [row for row in report.customer_leakage_ranked if row.risk_category == "High"]


def risk_distribution_by_country(report: LeakageReport) -> dict[tuple[str | None, str], int]:
    """Number of ranked customers per (country, risk tier)."""
    counts = Counter((row.country, row.risk_category) for row in report.customer_leakage_ranked)
    return dict(sorted(counts.items(), key=lambda kv: (kv[0][0] is None, kv[0][0] or "", kv[0][1])))


def high_revenue_high_risk(report: LeakageReport) -> list[CustomerLeakageRanked]:
    """High-tier customers whose revenue exceeds the average ranked revenue."""
    rows = report.customer_leakage_ranked
    if not rows:
        return []
    average = sum((r.total_revenue for r in rows), ZERO) / len(rows)
    selected = [r for r in rows if r.risk_category == "High" and r.total_revenue > average]
    return sorted(selected, key=lambda r: (-r.total_leakage, r.customer_id))


def percentile_bounds(report: LeakageReport) -> tuple[Decimal, Decimal] | None:
    """(min, max) leakage percentile over all ranked customers."""
    values = [r.leakage_percentile for r in report.customer_leakage_ranked]
    if not values:
        return None
    return min(values), max(values)


def loss_making_products(report: LeakageReport) -> list[MarginPerformance]:
    return [row for row in report.margin_performance if row.gross_profit < 0]


def low_margin_products(report: LeakageReport, threshold_pct: Decimal = Decimal("10")) -> list[MarginPerformance]:
    """Products whose gross margin is below the threshold, lowest first."""
    rows = [
        row for row in report.margin_performance
        if row.gross_margin_pct is not None and row.gross_margin_pct < threshold_pct
    ]
    return sorted(rows, key=lambda r: (r.gross_margin_pct, r.product_id))


def margin_distribution(report: LeakageReport) -> dict[str, Decimal] | None:
    """Min, max and average gross margin percentage across products."""
    values = [r.gross_margin_pct for r in report.margin_performance if r.gross_margin_pct is not None]
    if not values:
        return None
    return {
        "min_margin": min(values),
        "max_margin": max(values),
        "avg_margin": sum(values, ZERO) / len(values),
    }


def top_profit_products(report: LeakageReport, limit: int = 10) -> list[MarginPerformance]:
    return sorted(report.margin_performance, key=lambda r: (-r.gross_profit, r.product_id))[:limit]


def revenue_reconciliation(report: LeakageReport) -> dict[str, Decimal]:
    """
    Compare revenue in the margin aggregate with revenue in the validated items.

    The two differ exactly by the revenue of items that did not join to a
    product (or joined more than once through a duplicate product key).
    """
    aggregated = sum((r.total_revenue for r in report.margin_performance), ZERO)
    validated = sum((item.line_total for item in report.order_items), ZERO)
    return {
        "aggregated_revenue": aggregated,
        "validated_revenue": validated,
        "difference": aggregated - validated,
    }
