"""
Aggregation, ranking and read-only report views.
"""

from .aggregates import (
    channel_discount_abuse,
    classify_customer_risk,
    customer_leakage,
    customer_risk_profile,
    margin_performance,
    percentage,
    product_leakage,
    summarize_leakage,
)
from .ranking import percent_rank, percentile_tier, rank_customer_leakage, rank_with_gaps

__all__ = [
    "summarize_leakage",
    "product_leakage",
    "margin_performance",
    "channel_discount_abuse",
    "customer_risk_profile",
    "customer_leakage",
    "classify_customer_risk",
    "percentage",
    "rank_customer_leakage",
    "rank_with_gaps",
    "percent_rank",
    "percentile_tier",
]
