"""
Aggregate models (the "gold" layer).

Aggregates hold exact Decimal values. Percentages are None when their
denominator is zero. Rounding for display happens in the writers.
"""

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel

RiskCategory = Literal["High", "Medium", "Low"]
YesNo = Literal["Yes", "No"]


class _Aggregate(BaseModel):
    class Config:
        frozen = True


class LeakageSummary(_Aggregate):
    """
    Company-level leakage over all validated order items.

    Attributes:
        analysis_date: Date the analysis was run for
        total_expected: Sum of expected line totals
        total_realized: Sum of recorded line totals
        diff: total_expected - total_realized
        leakage_pct: diff / total_realized x 100 (None if nothing was realized)
    """

    analysis_date: date
    total_expected: Decimal
    total_realized: Decimal
    diff: Decimal
    leakage_pct: Decimal | None = None


class ProductLeakage(_Aggregate):
    """Revenue leakage for one product."""

    product_id: int
    product_name: str | None = None
    product_category: str | None = None
    units_sold: int
    expected_revenue: Decimal
    realized_revenue: Decimal
    leakage: Decimal
    leakage_pct: Decimal | None = None


class ChannelDiscountAbuse(_Aggregate):
    """
    Discount behaviour of one acquisition channel.

    Attributes:
        source: Channel name
        order_count: Orders placed through the channel
        avg_discount_pct: Mean discount percentage
        total_discount_value: Sum of subtotal x discount_pct / 100
        discount_leakage: Sum of discount_diff
        abuse_flag: "Yes" when avg discount or discount leakage crosses its threshold
    """

    source: str | None = None
    order_count: int
    avg_discount_pct: Decimal
    total_discount_value: Decimal
    discount_leakage: Decimal
    abuse_flag: YesNo


class CustomerRiskProfile(_Aggregate):
    """Absolute-threshold discount risk for one customer."""

    customer_id: int
    country: str | None = None
    order_count: int
    total_revenue: Decimal
    total_discount_received: Decimal
    discount_issue_count: int
    total_leakage: Decimal
    leakage_pct_of_revenue: Decimal | None = None
    risk_category: RiskCategory


class CustomerLeakage(_Aggregate):
    """Per-customer leakage totals, the input of the ranking engine."""

    customer_id: int
    country: str | None = None
    total_orders: int
    total_revenue: Decimal
    total_leakage: Decimal


class CustomerLeakageRanked(CustomerLeakage):
    """
    Country-relative leakage standing of one customer.

    Attributes:
        leakage_rank: Rank with gaps inside the country, 1 = largest leakage
        leakage_percentile: Percentile rank (0-100, 2 decimals)
        risk_category: Tier derived from the percentile
    """

    leakage_rank: int
    leakage_percentile: Decimal
    risk_category: RiskCategory


class MarginPerformance(_Aggregate):
    """Gross profit of one product after cost."""

    product_id: int
    product_name: str | None = None
    product_category: str | None = None
    units_sold: int
    total_revenue: Decimal
    total_cost: Decimal
    gross_profit: Decimal
    gross_margin_pct: Decimal | None = None
