"""
LeakageReport model: the output bundle of one pipeline run.
"""

from collections import Counter

from pydantic import BaseModel

from .aggregates import (
    ChannelDiscountAbuse,
    CustomerLeakageRanked,
    CustomerRiskProfile,
    LeakageSummary,
    MarginPerformance,
    ProductLeakage,
)
from .raw_records import Customer
from .validated_records import ValidatedOrder, ValidatedOrderItem, ValidatedProduct
from .validation_issue import ValidationIssue


class LeakageReport(BaseModel):
    """
    Everything a run produces, fully materialised.

    Attributes:
        issues: Integrity findings
        order_items: Validated order items
        orders: Validated orders
        products: Validated products
        customers: Customers (passthrough)
        summary: Company-level leakage
        product_leakage: Leakage per product
        channel_discount_abuse: Discount behaviour per channel
        customer_risk: Absolute-threshold customer risk
        customer_leakage_ranked: Country-relative customer ranking
        margin_performance: Gross profit per product
    """

    issues: tuple[ValidationIssue, ...] = ()
    order_items: tuple[ValidatedOrderItem, ...] = ()
    orders: tuple[ValidatedOrder, ...] = ()
    products: tuple[ValidatedProduct, ...] = ()
    customers: tuple[Customer, ...] = ()
    summary: LeakageSummary
    product_leakage: tuple[ProductLeakage, ...] = ()
    channel_discount_abuse: tuple[ChannelDiscountAbuse, ...] = ()
    customer_risk: tuple[CustomerRiskProfile, ...] = ()
    customer_leakage_ranked: tuple[CustomerLeakageRanked, ...] = ()
    margin_performance: tuple[MarginPerformance, ...] = ()

    class Config:
        frozen = True

    def issue_counts(self) -> dict[str, int]:
        """Number of findings per issue kind."""
        return dict(Counter(issue.issue_kind for issue in self.issues))

    def status_counts(self) -> dict[str, dict[str, int]]:
        """Number of validated records per status, per entity kind."""
        return {
            "order_item": dict(Counter(item.price_status for item in self.order_items)),
            "order": dict(Counter(order.discount_status for order in self.orders)),
            "product": dict(Counter(product.margin_status for product in self.products)),
        }
