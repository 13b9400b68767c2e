"""
Aggregation engine.

Groups validated records along the reporting dimensions (company, product,
channel, customer) and computes leakage and margin metrics. All sums are
exact Decimal arithmetic; nothing is rounded here. Joins behave like inner
joins: records whose reference does not resolve are left out (they are
already reported by the integrity checks), and duplicate keys on the joined
side multiply rows.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable, TypeVar

from revenue_leakage.core.models import (
    ChannelDiscountAbuse,
    Customer,
    CustomerLeakage,
    CustomerRiskProfile,
    LeakageSettings,
    LeakageSummary,
    MarginPerformance,
    ProductLeakage,
    ValidatedOrder,
    ValidatedOrderItem,
    ValidatedProduct,
)

T = TypeVar("T")

ZERO = Decimal("0")
HUNDRED = Decimal("100")
DEFAULT_SETTINGS = LeakageSettings()


def percentage(numerator: Decimal, denominator: Decimal) -> Decimal | None:
    """numerator / denominator x 100, or None when the denominator is zero."""
    if denominator == 0:
        return None
    return numerator / denominator * HUNDRED


def sort_key(*values: Any) -> tuple:
    """Ordering key that tolerates None (sorted last)."""
    return tuple(item for value in values for item in (value is None, value))


def _index(records: Iterable[T], key: Callable[[T], Any]) -> dict[Any, list[T]]:
    index: dict[Any, list[T]] = defaultdict(list)
    for record in records:
        index[key(record)].append(record)
    return index


def _join_products(
    items: Iterable[ValidatedOrderItem],
    products: Iterable[ValidatedProduct],
) -> dict[tuple, list[tuple[ValidatedOrderItem, ValidatedProduct]]]:
    """Inner join items to products, grouped by (product_id, name, category)."""
    by_id = _index(products, lambda p: p.product_id)
    groups: dict[tuple, list[tuple[ValidatedOrderItem, ValidatedProduct]]] = defaultdict(list)
    for item in items:
        for product in by_id.get(item.product_id, ()):
            groups[(product.product_id, product.name, product.category)].append((item, product))
    return groups


def _join_customers(
    orders: Iterable[ValidatedOrder],
    customers: Iterable[Customer],
) -> dict[tuple, list[ValidatedOrder]]:
    """Inner join orders to customers, grouped by (customer_id, customer country)."""
    by_id = _index(customers, lambda c: c.customer_id)
    groups: dict[tuple, list[ValidatedOrder]] = defaultdict(list)
    for order in orders:
        for customer in by_id.get(order.customer_id, ()):
            groups[(customer.customer_id, customer.country)].append(order)
    return groups


def _discount_value(order: ValidatedOrder) -> Decimal:
    return order.subtotal * order.discount_pct / HUNDRED


def summarize_leakage(items: Iterable[ValidatedOrderItem], analysis_date: date) -> LeakageSummary:
    """Company-wide expected vs realized revenue over all validated items."""
    items = list(items)
    total_expected = sum((item.expected_line_total for item in items), ZERO)
    total_realized = sum((item.line_total for item in items), ZERO)
    diff = total_expected - total_realized
    return LeakageSummary(
        analysis_date=analysis_date,
        total_expected=total_expected,
        total_realized=total_realized,
        diff=diff,
        leakage_pct=percentage(diff, total_realized),
    )


def product_leakage(
    items: Iterable[ValidatedOrderItem],
    products: Iterable[ValidatedProduct],
) -> tuple[ProductLeakage, ...]:
    """Expected vs realized revenue per product."""
    rows = []
    for (product_id, name, category), pairs in _join_products(items, products).items():
        expected = sum((item.expected_line_total for item, _ in pairs), ZERO)
        realized = sum((item.line_total for item, _ in pairs), ZERO)
        leakage = expected - realized
        rows.append(
            ProductLeakage(
                product_id=product_id,
                product_name=name,
                product_category=category,
                units_sold=sum(item.quantity for item, _ in pairs),
                expected_revenue=expected,
                realized_revenue=realized,
                leakage=leakage,
                leakage_pct=percentage(leakage, expected),
            )
        )
    return tuple(sorted(rows, key=lambda r: sort_key(r.product_id, r.product_name, r.product_category)))


def margin_performance(
    items: Iterable[ValidatedOrderItem],
    products: Iterable[ValidatedProduct],
) -> tuple[MarginPerformance, ...]:
    """Gross profit per product: realized revenue minus cost of units sold."""
    rows = []
    for (product_id, name, category), pairs in _join_products(items, products).items():
        revenue = sum((item.line_total for item, _ in pairs), ZERO)
        cost = sum((product.cost * item.quantity for item, product in pairs), ZERO)
        profit = revenue - cost
        rows.append(
            MarginPerformance(
                product_id=product_id,
                product_name=name,
                product_category=category,
                units_sold=sum(item.quantity for item, _ in pairs),
                total_revenue=revenue,
                total_cost=cost,
                gross_profit=profit,
                gross_margin_pct=percentage(profit, revenue),
            )
        )
    return tuple(sorted(rows, key=lambda r: sort_key(r.product_id, r.product_name, r.product_category)))


def channel_discount_abuse(
    orders: Iterable[ValidatedOrder],
    settings: LeakageSettings = DEFAULT_SETTINGS,
) -> tuple[ChannelDiscountAbuse, ...]:
    """
    Discount behaviour per acquisition channel.

    A channel is flagged when its average discount exceeds the abuse
    threshold or its discount leakage exceeds the leakage threshold; either
    condition alone is enough.
    """
    rows = []
    for source, group in _index(orders, lambda o: o.source).items():
        avg_discount = sum((o.discount_pct for o in group), ZERO) / len(group)
        leakage = sum((o.discount_diff for o in group), ZERO)
        abused = avg_discount > settings.abuse_avg_discount_pct or leakage > settings.abuse_discount_leakage
        rows.append(
            ChannelDiscountAbuse(
                source=source,
                order_count=len(group),
                avg_discount_pct=avg_discount,
                total_discount_value=sum((_discount_value(o) for o in group), ZERO),
                discount_leakage=leakage,
                abuse_flag="Yes" if abused else "No",
            )
        )
    return tuple(sorted(rows, key=lambda r: sort_key(r.source)))


def classify_customer_risk(total_leakage: Decimal, order_count: int, settings: LeakageSettings = DEFAULT_SETTINGS) -> str:
    """Absolute-threshold risk tier; High is evaluated before Medium."""
    if total_leakage > settings.high_risk_leakage and order_count > settings.high_risk_min_orders:
        return "High"
    if settings.medium_risk_leakage_min <= total_leakage <= settings.medium_risk_leakage_max:
        return "Medium"
    return "Low"


def customer_risk_profile(
    orders: Iterable[ValidatedOrder],
    customers: Iterable[Customer],
    settings: LeakageSettings = DEFAULT_SETTINGS,
) -> tuple[CustomerRiskProfile, ...]:
    """Revenue, discount and discount leakage per customer with an absolute risk tier."""
    rows = []
    for (customer_id, country), group in _join_customers(orders, customers).items():
        revenue = sum((o.total for o in group), ZERO)
        leakage = sum((o.discount_diff for o in group), ZERO)
        rows.append(
            CustomerRiskProfile(
                customer_id=customer_id,
                country=country,
                order_count=len(group),
                total_revenue=revenue,
                total_discount_received=sum((_discount_value(o) for o in group), ZERO),
                discount_issue_count=sum(1 for o in group if o.discount_status != "ok"),
                total_leakage=leakage,
                leakage_pct_of_revenue=percentage(leakage, revenue),
                risk_category=classify_customer_risk(leakage, len(group), settings),
            )
        )
    return tuple(sorted(rows, key=lambda r: sort_key(r.customer_id, r.country)))


def customer_leakage(
    orders: Iterable[ValidatedOrder],
    customers: Iterable[Customer],
) -> tuple[CustomerLeakage, ...]:
    """Per-customer totals feeding the ranking engine."""
    rows = [
        CustomerLeakage(
            customer_id=customer_id,
            country=country,
            total_orders=len(group),
            total_revenue=sum((o.total for o in group), ZERO),
            total_leakage=sum((o.discount_diff for o in group), ZERO),
        )
        for (customer_id, country), group in _join_customers(orders, customers).items()
    ]
    return tuple(sorted(rows, key=lambda r: sort_key(r.customer_id, r.country)))
