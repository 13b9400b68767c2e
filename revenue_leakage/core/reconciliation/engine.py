"""
Reconciliation engine.

Recomputes expected financial values from independent inputs and classifies
each record's discrepancy. Every function here is pure: no shared state, no
exceptions for mismatches (the status field encodes the outcome), so each
entity kind can be reconciled in parallel.
"""

from decimal import Decimal
from typing import Iterable

from revenue_leakage.core.models import (
    Customer,
    LeakageSettings,
    Order,
    OrderItem,
    Product,
    ValidatedOrder,
    ValidatedOrderItem,
    ValidatedProduct,
)

HUNDRED = Decimal("100")
DEFAULT_SETTINGS = LeakageSettings()


def reconcile_order_item(item: OrderItem, settings: LeakageSettings = DEFAULT_SETTINGS) -> ValidatedOrderItem:
    """Check that unit_price x quantity matches the stored line total."""
    expected = item.unit_price * item.quantity
    diff = expected - item.line_total
    status = "price_mismatch" if abs(diff) > settings.money_tolerance else "ok"
    return ValidatedOrderItem(
        **item.model_dump(),
        expected_line_total=expected,
        line_total_diff=diff,
        price_status=status,
    )


def reconcile_order(order: Order, settings: LeakageSettings = DEFAULT_SETTINGS) -> ValidatedOrder:
    """
    Check the discounted total of an order.

    The discount must lie in the legitimate band (0-80 by default), which is
    stricter than the raw 0-100 range check. An illegitimate discount is
    reported as invalid_discount even if the total also mismatches.
    """
    expected = order.subtotal * (1 - order.discount_pct / HUNDRED)
    diff = expected - order.total

    if not settings.min_valid_discount_pct <= order.discount_pct <= settings.max_valid_discount_pct:
        status = "invalid_discount"
    elif abs(diff) > settings.money_tolerance:
        status = "discount_mismatch"
    else:
        status = "ok"

    return ValidatedOrder(
        **order.model_dump(),
        expected_total=expected,
        discount_diff=diff,
        discount_status=status,
    )


def reconcile_product(product: Product, settings: LeakageSettings = DEFAULT_SETTINGS) -> ValidatedProduct:
    """Check the stored margin against price - cost; selling below cost wins over a mismatch."""
    expected = product.price - product.cost
    diff = expected - product.margin

    if product.cost > product.price:
        status = "negative_margin"
    elif abs(diff) > settings.money_tolerance:
        status = "margin_mismatch"
    else:
        status = "ok"

    return ValidatedProduct(
        **product.model_dump(),
        expected_margin=expected,
        margin_diff=diff,
        margin_status=status,
    )


def reconcile_customer(customer: Customer) -> Customer:
    # No numeric reconciliation for customers
    return customer


class ReconciliationEngine:
    """
    Applies the reconciliation rules to whole collections.

    Usage:
        engine = ReconciliationEngine(settings)
        items = engine.order_items(store.order_items)
    """

    def __init__(self, settings: LeakageSettings | None = None):
        self.settings = settings or DEFAULT_SETTINGS

    def order_items(self, items: Iterable[OrderItem]) -> tuple[ValidatedOrderItem, ...]:
        return tuple(reconcile_order_item(item, self.settings) for item in items)

    def orders(self, orders: Iterable[Order]) -> tuple[ValidatedOrder, ...]:
        return tuple(reconcile_order(order, self.settings) for order in orders)

    def products(self, products: Iterable[Product]) -> tuple[ValidatedProduct, ...]:
        return tuple(reconcile_product(product, self.settings) for product in products)

    def customers(self, customers: Iterable[Customer]) -> tuple[Customer, ...]:
        return tuple(reconcile_customer(customer) for customer in customers)
