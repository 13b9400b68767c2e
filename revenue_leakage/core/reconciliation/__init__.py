"""
Reconciliation of raw records into validated records.
"""

from .engine import (
    ReconciliationEngine,
    reconcile_customer,
    reconcile_order,
    reconcile_order_item,
    reconcile_product,
)

__all__ = [
    "ReconciliationEngine",
    "reconcile_order_item",
    "reconcile_order",
    "reconcile_product",
    "reconcile_customer",
]
