"""
Validated entity models (the "silver" layer).

Each validated record is its raw record plus the values recomputed from
independent inputs and a status classifying the discrepancy. Customers carry
no numeric reconciliation and pass through as raw Customer records.
"""

from decimal import Decimal
from typing import Literal

from .raw_records import Order, OrderItem, Product

PriceStatus = Literal["ok", "price_mismatch"]
DiscountStatus = Literal["ok", "invalid_discount", "discount_mismatch"]
MarginStatus = Literal["ok", "negative_margin", "margin_mismatch"]


class ValidatedOrderItem(OrderItem):
    """
    Order item with recomputed line total.

    Attributes:
        expected_line_total: unit_price x quantity
        line_total_diff: expected_line_total - line_total
        price_status: "ok" or "price_mismatch"
    """

    expected_line_total: Decimal
    line_total_diff: Decimal
    price_status: PriceStatus

    class Config:
        json_schema_extra = {
            "example": {
                "order_id": 1001,
                "product_id": 7,
                "unit_price": "10.00",
                "quantity": 3,
                "line_total": "30.00",
                "expected_line_total": "30.00",
                "line_total_diff": "0.00",
                "price_status": "ok"
            }
        }


class ValidatedOrder(Order):
    """
    Order with recomputed discounted total.

    Attributes:
        expected_total: subtotal x (1 - discount_pct / 100)
        discount_diff: expected_total - total
        discount_status: "ok", "invalid_discount" or "discount_mismatch"
    """

    expected_total: Decimal
    discount_diff: Decimal
    discount_status: DiscountStatus


class ValidatedProduct(Product):
    """
    Product with recomputed margin.

    Attributes:
        expected_margin: price - cost
        margin_diff: expected_margin - margin
        margin_status: "ok", "negative_margin" or "margin_mismatch"
    """

    expected_margin: Decimal
    margin_diff: Decimal
    margin_status: MarginStatus
