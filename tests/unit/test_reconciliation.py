"""
Unit tests for the reconciliation engine.

Includes property-based testing with hypothesis for the status rules.
"""

from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from revenue_leakage.core.models import LeakageSettings, Order, OrderItem
from revenue_leakage.core.reconciliation import (
    ReconciliationEngine,
    reconcile_customer,
    reconcile_order,
    reconcile_order_item,
    reconcile_product,
)

money = st.decimals(min_value=Decimal("0.01"), max_value=Decimal("10000"), places=2)
discounts = st.decimals(min_value=Decimal("-50"), max_value=Decimal("150"), places=2)


class TestOrderItemReconciliation:
    """Tests for reconcile_order_item"""

    def test_matching_line_total(self, make_item):
        """Test 10 x 3 recorded as 30 is ok"""
        result = reconcile_order_item(make_item(unit_price="10", quantity=3, line_total="30"))

        assert result.expected_line_total == Decimal("30")
        assert result.line_total_diff == Decimal("0")
        assert result.price_status == "ok"

    def test_under_billed_line(self, make_item):
        result = reconcile_order_item(make_item(unit_price="10.00", quantity=3, line_total="25.00"))
        assert result.line_total_diff == Decimal("5.00")
        assert result.price_status == "price_mismatch"

    def test_difference_at_tolerance_is_ok(self, make_item):
        result = reconcile_order_item(make_item(unit_price="10.00", quantity=1, line_total="9.99"))
        assert result.price_status == "ok"

    def test_keeps_raw_fields(self, make_item):
        item = make_item(order_id=4, product_id=8)
        result = reconcile_order_item(item)
        assert result.order_id == 4
        assert result.product_id == 8
        assert result.line_total == item.line_total

    @given(price=money, quantity=st.integers(min_value=1, max_value=500), line_total=money)
    def test_property_status_matches_tolerance(self, price, quantity, line_total):
        """Property test: ok exactly when |price x quantity - line_total| <= 0.01"""
        item = OrderItem(order_id=1, product_id=1, unit_price=price, quantity=quantity, line_total=line_total)
        result = reconcile_order_item(item)
        within = abs(price * quantity - line_total) <= Decimal("0.01")
        assert (result.price_status == "ok") == within


class TestOrderReconciliation:
    """Tests for reconcile_order"""

    def test_discount_mismatch(self, make_order):
        """Test subtotal 100 at 10% charged 91 is a mismatch of -1"""
        result = reconcile_order(make_order(subtotal="100", discount_pct="10", total="91"))

        assert result.expected_total == Decimal("90")
        assert result.discount_diff == Decimal("-1")
        assert result.discount_status == "discount_mismatch"

    def test_correct_discount(self, make_order):
        result = reconcile_order(make_order(subtotal="80.00", discount_pct="25", total="60.00"))
        assert result.discount_status == "ok"

    def test_discount_above_80_is_invalid_even_when_total_matches(self, make_order):
        result = reconcile_order(make_order(subtotal="50.00", discount_pct="85", total="7.50"))
        assert result.discount_diff == Decimal("0")
        assert result.discount_status == "invalid_discount"

    def test_invalid_discount_takes_precedence(self, make_order):
        result = reconcile_order(make_order(subtotal="50.00", discount_pct="-5", total="1.00"))
        assert result.discount_status == "invalid_discount"

    def test_boundaries_are_valid(self, make_order):
        assert reconcile_order(make_order(subtotal="100", discount_pct="80", total="20")).discount_status == "ok"
        assert reconcile_order(make_order(subtotal="100", discount_pct="0", total="100")).discount_status == "ok"

    def test_custom_settings(self, make_order):
        settings = LeakageSettings(max_valid_discount_pct="90")
        result = reconcile_order(make_order(subtotal="50.00", discount_pct="85", total="7.50"), settings)
        assert result.discount_status == "ok"

    @given(discount=discounts, subtotal=money, total=money)
    def test_property_invalid_discount_regardless_of_total(self, discount, subtotal, total):
        """Property test: discounts outside [0, 80] are always invalid_discount"""
        order = Order(order_id=1, customer_id=1, discount_pct=discount, subtotal=subtotal, total=total)
        result = reconcile_order(order)
        if discount < 0 or discount > 80:
            assert result.discount_status == "invalid_discount"
        else:
            assert result.discount_status in ("ok", "discount_mismatch")


class TestProductReconciliation:
    """Tests for reconcile_product"""

    def test_negative_margin_takes_precedence(self, make_product):
        """Test cost above price is negative_margin even when margin also mismatches"""
        result = reconcile_product(make_product(price="50", cost="60", margin="-10"))
        assert result.expected_margin == Decimal("-10")
        assert result.margin_status == "negative_margin"

        mismatched = reconcile_product(make_product(price="50", cost="60", margin="5"))
        assert mismatched.margin_status == "negative_margin"

    def test_margin_mismatch(self, make_product):
        result = reconcile_product(make_product(price="20.00", cost="12.00", margin="9.00"))
        assert result.margin_diff == Decimal("-1.00")
        assert result.margin_status == "margin_mismatch"

    def test_correct_margin(self, make_product):
        assert reconcile_product(make_product(price="20.00", cost="12.00", margin="8.00")).margin_status == "ok"

    def test_zero_margin_is_not_negative(self, make_product):
        assert reconcile_product(make_product(price="5", cost="5", margin="0")).margin_status == "ok"


class TestReconciliationEngine:
    """Tests for ReconciliationEngine"""

    def test_customers_pass_through(self, clean_store):
        engine = ReconciliationEngine()
        assert engine.customers(clean_store.customers) == clean_store.customers
        assert reconcile_customer(clean_store.customers[0]) is clean_store.customers[0]

    def test_collections_preserve_order_and_length(self, clean_store):
        engine = ReconciliationEngine()
        items = engine.order_items(clean_store.order_items)
        orders = engine.orders(clean_store.orders)
        products = engine.products(clean_store.products)

        assert [(i.order_id, i.product_id) for i in items] == [(i.order_id, i.product_id) for i in clean_store.order_items]
        assert [o.discount_status for o in orders] == ["ok", "discount_mismatch", "invalid_discount"]
        assert [p.margin_status for p in products] == ["ok", "ok", "negative_margin"]

    def test_is_deterministic(self, clean_store):
        engine = ReconciliationEngine()
        assert engine.orders(clean_store.orders) == engine.orders(clean_store.orders)

    @pytest.mark.parametrize("tolerance,expected", [("0.01", "price_mismatch"), ("1.00", "ok")])
    def test_tolerance_is_configurable(self, make_item, tolerance, expected):
        engine = ReconciliationEngine(LeakageSettings(money_tolerance=tolerance))
        (result,) = engine.order_items([make_item(unit_price="10", quantity=1, line_total="9.50")])
        assert result.price_status == expected
