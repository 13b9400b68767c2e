"""
Pytest configuration and fixtures for revenue leakage tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import os
import shutil
from typing import Generator

import pytest

from revenue_leakage.core.models import Customer, Order, OrderItem, Product, RawRecordStore


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests across pipeline stages"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that run the command-line driver"
    )
    config.addinivalue_line(
        "markers", "spark: Tests that need a local Spark session (Java runtime)"
    )


# =======================
# RECORD FACTORIES
# =======================

@pytest.fixture
def make_order():
    """Build an Order with sensible defaults; keyword arguments override."""
    def _make(**overrides) -> Order:
        values = {
            "order_id": 1,
            "customer_id": 1,
            "order_time": "2024-03-01 10:00:00",
            "payment_method": "card",
            "discount_pct": "0",
            "subtotal": "100.00",
            "total": "100.00",
            "country": "US",
            "device": "mobile",
            "source": "organic",
        }
        values.update(overrides)
        return Order(**values)
    return _make


@pytest.fixture
def make_item():
    """Build an OrderItem with sensible defaults; keyword arguments override."""
    def _make(**overrides) -> OrderItem:
        values = {
            "order_id": 1,
            "product_id": 1,
            "unit_price": "10.00",
            "quantity": 1,
            "line_total": "10.00",
        }
        values.update(overrides)
        return OrderItem(**values)
    return _make


@pytest.fixture
def make_product():
    """Build a Product with sensible defaults; keyword arguments override."""
    def _make(**overrides) -> Product:
        values = {
            "product_id": 1,
            "category": "Electronics",
            "name": "Headphones",
            "price": "10.00",
            "cost": "6.00",
            "margin": "4.00",
        }
        values.update(overrides)
        return Product(**values)
    return _make


@pytest.fixture
def make_customer():
    """Build a Customer with sensible defaults; keyword arguments override."""
    def _make(**overrides) -> Customer:
        values = {
            "customer_id": 1,
            "name": "Ada Lovelace",
            "email": "ada@example.com",
            "country": "US",
            "age": 36,
            "signup_date": "2023-01-15",
            "marketing_opt_in": True,
        }
        values.update(overrides)
        return Customer(**values)
    return _make


@pytest.fixture
def clean_store(make_order, make_item, make_product, make_customer) -> RawRecordStore:
    """
    Referentially intact snapshot with a few reconciliation anomalies.

    - Item (10, 1) is under-billed by 5.00 (price mismatch)
    - Order 11 has a 10% discount but was charged 91 instead of 90
    - Order 12 has an 85% discount (invalid)
    - Product 3 sells below cost
    """
    customers = (
        make_customer(customer_id=1, country="US"),
        make_customer(customer_id=2, name="Alan Turing", country="US"),
        make_customer(customer_id=3, name="Grace Hopper", country="DE"),
    )
    products = (
        make_product(product_id=1, name="Headphones", price="10.00", cost="6.00", margin="4.00"),
        make_product(product_id=2, name="Cable", category="Accessories", price="5.00", cost="1.00", margin="4.00"),
        make_product(product_id=3, name="Speaker", price="50.00", cost="60.00", margin="-10.00"),
    )
    orders = (
        make_order(order_id=10, customer_id=1, subtotal="35.00", total="35.00", source="organic"),
        make_order(order_id=11, customer_id=2, discount_pct="10", subtotal="100.00", total="91.00", source="ads"),
        make_order(order_id=12, customer_id=3, discount_pct="85", subtotal="50.00", total="7.50",
                   country="DE", source="ads"),
    )
    items = (
        make_item(order_id=10, product_id=1, unit_price="10.00", quantity=3, line_total="25.00"),
        make_item(order_id=10, product_id=2, unit_price="5.00", quantity=2, line_total="10.00"),
        make_item(order_id=11, product_id=2, unit_price="5.00", quantity=20, line_total="100.00"),
        make_item(order_id=12, product_id=3, unit_price="50.00", quantity=1, line_total="50.00"),
    )
    return RawRecordStore(orders=orders, order_items=items, products=products, customers=customers)


# =======================
# SPARK FIXTURES
# =======================

@pytest.fixture(scope="session")
def spark_session() -> Generator:
    """
    Create a Spark session for testing with local mode

    Skips when no Java runtime is available.

    Yields:
        SparkSession configured for local testing
    """
    if not (shutil.which("java") or os.getenv("JAVA_HOME")):
        pytest.skip("Java runtime not available for Spark")

    from pyspark.sql import SparkSession

    spark = (
        SparkSession.builder
        .appName("revenue-leakage-test")
        .master("local[2]")
        .config("spark.sql.shuffle.partitions", "2")
        .config("spark.ui.enabled", "false")
        .config("spark.driver.memory", "1g")
        .getOrCreate()
    )
    spark.sparkContext.setLogLevel("WARN")

    yield spark

    spark.stop()


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> str:
    """
    Get path to test data fixtures directory

    Returns:
        Path to tests/fixtures directory
    """
    return os.path.join(os.path.dirname(__file__), "fixtures")


@pytest.fixture(scope="session")
def export_paths(test_data_dir) -> dict[str, str]:
    """entity_kind -> path of the sample CSV export."""
    return {
        "order": os.path.join(test_data_dir, "orders.csv"),
        "order_item": os.path.join(test_data_dir, "order_items.csv"),
        "product": os.path.join(test_data_dir, "products.csv"),
        "customer": os.path.join(test_data_dir, "customers.csv"),
    }


