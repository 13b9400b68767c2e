"""
File layouts of the raw entity exports.
"""

from .registry import CUSTOMERS, ORDER_ITEMS, ORDERS, PRODUCTS, EntitySchema, SchemaRegistry

__all__ = [
    "EntitySchema",
    "SchemaRegistry",
    "ORDERS",
    "ORDER_ITEMS",
    "PRODUCTS",
    "CUSTOMERS",
]
