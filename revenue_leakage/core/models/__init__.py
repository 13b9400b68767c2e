"""
Core data models for the revenue leakage pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .aggregates import (
    ChannelDiscountAbuse,
    CustomerLeakage,
    CustomerLeakageRanked,
    CustomerRiskProfile,
    LeakageSummary,
    MarginPerformance,
    ProductLeakage,
)
from .leakage_report import LeakageReport
from .leakage_settings import LeakageSettings
from .raw_records import (
    ENTITY_MODELS,
    Customer,
    Order,
    OrderItem,
    Product,
    RawEntity,
    RawRecordStore,
    RecordParseError,
    parse_record,
)
from .validated_records import ValidatedOrder, ValidatedOrderItem, ValidatedProduct
from .validation_issue import ValidationIssue

__all__ = [
    "Order",
    "OrderItem",
    "Product",
    "Customer",
    "RawEntity",
    "ENTITY_MODELS",
    "RawRecordStore",
    "RecordParseError",
    "parse_record",
    "ValidatedOrder",
    "ValidatedOrderItem",
    "ValidatedProduct",
    "ValidationIssue",
    "LeakageSummary",
    "ProductLeakage",
    "ChannelDiscountAbuse",
    "CustomerRiskProfile",
    "CustomerLeakage",
    "CustomerLeakageRanked",
    "MarginPerformance",
    "LeakageReport",
    "LeakageSettings",
]
