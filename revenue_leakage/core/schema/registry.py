"""
Schemas of the delimited files the record source reads.

Every column is read as a string so that the core models, not Spark, decide
whether a value is parseable. Column names follow the export layout
(money columns carry a _usd suffix) and are mapped onto model field names.
"""

from dataclasses import dataclass, field

from pyspark.sql.types import StringType, StructField, StructType

from revenue_leakage.core.models import Customer, Order, OrderItem, Product, RawEntity


@dataclass(frozen=True)
class EntitySchema:
    """
    File layout of one entity.

    Attributes:
        model: Raw entity class the rows are parsed into
        columns: Column names in file order
        renames: File column -> model field, for columns whose names differ
    """

    model: type[RawEntity]
    columns: tuple[str, ...]
    renames: dict[str, str] = field(default_factory=dict)

    @property
    def entity_kind(self) -> str:
        return self.model.entity_kind

    def struct_type(self) -> StructType:
        """Spark schema with every column as a nullable string."""
        return StructType([StructField(name, StringType(), True) for name in self.columns])

    def to_model_fields(self, row: dict) -> dict:
        """Rename file columns to model field names."""
        return {self.renames.get(name, name): value for name, value in row.items()}


ORDERS = EntitySchema(
    model=Order,
    columns=(
        "order_id", "customer_id", "order_time", "payment_method", "discount_pct",
        "subtotal_usd", "total_usd", "country", "device", "source",
    ),
    renames={"subtotal_usd": "subtotal", "total_usd": "total"},
)

ORDER_ITEMS = EntitySchema(
    model=OrderItem,
    columns=("order_id", "product_id", "unit_price_usd", "quantity", "line_total_usd"),
    renames={"unit_price_usd": "unit_price", "line_total_usd": "line_total"},
)

PRODUCTS = EntitySchema(
    model=Product,
    columns=("product_id", "category", "name", "price_usd", "cost_usd", "margin_usd"),
    renames={"price_usd": "price", "cost_usd": "cost", "margin_usd": "margin"},
)

CUSTOMERS = EntitySchema(
    model=Customer,
    columns=("customer_id", "name", "email", "country", "age", "signup_date", "marketing_opt_in"),
)


class SchemaRegistry:
    """Looks up the file layout for an entity kind."""

    def __init__(self, schemas: tuple[EntitySchema, ...] = (ORDERS, ORDER_ITEMS, PRODUCTS, CUSTOMERS)):
        self._schemas = {schema.entity_kind: schema for schema in schemas}

    def get(self, entity_kind: str) -> EntitySchema:
        if entity_kind not in self._schemas:
            raise ValueError(f"No schema registered for entity kind: {entity_kind}")
        return self._schemas[entity_kind]

    @property
    def entity_kinds(self) -> list[str]:
        return list(self._schemas)
