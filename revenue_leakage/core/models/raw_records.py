"""
Raw entity models as ingested from the record source (the "bronze" layer).

Raw records are immutable once loaded. No business validation happens here:
a record only has to be structurally parseable (keys and numeric fields
present and well-formed). Everything else is the Integrity Checker's concern.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, ClassVar, Iterable

from pydantic import BaseModel, ValidationError, model_validator


class RecordParseError(ValueError):
    """Raised when a raw row is structurally invalid (missing or unparseable field)."""

    def __init__(self, entity_kind: str, key: Any, field_name: str, message: str):
        self.entity_kind = entity_kind
        self.key = key
        self.field_name = field_name
        self.message = message
        super().__init__(f"[{entity_kind}] key={key} {field_name}: {message}")


class RawEntity(BaseModel):
    """
    Base class for raw entities.

    Empty strings coming from delimited files are treated as missing values,
    so optional descriptive columns may be blank while required columns fail.
    """

    entity_kind: ClassVar[str] = ""
    key_fields: ClassVar[tuple[str, ...]] = ()

    class Config:
        frozen = True

    @model_validator(mode="before")
    @classmethod
    def blank_to_none(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                k: (None if isinstance(v, str) and v.strip() == "" else v)
                for k, v in data.items()
            }
        return data

    @property
    def key(self) -> dict[str, Any]:
        """Key column(s) of this record."""
        return {name: getattr(self, name) for name in self.key_fields}


class Order(RawEntity):
    """
    Order-level billing summary.

    Attributes:
        order_id: Order identifier (declared unique)
        customer_id: Customer placing the order
        order_time: When the order was placed
        payment_method: Payment method label
        discount_pct: Discount percentage applied to the subtotal
        subtotal: Amount before discount
        total: Amount actually charged
        country: Shipping/billing country
        device: Device used to place the order
        source: Acquisition channel
    """

    entity_kind: ClassVar[str] = "order"
    key_fields: ClassVar[tuple[str, ...]] = ("order_id",)

    order_id: int
    customer_id: int
    order_time: datetime | None = None
    payment_method: str | None = None
    discount_pct: Decimal
    subtotal: Decimal
    total: Decimal
    country: str | None = None
    device: str | None = None
    source: str | None = None


class OrderItem(RawEntity):
    """
    Product-level line item of an order.

    (order_id, product_id) identifies the line but is not required to be unique.
    """

    entity_kind: ClassVar[str] = "order_item"
    key_fields: ClassVar[tuple[str, ...]] = ("order_id", "product_id")

    order_id: int
    product_id: int
    unit_price: Decimal
    quantity: int
    line_total: Decimal


class Product(RawEntity):
    """
    Catalog product with pricing and cost.

    The stored margin is validated independently against price - cost.
    """

    entity_kind: ClassVar[str] = "product"
    key_fields: ClassVar[tuple[str, ...]] = ("product_id",)

    product_id: int
    category: str | None = None
    name: str | None = None
    price: Decimal
    cost: Decimal
    margin: Decimal


class Customer(RawEntity):
    """Customer master data."""

    entity_kind: ClassVar[str] = "customer"
    key_fields: ClassVar[tuple[str, ...]] = ("customer_id",)

    customer_id: int
    name: str | None = None
    email: str | None = None
    country: str | None = None
    age: int | None = None
    signup_date: date | None = None
    marketing_opt_in: bool | None = None


ENTITY_MODELS: dict[str, type[RawEntity]] = {
    Order.entity_kind: Order,
    OrderItem.entity_kind: OrderItem,
    Product.entity_kind: Product,
    Customer.entity_kind: Customer,
}


def parse_record(model: type[RawEntity], row: dict[str, Any]) -> RawEntity:
    """
    Build a raw entity from a loosely typed row.

    Args:
        model: Raw entity class to build
        row: Column name -> value mapping (typically strings from a CSV)

    Returns:
        Parsed, frozen entity

    Raises:
        RecordParseError: On the first missing or unparseable field
    """
    try:
        return model.model_validate(row)
    except ValidationError as e:
        first = e.errors()[0]
        field_name = ".".join(str(part) for part in first["loc"]) or "<record>"
        key = {name: row.get(name) for name in model.key_fields}
        raise RecordParseError(
            entity_kind=model.entity_kind,
            key=key,
            field_name=field_name,
            message=first["msg"],
        ) from e


class RawRecordStore(BaseModel):
    """
    Read-only snapshot of the four raw entity collections for one run.

    Attributes:
        orders: Raw orders
        order_items: Raw order line items
        products: Raw product catalog
        customers: Raw customers
    """

    orders: tuple[Order, ...] = ()
    order_items: tuple[OrderItem, ...] = ()
    products: tuple[Product, ...] = ()
    customers: tuple[Customer, ...] = ()

    class Config:
        frozen = True

    @classmethod
    def from_rows(
        cls,
        orders: Iterable[dict[str, Any]] = (),
        order_items: Iterable[dict[str, Any]] = (),
        products: Iterable[dict[str, Any]] = (),
        customers: Iterable[dict[str, Any]] = (),
    ) -> "RawRecordStore":
        """
        Build a store from plain dictionaries.

        Raises:
            RecordParseError: If any row is structurally invalid
        """
        return cls(
            orders=tuple(parse_record(Order, row) for row in orders),
            order_items=tuple(parse_record(OrderItem, row) for row in order_items),
            products=tuple(parse_record(Product, row) for row in products),
            customers=tuple(parse_record(Customer, row) for row in customers),
        )

    def collection(self, entity_kind: str) -> tuple[RawEntity, ...]:
        """Return the collection holding entities of the given kind."""
        collections = {
            Order.entity_kind: self.orders,
            OrderItem.entity_kind: self.order_items,
            Product.entity_kind: self.products,
            Customer.entity_kind: self.customers,
        }
        if entity_kind not in collections:
            raise ValueError(f"Unknown entity kind: {entity_kind}")
        return collections[entity_kind]

    def counts(self) -> dict[str, int]:
        return {
            Order.entity_kind: len(self.orders),
            OrderItem.entity_kind: len(self.order_items),
            Product.entity_kind: len(self.products),
            Customer.entity_kind: len(self.customers),
        }
