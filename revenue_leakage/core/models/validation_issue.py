"""
ValidationIssue model representing one data-quality finding of the integrity checks.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

EntityKind = Literal["order", "order_item", "product", "customer"]
IssueKind = Literal[
    "duplicate_key",
    "missing_customer",
    "orphan_item",
    "unknown_product",
    "non_positive_value",
    "non_positive_total",
    "discount_out_of_range",
]


class ValidationIssue(BaseModel):
    """
    A data-quality finding. Findings are data, not failures: they never
    stop the pipeline and are never mutated once produced.

    Attributes:
        entity_kind: Which entity collection the offending record belongs to
        keys: Key column(s) identifying the offending record
        issue_kind: Category of the finding
        rule_name: Name of the rule that produced the finding
        detail: Human-readable description
    """

    entity_kind: EntityKind
    keys: dict[str, Any] = Field(default_factory=dict)
    issue_kind: IssueKind
    rule_name: str
    detail: str = ""

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "entity_kind": "order_item",
                "keys": {"order_id": 1001, "product_id": 99},
                "issue_kind": "unknown_product",
                "rule_name": "items_reference_products",
                "detail": "product_id=99 does not resolve to a product"
            }
        }
