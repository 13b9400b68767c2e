"""
RangeCheck - numeric column that must fall inside a range.
"""

from decimal import Decimal
from typing import Any

from revenue_leakage.core.models import RawRecordStore, ValidationIssue

from .base_check import BaseCheck


def _as_decimal(value: Any) -> Decimal | None:
    # str() first so YAML floats such as 0.1 stay exact
    return None if value is None else Decimal(str(value))


class RangeCheck(BaseCheck):
    """
    Reports records whose field lies outside the specified range. A missing
    value is outside no range and is not reported.

    Parameters:
    - field: Column to check
    - min: Minimum value (inclusive)
    - max: Maximum value (inclusive)
    - min_exclusive: Minimum value (exclusive)
    - max_exclusive: Maximum value (exclusive)
    """

    default_issue_kind = "discount_out_of_range"

    def __init__(self, rule_name: str, entity_kind: str, parameters: dict[str, Any] | None = None):
        super().__init__(rule_name, entity_kind, parameters)

        self.field = self.parameters.get("field")
        if not self.field:
            raise ValueError("RangeCheck requires a 'field' parameter")
        self._require_fields(entity_kind, [self.field])

        # Extract range boundaries
        self.min_value = _as_decimal(self.parameters.get("min"))
        self.max_value = _as_decimal(self.parameters.get("max"))
        self.min_exclusive = _as_decimal(self.parameters.get("min_exclusive"))
        self.max_exclusive = _as_decimal(self.parameters.get("max_exclusive"))

        if all(v is None for v in [self.min_value, self.max_value, self.min_exclusive, self.max_exclusive]):
            raise ValueError("RangeCheck requires at least one of: min, max, min_exclusive, max_exclusive")

    def _violation(self, value: Any) -> str | None:
        if value is None:
            return None
        if self.min_value is not None and value < self.min_value:
            return f"{self.field}={value} is less than minimum {self.min_value}"
        if self.min_exclusive is not None and value <= self.min_exclusive:
            return f"{self.field}={value} must be greater than {self.min_exclusive}"
        if self.max_value is not None and value > self.max_value:
            return f"{self.field}={value} exceeds maximum {self.max_value}"
        if self.max_exclusive is not None and value >= self.max_exclusive:
            return f"{self.field}={value} must be less than {self.max_exclusive}"
        return None

    def run(self, store: RawRecordStore) -> list[ValidationIssue]:
        issues = []
        for record in store.collection(self.entity_kind):
            message = self._violation(getattr(record, self.field))
            if message:
                issues.append(self._issue(record, message))
        return issues

    @property
    def check_type(self) -> str:
        return "range"
