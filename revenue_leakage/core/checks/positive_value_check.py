"""
PositiveValueCheck - numeric columns that must be strictly positive.
"""

from typing import Any

from revenue_leakage.core.models import RawRecordStore, ValidationIssue

from .base_check import BaseCheck


class PositiveValueCheck(BaseCheck):
    """
    Reports records where any of the listed columns is zero or negative.
    One issue per record, naming every offending column. Missing (None)
    values are not compared; required columns are enforced at parse time.

    Parameters:
    - fields: Columns that must be > 0
    - issue_kind: Finding category (non_positive_value or non_positive_total)
    """

    default_issue_kind = "non_positive_value"

    def __init__(self, rule_name: str, entity_kind: str, parameters: dict[str, Any] | None = None):
        super().__init__(rule_name, entity_kind, parameters)

        self.fields = list(self.parameters.get("fields") or [])
        if not self.fields:
            raise ValueError("PositiveValueCheck requires a non-empty 'fields' parameter")
        self._require_fields(entity_kind, self.fields)

    def run(self, store: RawRecordStore) -> list[ValidationIssue]:
        issues = []
        for record in store.collection(self.entity_kind):
            values = {name: getattr(record, name) for name in self.fields}
            offending = [f"{name}={value}" for name, value in values.items() if value is not None and value <= 0]
            if offending:
                issues.append(self._issue(record, "non-positive " + ", ".join(offending)))
        return issues

    @property
    def check_type(self) -> str:
        return "positive_value"
