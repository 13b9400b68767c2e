"""
ReferenceCheck - anti-join of a foreign key column against another entity's key set.
"""

from typing import Any

from revenue_leakage.core.models import RawRecordStore, ValidationIssue

from .base_check import BaseCheck


class ReferenceCheck(BaseCheck):
    """
    Reports records whose reference column does not resolve to a record of
    the target entity.

    Parameters:
    - field: Referencing column on the inspected entity
    - target: Entity kind being referenced
    - target_field: Key column on the target entity (default: same as field)
    - issue_kind: Finding category (e.g. missing_customer, orphan_item)
    """

    def __init__(self, rule_name: str, entity_kind: str, parameters: dict[str, Any] | None = None):
        super().__init__(rule_name, entity_kind, parameters)

        self.field = self.parameters.get("field")
        self.target = self.parameters.get("target")
        if not self.field or not self.target:
            raise ValueError("ReferenceCheck requires 'field' and 'target' parameters")
        self.target_field = self.parameters.get("target_field", self.field)
        self._require_fields(entity_kind, [self.field])
        self._require_fields(self.target, [self.target_field])

    def run(self, store: RawRecordStore) -> list[ValidationIssue]:
        target_keys = {getattr(record, self.target_field) for record in store.collection(self.target)}

        issues = []
        for record in store.collection(self.entity_kind):
            value = getattr(record, self.field)
            if value not in target_keys:
                issues.append(
                    self._issue(record, f"{self.field}={value} does not resolve to a {self.target}")
                )
        return issues

    @property
    def check_type(self) -> str:
        return "reference"
