"""
DuplicateKeyCheck - finds key values declared unique that occur more than once.
"""

from collections import Counter
from typing import Any

from revenue_leakage.core.models import RawRecordStore, ValidationIssue

from .base_check import BaseCheck


class DuplicateKeyCheck(BaseCheck):
    """
    Groups an entity collection by its unique key and reports every key
    value whose group holds more than one record.

    Parameters:
    - key_fields: Columns forming the key (default: the entity's declared key)
    """

    default_issue_kind = "duplicate_key"

    def __init__(self, rule_name: str, entity_kind: str, parameters: dict[str, Any] | None = None):
        super().__init__(rule_name, entity_kind, parameters)
        key_fields = self.parameters.get("key_fields")
        self.key_fields: tuple[str, ...] | None = tuple(key_fields) if key_fields else None
        if self.key_fields:
            self._require_fields(entity_kind, self.key_fields)

    def run(self, store: RawRecordStore) -> list[ValidationIssue]:
        records = store.collection(self.entity_kind)
        if not records:
            return []

        key_fields = self.key_fields or records[0].key_fields
        counts = Counter(tuple(getattr(record, f) for f in key_fields) for record in records)

        issues = []
        for key_value, count in counts.items():
            if count <= 1:
                continue
            keys = dict(zip(key_fields, key_value))
            issues.append(
                ValidationIssue(
                    entity_kind=self.entity_kind,
                    keys=keys,
                    issue_kind=self.issue_kind,
                    rule_name=self.rule_name,
                    detail=f"{', '.join(f'{k}={v}' for k, v in keys.items())} occurs {count} times",
                )
            )
        return issues

    @property
    def check_type(self) -> str:
        return "duplicate_key"
