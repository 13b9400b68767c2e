"""
Integrity checker orchestrating the configured checks over a raw snapshot.

Checks are independent and read-only, so they may run concurrently. The
resulting issue list is always in rule order regardless of scheduling.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any

from revenue_leakage.core.checks import (
    BaseCheck,
    DuplicateKeyCheck,
    PositiveValueCheck,
    RangeCheck,
    ReferenceCheck,
)
from revenue_leakage.core.models import RawRecordStore, ValidationIssue

from .rule_config import default_rules


class IntegrityChecker:
    """
    Builds checks from rule configurations and runs them over a RawRecordStore.

    Findings never stop the pipeline: every flagged record still proceeds to
    reconciliation.
    """

    CHECK_REGISTRY = {
        "duplicate_key": DuplicateKeyCheck,
        "reference": ReferenceCheck,
        "positive_value": PositiveValueCheck,
        "range": RangeCheck,
    }

    def __init__(self, rules: list[dict[str, Any]] | None = None, max_workers: int = 1):
        """
        Initialize the checker with rule configurations.

        Args:
            rules: List of rule configurations, each containing:
                   - rule_name: str
                   - check_type: str (duplicate_key, reference, positive_value, range)
                   - entity_kind: str (order, order_item, product, customer)
                   - parameters: Dict[str, Any] (optional)
                   - enabled: bool (default True)
                   Defaults to default_rules().
            max_workers: Threads used to run checks (1 = sequential)
        """
        self.rules = default_rules() if rules is None else rules
        self.max_workers = max_workers
        self.checks: list[BaseCheck] = []
        self._build_checks()

    def _build_checks(self) -> None:
        """Build check instances from rule configurations."""
        for rule in self.rules:
            if not rule.get("enabled", True):
                continue

            rule_name = rule["rule_name"]
            check_type = rule["check_type"]

            check_class = self.CHECK_REGISTRY.get(check_type)
            if not check_class:
                raise ValueError(f"Unknown check type: {check_type}")

            try:
                check = check_class(rule_name, rule["entity_kind"], rule.get("parameters", {}))
            except (KeyError, ValueError) as e:
                raise ValueError(f"Failed to create check for rule '{rule_name}': {e}") from e
            self.checks.append(check)

    def run(self, store: RawRecordStore) -> list[ValidationIssue]:
        """
        Run every enabled check against the snapshot.

        Args:
            store: Raw record snapshot

        Returns:
            All findings, grouped by rule in configuration order
        """
        if self.max_workers > 1 and len(self.checks) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(lambda check: check.run(store), self.checks))
        else:
            results = [check.run(store) for check in self.checks]

        return [issue for issues in results for issue in issues]

    def get_rule_summary(self) -> dict[str, Any]:
        """
        Get summary of loaded checks.

        Returns:
            Dictionary with check counts by type and entity
        """
        by_type: dict[str, int] = {}
        by_entity: dict[str, int] = {}
        for check in self.checks:
            by_type[check.check_type] = by_type.get(check.check_type, 0) + 1
            by_entity[check.entity_kind] = by_entity.get(check.entity_kind, 0) + 1
        return {
            "total_rules": len(self.checks),
            "rules_by_type": by_type,
            "rules_by_entity": by_entity,
        }
