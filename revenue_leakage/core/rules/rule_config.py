"""
Integrity rule configuration management.

Loads integrity check rules from YAML files and provides utilities
for building rule configurations programmatically.
"""

from pathlib import Path
from typing import Any

import yaml

ENTITY_KINDS = ("order", "order_item", "product", "customer")


class RuleConfigLoader:
    """
    Loads integrity check rules from YAML configuration files.

    Expected YAML format:
    ```yaml
    rules:
      order:
        - type: duplicate_key
        - name: orders_reference_customers
          type: reference
          params:
            field: customer_id
            target: customer
            issue_kind: missing_customer
        - type: range
          params:
            field: discount_pct
            min: 0
            max: 100
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the rule config loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Rule configuration file not found: {config_path}")

    def load_rules(self) -> list[dict[str, Any]]:
        """
        Load and parse integrity rules from YAML file.

        Returns:
            List of rule dictionaries suitable for IntegrityChecker

        Raises:
            ValueError: If YAML is invalid or missing required fields
        """
        with open(self.config_path) as f:
            config = yaml.safe_load(f)

        if not config or "rules" not in config:
            raise ValueError("Configuration file must contain 'rules' section")

        rules = []
        for entity_kind, entity_rule_list in config["rules"].items():
            if entity_kind not in ENTITY_KINDS:
                raise ValueError(f"Unknown entity kind '{entity_kind}'. Must be one of {ENTITY_KINDS}")
            if not isinstance(entity_rule_list, list):
                raise ValueError(f"Rules for entity '{entity_kind}' must be a list")

            for idx, rule_def in enumerate(entity_rule_list):
                rules.append(self._parse_rule(entity_kind, rule_def, idx))

        return rules

    def _parse_rule(self, entity_kind: str, rule_def: dict[str, Any], idx: int) -> dict[str, Any]:
        """
        Parse a single rule definition.

        Args:
            entity_kind: The entity collection this rule inspects
            rule_def: The rule definition from YAML
            idx: Index of this rule for the entity (for naming)

        Returns:
            Parsed rule dictionary

        Raises:
            ValueError: If rule definition is invalid
        """
        if not isinstance(rule_def, dict) or "type" not in rule_def:
            raise ValueError(f"Rule for entity '{entity_kind}' is missing 'type'")

        check_type = rule_def["type"]
        rule_name = rule_def.get("name", f"{entity_kind}_{check_type}_{idx}")
        parameters = rule_def.get("params", rule_def.get("parameters", {})) or {}

        return {
            "rule_name": rule_name,
            "check_type": check_type,
            "entity_kind": entity_kind,
            "parameters": parameters,
            "enabled": rule_def.get("enabled", True),
        }


class RuleConfigBuilder:
    """
    Programmatically build rule configurations (for testing or dynamic rules).
    """

    def __init__(self):
        """Initialize empty rule configuration."""
        self.rules: list[dict[str, Any]] = []

    def _add(self, rule_name: str, check_type: str, entity_kind: str, parameters: dict[str, Any]) -> "RuleConfigBuilder":
        self.rules.append({
            "rule_name": rule_name,
            "check_type": check_type,
            "entity_kind": entity_kind,
            "parameters": parameters,
            "enabled": True,
        })
        return self

    def add_duplicate_key(self, entity_kind: str, rule_name: str | None = None) -> "RuleConfigBuilder":
        """Add a duplicate key rule over the entity's declared key."""
        return self._add(rule_name or f"{entity_kind}_unique_key", "duplicate_key", entity_kind, {})

    def add_reference(
        self,
        entity_kind: str,
        field: str,
        target: str,
        issue_kind: str,
        rule_name: str | None = None,
    ) -> "RuleConfigBuilder":
        """Add a dangling reference rule."""
        return self._add(
            rule_name or f"{entity_kind}_{field}_reference",
            "reference",
            entity_kind,
            {"field": field, "target": target, "target_field": field, "issue_kind": issue_kind},
        )

    def add_positive(
        self,
        entity_kind: str,
        fields: list[str],
        issue_kind: str = "non_positive_value",
        rule_name: str | None = None,
    ) -> "RuleConfigBuilder":
        """Add a strictly positive values rule."""
        return self._add(
            rule_name or f"{entity_kind}_positive_values",
            "positive_value",
            entity_kind,
            {"fields": list(fields), "issue_kind": issue_kind},
        )

    def add_range(
        self,
        entity_kind: str,
        field: str,
        min_value: float | None = None,
        max_value: float | None = None,
        issue_kind: str = "discount_out_of_range",
        rule_name: str | None = None,
    ) -> "RuleConfigBuilder":
        """Add an inclusive range rule."""
        params: dict[str, Any] = {"field": field, "issue_kind": issue_kind}
        if min_value is not None:
            params["min"] = min_value
        if max_value is not None:
            params["max"] = max_value
        return self._add(rule_name or f"{entity_kind}_{field}_range", "range", entity_kind, params)

    def build(self) -> list[dict[str, Any]]:
        """Build and return the rule configuration."""
        return self.rules


def default_rules() -> list[dict[str, Any]]:
    """The standard integrity checks run on every snapshot."""
    return (
        RuleConfigBuilder()
        .add_duplicate_key("order", rule_name="orders_unique_key")
        .add_duplicate_key("customer", rule_name="customers_unique_key")
        .add_duplicate_key("product", rule_name="products_unique_key")
        .add_reference("order", "customer_id", "customer", "missing_customer", rule_name="orders_reference_customers")
        .add_reference("order_item", "order_id", "order", "orphan_item", rule_name="items_reference_orders")
        .add_reference("order_item", "product_id", "product", "unknown_product", rule_name="items_reference_products")
        .add_positive("order_item", ["quantity", "unit_price", "line_total"], rule_name="items_positive_values")
        .add_positive("order", ["subtotal", "total"], issue_kind="non_positive_total", rule_name="orders_positive_totals")
        .add_range("order", "discount_pct", min_value=0, max_value=100, rule_name="orders_discount_range")
        .build()
    )
