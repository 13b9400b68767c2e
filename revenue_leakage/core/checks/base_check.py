"""
Base check interface for all integrity checks.

All checks inherit from BaseCheck and implement the run() method.
"""

from abc import ABC, abstractmethod
from typing import Any

from revenue_leakage.core.models import ENTITY_MODELS, RawEntity, RawRecordStore, ValidationIssue


class BaseCheck(ABC):
    """
    Abstract base class for integrity checks.

    A check reads one entity collection of a RawRecordStore (and possibly a
    second one for reference checks) and reports findings. Checks never
    mutate the store and never raise on bad data.
    """

    default_issue_kind: str = ""

    def __init__(self, rule_name: str, entity_kind: str, parameters: dict[str, Any] | None = None):
        """
        Initialize check.

        Args:
            rule_name: Name reported on every issue produced by this check
            entity_kind: Entity collection the check inspects
            parameters: Check-specific parameters
        """
        self.rule_name = rule_name
        self.entity_kind = entity_kind
        self.parameters = parameters or {}
        self.issue_kind = self.parameters.get("issue_kind", self.default_issue_kind)
        if not self.issue_kind:
            raise ValueError(f"{self.__class__.__name__} requires an 'issue_kind' parameter")

    @abstractmethod
    def run(self, store: RawRecordStore) -> list[ValidationIssue]:
        """
        Inspect the store and report findings.

        Args:
            store: Raw record snapshot

        Returns:
            Issues in record order
        """
        pass

    @property
    @abstractmethod
    def check_type(self) -> str:
        """Return the check type identifier."""
        pass

    def _require_fields(self, entity_kind: str, names) -> None:
        """Fail at build time when a configured column does not exist on the entity."""
        model = ENTITY_MODELS.get(entity_kind)
        if model is None:
            raise ValueError(f"Unknown entity kind: {entity_kind}")
        unknown = [name for name in names if name not in model.model_fields]
        if unknown:
            raise ValueError(f"Unknown field(s) for {entity_kind}: {', '.join(unknown)}")

    def _issue(self, record: RawEntity, detail: str) -> ValidationIssue:
        return ValidationIssue(
            entity_kind=self.entity_kind,
            keys=record.key,
            issue_kind=self.issue_kind,
            rule_name=self.rule_name,
            detail=detail,
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(rule={self.rule_name}, "
            f"entity={self.entity_kind}, params={self.parameters})"
        )
