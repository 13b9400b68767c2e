"""
Integrity rule engine and configuration management.
"""

from .rule_config import RuleConfigBuilder, RuleConfigLoader, default_rules
from .rule_engine import IntegrityChecker

__all__ = [
    "IntegrityChecker",
    "RuleConfigLoader",
    "RuleConfigBuilder",
    "default_rules",
]
