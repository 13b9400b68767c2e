"""
Integrity check implementations.

Provides checks for duplicate keys, dangling references, non-positive values
and out-of-range values over the raw record store.
"""

from .base_check import BaseCheck
from .duplicate_key_check import DuplicateKeyCheck
from .positive_value_check import PositiveValueCheck
from .range_check import RangeCheck
from .reference_check import ReferenceCheck

__all__ = [
    "BaseCheck",
    "DuplicateKeyCheck",
    "ReferenceCheck",
    "PositiveValueCheck",
    "RangeCheck",
]
