"""
Batch result sinks.
"""

from .report_writer import ReportWriter, present

__all__ = [
    "ReportWriter",
    "present",
]
