"""
Batch loading, orchestration and report writing.
"""

from .pipeline import LeakagePipeline
from .readers import CSVReader, RecordSource
from .writers import ReportWriter

__all__ = [
    "LeakagePipeline",
    "CSVReader",
    "RecordSource",
    "ReportWriter",
]
