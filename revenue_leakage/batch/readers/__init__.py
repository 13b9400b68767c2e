"""
Batch data source readers.
"""

from .csv_reader import CSVReader
from .record_source import RecordSource, create_spark_session

__all__ = [
    "CSVReader",
    "RecordSource",
    "create_spark_session",
]
