"""
Revenue leakage analysis: integrity checks, reconciliation, aggregation and ranking.
"""

__version__ = "0.1.0"
