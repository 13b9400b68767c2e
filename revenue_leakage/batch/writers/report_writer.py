"""
Report writer: the result sink of a pipeline run.

Serialises a LeakageReport as one JSON document. Money and percentage
values are rounded to two decimals here, at presentation time, never
inside the computation.
"""

import json
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any

from revenue_leakage.core.models import LeakageReport
from revenue_leakage.observability.logger import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")

VALIDATED_SECTIONS = ("order_items", "orders", "products", "customers")


def present(value: Any) -> Any:
    """Round Decimals to cents and make dates JSON friendly, recursively."""
    if isinstance(value, Decimal):
        rounded = value.quantize(CENT, rounding=ROUND_HALF_UP)
        # Values within half a cent of zero print unsigned
        return str(abs(rounded) if rounded == 0 else rounded)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: present(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [present(v) for v in value]
    return value


class ReportWriter:
    """
    Writes LeakageReports to JSON files.
    """

    def __init__(self, include_validated: bool = False, indent: int | None = 2):
        """
        Initialize report writer.

        Args:
            include_validated: Also write the validated record collections
            indent: JSON indentation (None for compact output)
        """
        self.include_validated = include_validated
        self.indent = indent

    def to_document(self, report: LeakageReport) -> dict[str, Any]:
        exclude = None if self.include_validated else set(VALIDATED_SECTIONS)
        document = present(report.model_dump(exclude=exclude))
        document["issue_counts"] = report.issue_counts()
        document["status_counts"] = report.status_counts()
        return document

    def dumps(self, report: LeakageReport) -> str:
        return json.dumps(self.to_document(report), indent=self.indent)

    def write(self, report: LeakageReport, output_path: str | Path) -> Path:
        """
        Write the report to a file, creating parent directories.

        Args:
            report: Finished report
            output_path: Destination file

        Returns:
            Path written
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.dumps(report))
        logger.info(f"Wrote leakage report to {path}")
        return path
