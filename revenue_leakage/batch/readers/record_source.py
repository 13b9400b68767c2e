"""
Record source: loads the four entity exports into a RawRecordStore.
"""

from pathlib import Path
from typing import Mapping

from pyspark.sql import SparkSession

from revenue_leakage.core.models import RawRecordStore, parse_record
from revenue_leakage.core.schema import SchemaRegistry
from revenue_leakage.observability.logger import get_logger

from .csv_reader import CSVReader

logger = get_logger(__name__)


def create_spark_session(app_name: str = "RevenueLeakage") -> SparkSession:
    """
    Create a local Spark session for loading exports.

    Args:
        app_name: Application name

    Returns:
        SparkSession
    """
    return SparkSession.builder \
        .appName(app_name) \
        .master("local[*]") \
        .config("spark.ui.enabled", "false") \
        .getOrCreate()


class RecordSource:
    """
    Reads the orders, order items, products and customers exports and
    parses every row into its raw entity model.

    Structurally invalid rows are not skipped: the first one aborts loading
    with a RecordParseError naming entity kind, key and field.
    """

    def __init__(self, spark: SparkSession, registry: SchemaRegistry | None = None):
        self.spark = spark
        self.registry = registry or SchemaRegistry()
        self.csv_reader = CSVReader(spark)

    def read_rows(self, entity_kind: str, file_path: str | Path, **read_options) -> list[dict]:
        """
        Read one export as plain dictionaries keyed by model field name.

        Args:
            entity_kind: order, order_item, product or customer
            file_path: Path to the export
            **read_options: Passed to CSVReader.read

        Returns:
            Rows in file order
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Export for {entity_kind} not found: {file_path}")

        schema = self.registry.get(entity_kind)
        df = self.csv_reader.read(str(path), schema.struct_type(), **read_options)
        rows = [schema.to_model_fields(row.asDict()) for row in df.collect()]
        logger.info(f"Read {len(rows)} {entity_kind} rows from {path}")
        return rows

    def load(self, paths: Mapping[str, str | Path], **read_options) -> RawRecordStore:
        """
        Load all exports into a snapshot.

        Args:
            paths: entity_kind -> export path; kinds left out load as empty collections
            **read_options: Passed to CSVReader.read

        Returns:
            RawRecordStore

        Raises:
            FileNotFoundError: If a listed export does not exist
            RecordParseError: If a row is structurally invalid
        """
        unknown = set(paths) - set(self.registry.entity_kinds)
        if unknown:
            raise ValueError(f"Unknown entity kinds: {sorted(unknown)}")

        collections = {}
        for entity_kind, file_path in paths.items():
            model = self.registry.get(entity_kind).model
            rows = self.read_rows(entity_kind, file_path, **read_options)
            collections[entity_kind] = tuple(parse_record(model, row) for row in rows)

        return RawRecordStore(
            orders=collections.get("order", ()),
            order_items=collections.get("order_item", ()),
            products=collections.get("product", ()),
            customers=collections.get("customer", ()),
        )
