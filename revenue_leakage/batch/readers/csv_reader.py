"""
CSV reader using Spark for batch loading of entity exports.
"""

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.types import StructType


class CSVReader:
    """
    Reads delimited files with Spark using an explicit schema.
    """

    def __init__(self, spark: SparkSession):
        """
        Initialize CSV reader.

        Args:
            spark: Active Spark session
        """
        self.spark = spark

    def read(
        self,
        file_path: str,
        schema: StructType,
        header: bool = True,
        delimiter: str = ",",
        quote: str = '"',
    ) -> DataFrame:
        """
        Read CSV file into Spark DataFrame.

        Args:
            file_path: Path to CSV file
            schema: Explicit schema, columns in file order
            header: Whether the first line is a header to skip
            delimiter: Field delimiter
            quote: Character enclosing quoted fields

        Returns:
            Spark DataFrame
        """
        return self.spark.read \
            .schema(schema) \
            .option("header", str(header).lower()) \
            .option("delimiter", delimiter) \
            .option("quote", quote) \
            .option("escape", quote) \
            .option("mode", "PERMISSIVE") \
            .csv(file_path)
