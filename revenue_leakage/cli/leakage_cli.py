"""
Command-line driver for revenue leakage analysis.

Usage:
    python -m revenue_leakage.cli.leakage_cli run --orders <csv> --order-items <csv> \
        --products <csv> --customers <csv> [options]
"""

import argparse
import sys
from pathlib import Path

from revenue_leakage.batch.pipeline import LeakagePipeline
from revenue_leakage.batch.readers import RecordSource, create_spark_session
from revenue_leakage.batch.writers import ReportWriter, present
from revenue_leakage.core.aggregation import views
from revenue_leakage.core.models import LeakageReport, RecordParseError
from revenue_leakage.observability.logger import get_logger
from revenue_leakage.observability.metrics import generate_metrics
from revenue_leakage.utils.validation import (
    ValidationError,
    validate_analysis_date,
    validate_file_path,
    validate_workers,
)

logger = get_logger("revenue_leakage.cli")

EXPORT_ARGUMENTS = {
    "order": "orders",
    "order_item": "order_items",
    "product": "products",
    "customer": "customers",
}


def build_report(args) -> LeakageReport:
    """
    Validate arguments, load the exports and run the pipeline.

    Args:
        args: Parsed command-line arguments

    Returns:
        LeakageReport
    """
    paths = {
        entity_kind: validate_file_path(getattr(args, attr), field_name=f"--{attr.replace('_', '-')}", must_exist=True)
        for entity_kind, attr in EXPORT_ARGUMENTS.items()
    }
    workers = validate_workers(args.workers)
    analysis_date = validate_analysis_date(args.analysis_date)

    pipeline = LeakagePipeline.from_config(
        rules_path=args.rules,
        settings_path=args.settings,
        max_workers=workers,
    )

    logger.info("Creating Spark session...")
    spark = create_spark_session("RevenueLeakage")
    try:
        store = RecordSource(spark).load(paths)
    finally:
        spark.stop()

    return pipeline.run(store, analysis_date=analysis_date)


def log_summary(report: LeakageReport) -> None:
    summary = present(report.summary.model_dump())
    logger.info("=" * 60)
    logger.info("LEAKAGE ANALYSIS COMPLETE")
    logger.info("=" * 60)
    logger.info(f"Expected revenue: {summary['total_expected']}")
    logger.info(f"Realized revenue: {summary['total_realized']}")
    logger.info(f"Revenue leakage: {summary['diff']} ({summary['leakage_pct']}%)")
    logger.info(f"Integrity issues: {len(report.issues)} {report.issue_counts()}")
    logger.info(f"Reconciliation: {report.status_counts()}")
    flagged = [row.source for row in report.channel_discount_abuse if row.abuse_flag == "Yes"]
    logger.info(f"Channels flagged for discount abuse: {flagged}")
    logger.info("=" * 60)


def run_command(args) -> None:
    """Run the full analysis and write the report."""
    try:
        report = build_report(args)
    except (ValidationError, RecordParseError, FileNotFoundError) as e:
        logger.error(f"Invalid input: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error during leakage analysis: {e}", exc_info=True)
        sys.exit(1)

    log_summary(report)

    writer = ReportWriter(include_validated=args.include_validated)
    if args.output:
        writer.write(report, args.output)
    else:
        print(writer.dumps(report))

    if args.metrics_file:
        Path(args.metrics_file).write_bytes(generate_metrics())


def high_risk_command(args) -> None:
    """Print High-risk customers, largest leakage first."""
    try:
        report = build_report(args)
    except (ValidationError, RecordParseError, FileNotFoundError) as e:
        logger.error(f"Invalid input: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error during leakage analysis: {e}", exc_info=True)
        sys.exit(1)

    if args.relative:
        rows = views.high_percentile_customers(report)
        print(f"{'customer_id':>12} {'country':<16} {'rank':>5} {'percentile':>10} {'leakage':>12}")
        for row in rows:
            r = present(row.model_dump())
            print(f"{row.customer_id:>12} {str(row.country):<16} {row.leakage_rank:>5} "
                  f"{r['leakage_percentile']:>10} {r['total_leakage']:>12}")
    else:
        rows = views.high_risk_customers(report)
        print(f"{'customer_id':>12} {'country':<16} {'orders':>6} {'revenue':>12} {'leakage':>12}")
        for row in rows:
            r = present(row.model_dump())
            print(f"{row.customer_id:>12} {str(row.country):<16} {row.order_count:>6} "
                  f"{r['total_revenue']:>12} {r['total_leakage']:>12}")


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--orders", required=True, help="Path to orders export (CSV)")
    parser.add_argument("--order-items", required=True, help="Path to order items export (CSV)")
    parser.add_argument("--products", required=True, help="Path to products export (CSV)")
    parser.add_argument("--customers", required=True, help="Path to customers export (CSV)")
    parser.add_argument(
        "--rules",
        default="config/integrity_rules.yaml",
        help="Path to integrity rules YAML file"
    )
    parser.add_argument(
        "--settings",
        default="config/leakage_settings.yaml",
        help="Path to leakage thresholds YAML file"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Threads used inside each pipeline stage (default: 1)"
    )
    parser.add_argument(
        "--analysis-date",
        default=None,
        help="Date stamped on the summary, YYYY-MM-DD (default: today)"
    )


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Revenue leakage analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Full report to a file
  python -m revenue_leakage.cli.leakage_cli run --orders data/orders.csv \\
      --order-items data/order_items.csv --products data/products.csv \\
      --customers data/customers.csv --output reports/leakage.json

  # High-risk customers only
  python -m revenue_leakage.cli.leakage_cli high-risk --orders data/orders.csv \\
      --order-items data/order_items.csv --products data/products.csv \\
      --customers data/customers.csv
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run the analysis and write the report")
    add_common_arguments(run_parser)
    run_parser.add_argument("--output", default=None, help="Report path (default: stdout)")
    run_parser.add_argument(
        "--include-validated",
        action="store_true",
        help="Include validated record collections in the report"
    )
    run_parser.add_argument("--metrics-file", default=None, help="Write Prometheus metrics to this file")

    risk_parser = subparsers.add_parser("high-risk", help="List High-risk customers")
    add_common_arguments(risk_parser)
    risk_parser.add_argument(
        "--relative",
        action="store_true",
        help="Use the country-relative percentile tier instead of absolute thresholds"
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "run":
        run_command(args)
    elif args.command == "high-risk":
        high_risk_command(args)


if __name__ == "__main__":
    main()
