"""
Revenue leakage pipeline orchestration.

Coordinates the flow: integrity checks -> reconciliation -> aggregation -> ranking

Each stage is fully materialised before the next one starts. Within the
integrity, reconciliation and aggregation stages the per-entity tasks are
independent and may run on a thread pool; ranking strictly follows the
per-customer aggregate.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from pathlib import Path
from typing import Any, Callable, Optional

from revenue_leakage.core.aggregation import (
    channel_discount_abuse,
    customer_leakage,
    customer_risk_profile,
    margin_performance,
    product_leakage,
    rank_customer_leakage,
    summarize_leakage,
)
from revenue_leakage.core.models import LeakageReport, LeakageSettings, RawRecordStore
from revenue_leakage.core.reconciliation import ReconciliationEngine
from revenue_leakage.core.rules import IntegrityChecker, RuleConfigLoader
from revenue_leakage.observability import metrics
from revenue_leakage.observability.logger import get_logger, log_operation

logger = get_logger(__name__)


class LeakagePipeline:
    """
    Computes a LeakageReport from a raw record snapshot.

    The pipeline holds only configuration; run() is a pure function of the
    snapshot (and the analysis date), so repeated runs on the same input
    produce equal reports.
    """

    def __init__(
        self,
        settings: Optional[LeakageSettings] = None,
        rules: Optional[list[dict[str, Any]]] = None,
        max_workers: int = 1,
    ):
        """
        Initialize pipeline.

        Args:
            settings: Business thresholds (defaults to LeakageSettings())
            rules: Integrity rule configurations (defaults to the standard checks)
            max_workers: Threads used inside each stage (1 = sequential)
        """
        self.settings = settings or LeakageSettings()
        self.max_workers = max_workers
        self.integrity_checker = IntegrityChecker(rules, max_workers=max_workers)
        self.reconciliation = ReconciliationEngine(self.settings)

    @classmethod
    def from_config(
        cls,
        rules_path: Optional[str | Path] = None,
        settings_path: Optional[str | Path] = None,
        max_workers: int = 1,
    ) -> "LeakagePipeline":
        """
        Build a pipeline from YAML configuration files.

        Missing paths fall back to the built-in defaults.
        """
        rules = None
        if rules_path and Path(rules_path).exists():
            rules = RuleConfigLoader(rules_path).load_rules()
        elif rules_path:
            logger.warning(f"Integrity rules file not found, using defaults: {rules_path}")

        settings = None
        if settings_path and Path(settings_path).exists():
            settings = LeakageSettings.from_yaml(settings_path)
        elif settings_path:
            logger.warning(f"Settings file not found, using defaults: {settings_path}")

        return cls(settings=settings, rules=rules, max_workers=max_workers)

    def _run_tasks(self, tasks: dict[str, Callable[[], Any]]) -> dict[str, Any]:
        """Run independent zero-argument tasks, concurrently when allowed."""
        if self.max_workers > 1 and len(tasks) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = {name: executor.submit(task) for name, task in tasks.items()}
                return {name: future.result() for name, future in futures.items()}
        return {name: task() for name, task in tasks.items()}

    def run(self, store: RawRecordStore, analysis_date: Optional[date] = None) -> LeakageReport:
        """
        Run all stages over the snapshot.

        Args:
            store: Raw record snapshot (read-only)
            analysis_date: Date stamped on the summary (defaults to today)

        Returns:
            LeakageReport with issues, validated collections and aggregates
        """
        analysis_date = analysis_date or date.today()
        counts = store.counts()
        logger.info("Starting leakage analysis", extra={"record_counts": counts})

        try:
            metrics.record_ingestion(counts)

            # Stage 2: integrity checks (advisory, never blocking)
            with log_operation("integrity checks", logger=logger), \
                    metrics.track_duration(metrics.stage_duration_seconds, stage="integrity"):
                issues = tuple(self.integrity_checker.run(store))
            metrics.record_issues(issues)
            logger.info(f"Integrity checks found {len(issues)} issues")

            # Stage 3: reconciliation per entity kind
            with log_operation("reconciliation", logger=logger), \
                    metrics.track_duration(metrics.stage_duration_seconds, stage="reconciliation"):
                validated = self._run_tasks({
                    "order_items": lambda: self.reconciliation.order_items(store.order_items),
                    "orders": lambda: self.reconciliation.orders(store.orders),
                    "products": lambda: self.reconciliation.products(store.products),
                    "customers": lambda: self.reconciliation.customers(store.customers),
                })

            items = validated["order_items"]
            orders = validated["orders"]
            products = validated["products"]
            customers = validated["customers"]

            # Stage 4: aggregates, independent of each other
            with log_operation("aggregation", logger=logger), \
                    metrics.track_duration(metrics.stage_duration_seconds, stage="aggregation"):
                aggregates = self._run_tasks({
                    "summary": lambda: summarize_leakage(items, analysis_date),
                    "product_leakage": lambda: product_leakage(items, products),
                    "margin_performance": lambda: margin_performance(items, products),
                    "channel_discount_abuse": lambda: channel_discount_abuse(orders, self.settings),
                    "customer_risk": lambda: customer_risk_profile(orders, customers, self.settings),
                    "customer_leakage": lambda: customer_leakage(orders, customers),
                })

            # Stage 5: ranking consumes the per-customer aggregate
            with log_operation("ranking", logger=logger), \
                    metrics.track_duration(metrics.stage_duration_seconds, stage="ranking"):
                ranked = rank_customer_leakage(aggregates["customer_leakage"], self.settings)

            report = LeakageReport(
                issues=issues,
                order_items=items,
                orders=orders,
                products=products,
                customers=customers,
                summary=aggregates["summary"],
                product_leakage=aggregates["product_leakage"],
                channel_discount_abuse=aggregates["channel_discount_abuse"],
                customer_risk=aggregates["customer_risk"],
                customer_leakage_ranked=ranked,
                margin_performance=aggregates["margin_performance"],
            )
        except Exception:
            metrics.increment_counter(metrics.pipeline_runs_total, 1, status="failure")
            raise

        metrics.record_report(report)
        metrics.increment_counter(metrics.pipeline_runs_total, 1, status="success")
        logger.info(
            "Leakage analysis complete",
            extra={
                "issue_counts": report.issue_counts(),
                "status_counts": report.status_counts(),
                "revenue_diff": str(report.summary.diff),
            },
        )
        return report
