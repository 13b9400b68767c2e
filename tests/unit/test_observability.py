"""
Unit tests for structured logging and Prometheus metrics.
"""

import json
import logging
import math
from datetime import date
from decimal import Decimal

import pytest

from revenue_leakage.observability import metrics
from revenue_leakage.observability.logger import (
    PipelineJsonFormatter,
    get_logger,
    log_operation,
    setup_logger,
)


def sample_value(name, **labels):
    value = metrics.REGISTRY.get_sample_value(name, labels or None)
    return value or 0.0


@pytest.fixture
def captured_logger():
    """Logger with a JSON formatter writing into a list."""
    records = []

    class ListHandler(logging.Handler):
        def emit(self, record):
            records.append(self.format(record))

    logger = logging.getLogger("revenue-leakage-test-capture")
    logger.handlers.clear()
    handler = ListHandler()
    handler.setFormatter(PipelineJsonFormatter(fmt="%(timestamp)s %(level)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger, records
    logger.handlers.clear()


class TestLogger:
    """Tests for logger configuration"""

    def test_json_formatter_adds_fields(self, captured_logger):
        logger, records = captured_logger
        logger.info("Integrity checks found 3 issues", extra={"issue_count": 3})

        payload = json.loads(records[0])
        assert payload["message"] == "Integrity checks found 3 issues"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "revenue-leakage-test-capture"
        assert payload["issue_count"] == 3
        assert payload["function"] == "test_json_formatter_adds_fields"
        assert payload["thread"] == "MainThread"
        assert payload["timestamp"].endswith("+00:00")

    def test_setup_logger_respects_level(self):
        logger = setup_logger("revenue-leakage-test-level", level="warning", format_type="text")
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_setup_logger_reads_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("LOG_FORMAT", "json")
        logger = setup_logger("revenue-leakage-test-env")
        assert logger.level == logging.DEBUG
        assert isinstance(logger.handlers[0].formatter, PipelineJsonFormatter)

    def test_setup_logger_does_not_duplicate_handlers(self):
        setup_logger("revenue-leakage-test-dup")
        logger = setup_logger("revenue-leakage-test-dup")
        assert len(logger.handlers) == 1

    def test_setup_logger_unknown_level_falls_back_to_info(self):
        logger = setup_logger("revenue-leakage-test-unknown", level="verbose", format_type="text")
        assert logger.level == logging.INFO

    def test_module_loggers_share_the_package_handler(self):
        package = get_logger()
        logger = get_logger("revenue_leakage.batch.pipeline")

        assert package.name == "revenue_leakage"
        assert len(package.handlers) == 1
        assert logger.handlers == []
        assert logger.propagate is True
        assert logger.getEffectiveLevel() == package.level


class TestLogOperation:
    """Tests for the log_operation context manager"""

    def test_success(self, captured_logger):
        logger, records = captured_logger
        with log_operation("reconciliation", logger=logger, entity_kind="order") as op:
            pass

        assert op.duration is not None and op.duration >= 0
        start, done = (json.loads(r) for r in records)
        assert start["message"] == "Starting: reconciliation"
        assert done["status"] == "success"
        assert done["entity_kind"] == "order"

    def test_failure_is_logged_and_propagated(self, captured_logger):
        logger, records = captured_logger
        with pytest.raises(ValueError):
            with log_operation("ranking", logger=logger):
                raise ValueError("boom")

        failed = json.loads(records[-1])
        assert failed["level"] == "ERROR"
        assert failed["status"] == "error"
        assert failed["error_type"] == "ValueError"
        assert failed["error_message"] == "boom"


class TestMetrics:
    """Tests for the metric helpers"""

    def test_increment_counter_with_labels(self):
        before = sample_value("leakage_records_ingested_total", entity_kind="customer")
        metrics.increment_counter(metrics.records_ingested_total, 3, entity_kind="customer")
        assert sample_value("leakage_records_ingested_total", entity_kind="customer") == before + 3

    def test_set_gauge_without_labels(self):
        metrics.set_gauge(metrics.abusive_channels, 2)
        assert sample_value("leakage_abusive_channels") == 2

    def test_track_duration_observes_histogram(self):
        before = sample_value("leakage_stage_duration_seconds_count", stage="test")
        with metrics.track_duration(metrics.stage_duration_seconds, stage="test"):
            pass
        assert sample_value("leakage_stage_duration_seconds_count", stage="test") == before + 1

    def test_record_ingestion_skips_empty_collections(self):
        before = sample_value("leakage_records_ingested_total", entity_kind="product")
        metrics.record_ingestion({"product": 0})
        assert sample_value("leakage_records_ingested_total", entity_kind="product") == before

    def test_record_report(self, clean_store):
        from revenue_leakage.batch.pipeline import LeakagePipeline

        report = LeakagePipeline().run(clean_store, analysis_date=date(2024, 6, 30))
        metrics.record_report(report)

        assert sample_value("leakage_revenue_diff") == float(Decimal("5.00"))
        assert sample_value("leakage_abusive_channels") == 1
        assert sample_value("leakage_customers_by_risk", ranking="percentile", risk_category="High") == 1
        assert sample_value("leakage_customers_by_risk", ranking="absolute", risk_category="Low") == 3

    def test_record_report_without_realized_revenue_clears_percentage(self, clean_store):
        from revenue_leakage.batch.pipeline import LeakagePipeline
        from revenue_leakage.core.models import RawRecordStore

        pipeline = LeakagePipeline()
        metrics.record_report(pipeline.run(clean_store, analysis_date=date(2024, 6, 30)))
        assert not math.isnan(metrics.REGISTRY.get_sample_value("leakage_revenue_diff_pct"))

        metrics.record_report(pipeline.run(RawRecordStore(), analysis_date=date(2024, 6, 30)))
        assert math.isnan(metrics.REGISTRY.get_sample_value("leakage_revenue_diff_pct"))
        assert sample_value("leakage_revenue_diff") == 0.0

    def test_generate_metrics(self):
        metrics.increment_counter(metrics.pipeline_runs_total, 1, status="success")
        output = metrics.generate_metrics().decode("utf-8")
        assert "leakage_pipeline_runs_total" in output

    def test_observe_histogram(self):
        before = sample_value("leakage_stage_duration_seconds_sum", stage="observed")
        metrics.observe_histogram(metrics.stage_duration_seconds, 0.25, stage="observed")
        assert sample_value("leakage_stage_duration_seconds_sum", stage="observed") == before + 0.25
