"""
End-to-end tests for the leakage command-line driver.

Runs the CLI over the CSV fixtures with a shared local Spark session.
"""

import json
from pathlib import Path

import pytest

from revenue_leakage.cli import leakage_cli

CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"

pytestmark = pytest.mark.e2e


class SharedSession:
    """Spark session proxy whose stop() leaves the session-scoped fixture running."""

    def __init__(self, spark):
        self._spark = spark

    def __getattr__(self, name):
        return getattr(self._spark, name)

    def stop(self):
        pass


@pytest.fixture
def cli_args(export_paths):
    return [
        "--orders", export_paths["order"],
        "--order-items", export_paths["order_item"],
        "--products", export_paths["product"],
        "--customers", export_paths["customer"],
        "--rules", str(CONFIG_DIR / "integrity_rules.yaml"),
        "--settings", str(CONFIG_DIR / "leakage_settings.yaml"),
        "--analysis-date", "2024-06-30",
    ]


@pytest.fixture
def shared_spark(spark_session, monkeypatch):
    monkeypatch.setattr(leakage_cli, "create_spark_session", lambda app_name: SharedSession(spark_session))
    return spark_session


@pytest.mark.spark
class TestRunCommand:
    """Tests for the run subcommand"""

    def test_writes_report(self, shared_spark, cli_args, tmp_path):
        output = tmp_path / "out" / "leakage.json"
        metrics_file = tmp_path / "metrics.prom"

        leakage_cli.main(["run", *cli_args, "--workers", "2", "--output", str(output),
                          "--metrics-file", str(metrics_file)])

        document = json.loads(output.read_text())
        assert document["summary"] == {
            "analysis_date": "2024-06-30",
            "total_expected": "195.00",
            "total_realized": "190.00",
            "diff": "5.00",
            "leakage_pct": "2.63",
        }
        assert document["issue_counts"] == {"unknown_product": 1}
        assert document["status_counts"]["order"] == {"ok": 1, "discount_mismatch": 1, "invalid_discount": 1}
        assert [row["product_id"] for row in document["product_leakage"]] == [1, 2, 3]
        assert {row["source"]: row["abuse_flag"] for row in document["channel_discount_abuse"]} == {
            "ads": "Yes",
            "organic": "No",
        }
        assert "orders" not in document
        assert "leakage_pipeline_runs_total" in metrics_file.read_text()

    def test_include_validated(self, shared_spark, cli_args, tmp_path):
        output = tmp_path / "leakage.json"
        leakage_cli.main(["run", *cli_args, "--include-validated", "--output", str(output)])

        document = json.loads(output.read_text())
        assert len(document["order_items"]) == 5
        assert document["products"][2]["margin_status"] == "negative_margin"


@pytest.mark.spark
class TestHighRiskCommand:
    """Tests for the high-risk subcommand"""

    def test_relative_tier(self, shared_spark, cli_args, capsys):
        leakage_cli.main(["high-risk", *cli_args, "--relative"])

        lines = capsys.readouterr().out.strip().splitlines()
        assert "percentile" in lines[0]
        assert len(lines) == 2
        assert lines[1].split() == ["2", "US", "2", "100.00", "-1.00"]

    def test_absolute_tier_has_no_rows(self, shared_spark, cli_args, capsys):
        leakage_cli.main(["high-risk", *cli_args])

        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 1
        assert "revenue" in lines[0]


class TestInvalidInput:
    """Tests for argument validation, which fails before Spark starts"""

    def test_missing_export(self, cli_args, tmp_path):
        args = list(cli_args)
        args[1] = str(tmp_path / "missing.csv")

        with pytest.raises(SystemExit) as exc_info:
            leakage_cli.main(["run", *args])
        assert exc_info.value.code == 1

    def test_invalid_worker_count(self, cli_args):
        with pytest.raises(SystemExit) as exc_info:
            leakage_cli.main(["run", *cli_args, "--workers", "0"])
        assert exc_info.value.code == 1

    def test_invalid_date(self, cli_args):
        args = list(cli_args)
        args[-1] = "30/06/2024"

        with pytest.raises(SystemExit) as exc_info:
            leakage_cli.main(["run", *args])
        assert exc_info.value.code == 1

    def test_no_command(self):
        with pytest.raises(SystemExit) as exc_info:
            leakage_cli.main([])
        assert exc_info.value.code == 1
