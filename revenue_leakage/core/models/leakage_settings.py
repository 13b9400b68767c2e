"""
LeakageSettings model holding the business thresholds of the pipeline.
"""

from decimal import Decimal
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator


class LeakageSettings(BaseModel):
    """
    Thresholds used by reconciliation, aggregation and ranking.

    Attributes:
        money_tolerance: Absolute difference still treated as "ok"
        min_valid_discount_pct: Lowest legitimate discount percentage
        max_valid_discount_pct: Highest legitimate discount percentage
        abuse_avg_discount_pct: Channel average discount above which it is flagged
        abuse_discount_leakage: Channel discount leakage above which it is flagged
        high_risk_leakage: Customer leakage above which (with enough orders) risk is High
        high_risk_min_orders: Order count that must be exceeded for High risk
        medium_risk_leakage_min: Lower bound (inclusive) of the Medium leakage band
        medium_risk_leakage_max: Upper bound (inclusive) of the Medium leakage band
        high_percentile: Percentile at or above which the ranked tier is High
        medium_percentile: Percentile at or above which the ranked tier is Medium
    """

    money_tolerance: Decimal = Field(Decimal("0.01"), ge=0)
    min_valid_discount_pct: Decimal = Decimal("0")
    max_valid_discount_pct: Decimal = Decimal("80")
    abuse_avg_discount_pct: Decimal = Decimal("40")
    abuse_discount_leakage: Decimal = Decimal("1000")
    high_risk_leakage: Decimal = Decimal("500")
    high_risk_min_orders: int = Field(5, ge=0)
    medium_risk_leakage_min: Decimal = Decimal("100")
    medium_risk_leakage_max: Decimal = Decimal("500")
    high_percentile: Decimal = Field(Decimal("90"), ge=0, le=100)
    medium_percentile: Decimal = Field(Decimal("70"), ge=0, le=100)

    class Config:
        frozen = True

    @model_validator(mode="after")
    def check_bounds(self) -> "LeakageSettings":
        if self.min_valid_discount_pct > self.max_valid_discount_pct:
            raise ValueError("min_valid_discount_pct must not exceed max_valid_discount_pct")
        if self.medium_risk_leakage_min > self.medium_risk_leakage_max:
            raise ValueError("medium_risk_leakage_min must not exceed medium_risk_leakage_max")
        if self.medium_percentile > self.high_percentile:
            raise ValueError("medium_percentile must not exceed high_percentile")
        return self

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "LeakageSettings":
        """
        Load settings from a YAML file with a top-level 'settings' section.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the 'settings' section is missing
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {config_path}")

        with open(path) as f:
            config = yaml.safe_load(f)

        if not config or "settings" not in config:
            raise ValueError("Settings file must contain 'settings' section")

        # Read numbers as strings so Decimal does not inherit float noise
        values = {
            k: (str(v) if isinstance(v, float) else v)
            for k, v in (config["settings"] or {}).items()
        }
        return cls(**values)
