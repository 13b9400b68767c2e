"""
Ranking engine.

Ranks customers by leakage inside their country and derives a relative risk
tier from the percentile rank. Ranking is done explicitly: partition, sort
descending, then assign ranks with gaps (tied values share the rank of the
first row in their tie group; the next distinct value takes its 1-based
position).
"""

from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Iterable, Sequence, TypeVar

from revenue_leakage.core.models import CustomerLeakage, CustomerLeakageRanked, LeakageSettings

T = TypeVar("T")

HUNDRED = Decimal("100")
CENT = Decimal("0.01")
DEFAULT_SETTINGS = LeakageSettings()


def rank_with_gaps(values: Sequence[Any]) -> list[int]:
    """
    Ranks for values already sorted best-first.

    >>> rank_with_gaps([800, 800, 500, 100, 100, 50])
    [1, 1, 3, 4, 4, 6]
    """
    ranks: list[int] = []
    for position, value in enumerate(values, start=1):
        if position > 1 and value == values[position - 2]:
            ranks.append(ranks[-1])
        else:
            ranks.append(position)
    return ranks


def percent_rank(rank: int, partition_size: int) -> Decimal:
    """(rank - 1) / (partition_size - 1) as a 0-100 value, 0 for single-row partitions."""
    if partition_size <= 1:
        return Decimal("0")
    return Decimal(rank - 1) * HUNDRED / Decimal(partition_size - 1)


def percentile_tier(percentile: Decimal, settings: LeakageSettings = DEFAULT_SETTINGS) -> str:
    if percentile >= settings.high_percentile:
        return "High"
    if percentile >= settings.medium_percentile:
        return "Medium"
    return "Low"


def partition_by(rows: Iterable[T], key: Callable[[T], Any]) -> dict[Any, list[T]]:
    """Stable partition preserving input order inside each partition."""
    partitions: dict[Any, list[T]] = defaultdict(list)
    for row in rows:
        partitions[key(row)].append(row)
    return partitions


def rank_customer_leakage(
    rows: Iterable[CustomerLeakage],
    settings: LeakageSettings = DEFAULT_SETTINGS,
) -> tuple[CustomerLeakageRanked, ...]:
    """
    Rank customers by total leakage within each country.

    Args:
        rows: Per-customer leakage totals
        settings: Percentile tier thresholds

    Returns:
        Ranked rows ordered by country, then rank, then customer_id
    """
    ranked: list[CustomerLeakageRanked] = []
    for partition in partition_by(rows, lambda r: r.country).values():
        ordered = sorted(partition, key=lambda r: (-r.total_leakage, r.customer_id))
        ranks = rank_with_gaps([r.total_leakage for r in ordered])
        for row, rank in zip(ordered, ranks):
            # Tier from the exact value, rounding only for the reported percentile
            exact = percent_rank(rank, len(ordered))
            ranked.append(
                CustomerLeakageRanked(
                    **row.model_dump(),
                    leakage_rank=rank,
                    leakage_percentile=exact.quantize(CENT, rounding=ROUND_HALF_UP),
                    risk_category=percentile_tier(exact, settings),
                )
            )

    ranked.sort(key=lambda r: (r.country is None, r.country or "", r.leakage_rank, r.customer_id))
    return tuple(ranked)
