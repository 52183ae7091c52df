"""
Neighborhood Safety - Rate and Rank Statistics

Per-capita rates, percentile ranks, Poisson confidence intervals and
comparison-to-average ratios. All functions are pure; a None population
always yields None rather than a substituted default.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

WEEKS_PER_YEAR = 52
PER_CAPITA_SCALE = 1000
DEFAULT_Z = 1.96
NEUTRAL_PERCENTILE = 50


@dataclass(frozen=True)
class ConfidenceInterval:
    """Per-capita rate bounds (incidents per 1,000 residents per year)."""

    lower: float
    upper: float

    def to_dict(self) -> dict[str, float]:
        return {"lower": self.lower, "upper": self.upper}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def annualize(count: float, period_weeks: float) -> float:
    """Scale a period count to a 52-week year."""
    if period_weeks <= 0:
        raise ValueError(f"period_weeks must be positive, got {period_weeks}")
    return count * (WEEKS_PER_YEAR / period_weeks)


def per_capita_rate(count: float, population: int | None, period_weeks: float) -> float | None:
    """
    Annualized incidents per 1,000 residents.

    Returns:
        The rate, or None when population is unknown or zero
    """
    if not population or population <= 0:
        return None
    return annualize(count, period_weeks) / population * PER_CAPITA_SCALE


def percentile_rank(value: float, values: Sequence[float]) -> int:
    """
    Percentage of ``values`` strictly below ``value``, rounded.

    An empty comparison set yields the neutral 50.
    """
    if not values:
        return NEUTRAL_PERCENTILE
    below = sum(1 for v in values if v < value)
    return round_half_up(100 * below / len(values))


def confidence_interval(
    count: int,
    population: int | None,
    period_weeks: float,
    z: float = DEFAULT_Z,
    precision: int = 1,
) -> ConfidenceInterval | None:
    """
    Normal approximation to a Poisson count, expressed as per-capita rates.

    The period count is annualized, the interval is taken as
    ``mean +/- z * sqrt(mean)`` with the lower bound floored at zero, and
    both bounds are converted to incidents per 1,000 residents.

    Returns:
        The interval, or None when population is unknown or count is zero
    """
    if not population or population <= 0 or count <= 0:
        return None

    mean = annualize(count, period_weeks)
    margin = z * math.sqrt(mean)
    lower = max(0.0, mean - margin)
    upper = mean + margin

    return ConfidenceInterval(
        lower=round(lower / population * PER_CAPITA_SCALE, precision),
        upper=round(upper / population * PER_CAPITA_SCALE, precision),
    )


def vs_average(value: float, average: float) -> float | None:
    """
    Ratio of ``value`` to the cross-neighborhood average.

    A zero average compares equal (1.0) against a zero value and is
    undefined (None) otherwise.
    """
    if average == 0:
        return 1.0 if value == 0 else None
    return round(value / average, 2)
