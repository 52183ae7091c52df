"""
Neighborhood Safety - Cross-Neighborhood Summary

City-wide totals and averages over a set of aggregates, plus the safest
and most dangerous neighborhood by total incidents.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from neighborhood_safety.aggregation.aggregator import NeighborhoodAggregate
from neighborhood_safety.classification import CATEGORY_PRIORITY, CrimeCategory

TOTAL_KEY = "total"


@dataclass
class CrimeSummary:
    """Summary statistics over all neighborhoods."""

    neighborhoods: int
    safest: str | None = None
    safest_total: int | None = None
    most_dangerous: str | None = None
    most_dangerous_total: int | None = None
    totals: dict[str, int] = field(default_factory=dict)
    averages: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "neighborhoods": self.neighborhoods,
            "safest": {"name": self.safest, "total": self.safest_total} if self.safest else None,
            "most_dangerous": (
                {"name": self.most_dangerous, "total": self.most_dangerous_total}
                if self.most_dangerous
                else None
            ),
            "totals": dict(self.totals),
            "averages": dict(self.averages),
        }


def category_averages(aggregates: Iterable[NeighborhoodAggregate]) -> dict[str, float]:
    """
    Mean count per neighborhood for each category and for the total.

    Keys are category values plus ``"total"``. Empty input gives zeros.
    """
    items = list(aggregates)
    keys = [c.value for c in CATEGORY_PRIORITY] + [TOTAL_KEY]
    if not items:
        return {key: 0.0 for key in keys}

    averages = {
        category.value: sum(a.count(category) for a in items) / len(items)
        for category in CATEGORY_PRIORITY
    }
    averages[TOTAL_KEY] = sum(a.total for a in items) / len(items)
    return averages


def summarize(aggregates: Iterable[NeighborhoodAggregate]) -> CrimeSummary:
    """Build a ``CrimeSummary``. Ties on total resolve to the earlier neighborhood."""
    items = list(aggregates)
    if not items:
        return CrimeSummary(
            neighborhoods=0,
            totals={c.value: 0 for c in CrimeCategory} | {TOTAL_KEY: 0},
            averages=category_averages([]),
        )

    safest = min(items, key=lambda a: a.total)
    most_dangerous = max(items, key=lambda a: a.total)

    totals = {c.value: sum(a.count(c) for a in items) for c in CATEGORY_PRIORITY}
    totals[TOTAL_KEY] = sum(a.total for a in items)

    return CrimeSummary(
        neighborhoods=len(items),
        safest=safest.name,
        safest_total=safest.total,
        most_dangerous=most_dangerous.name,
        most_dangerous_total=most_dangerous.total,
        totals=totals,
        averages={key: round(value, 2) for key, value in category_averages(items).items()},
    )
