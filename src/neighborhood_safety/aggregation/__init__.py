"""
Neighborhood Safety - Aggregation

Components:
    - CrimeAggregator: Incidents -> per-neighborhood counters
    - merge_aggregations / merge_results: Multi-source merger
    - summarize: City-wide totals, averages, safest and most dangerous
"""

from neighborhood_safety.aggregation.aggregator import (
    AggregateSource,
    AggregationResult,
    CrimeAggregator,
    NeighborhoodAggregate,
    aggregate_incidents,
    stamp_date_range,
)
from neighborhood_safety.aggregation.merger import merge_aggregations, merge_results
from neighborhood_safety.aggregation.summary import CrimeSummary, category_averages, summarize

__all__ = [
    "AggregateSource",
    "AggregationResult",
    "CrimeAggregator",
    "NeighborhoodAggregate",
    "aggregate_incidents",
    "stamp_date_range",
    "merge_aggregations",
    "merge_results",
    "CrimeSummary",
    "category_averages",
    "summarize",
]
