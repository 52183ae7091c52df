"""
Neighborhood Safety - Multi-Source Merger

Combines aggregates built from independent incident feeds, for example a
legacy-coded dataset and a NIBRS dataset covering different windows.

A neighborhood missing from one input contributes zero from that input.
The merged date range spans the earliest start to the latest end.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from neighborhood_safety.aggregation.aggregator import (
    AggregateSource,
    AggregationResult,
    NeighborhoodAggregate,
)
from neighborhood_safety.shared.temporal import DateRange

logger = logging.getLogger(__name__)

_COUNTERS = ("violent", "car_theft", "break_in", "petty_theft", "total", "incident_count")


def merge_aggregations(
    aggregations: Sequence[Mapping[str, NeighborhoodAggregate]],
) -> dict[str, NeighborhoodAggregate]:
    """
    Sum per-neighborhood counters across sources.

    Args:
        aggregations: One name -> aggregate mapping per source

    Returns:
        New mapping over the union of names, every aggregate tagged ``combined``
    """
    names: list[str] = []
    seen: set[str] = set()
    for aggregation in aggregations:
        for name in aggregation:
            if name not in seen:
                seen.add(name)
                names.append(name)

    merged: dict[str, NeighborhoodAggregate] = {}
    for name in names:
        combined = NeighborhoodAggregate(name=name, source=AggregateSource.COMBINED)
        date_range: DateRange | None = None

        for aggregation in aggregations:
            data = aggregation.get(name)
            if data is None:
                continue
            for counter in _COUNTERS:
                setattr(combined, counter, getattr(combined, counter) + getattr(data, counter))
            if data.date_range is not None:
                date_range = data.date_range.union(date_range)

        combined.date_range = date_range
        merged[name] = combined

    logger.debug(
        f"Merged {len(aggregations)} aggregations into {len(merged)} neighborhoods",
        extra={"sources": len(aggregations), "neighborhoods": len(merged)},
    )
    return merged


def merge_results(results: Sequence[AggregationResult]) -> AggregationResult:
    """
    Merge whole aggregation results, including their quality counters.

    Also the way to recombine shards of one feed that were aggregated
    separately.
    """
    invalid_reasons: dict[str, int] = {}
    for result in results:
        for reason, count in result.invalid_reasons.items():
            invalid_reasons[reason] = invalid_reasons.get(reason, 0) + count

    return AggregationResult(
        per_neighborhood=merge_aggregations([r.per_neighborhood for r in results]),
        mapped_count=sum(r.mapped_count for r in results),
        unmapped_count=sum(r.unmapped_count for r in results),
        invalid_coordinate_count=sum(r.invalid_coordinate_count for r in results),
        unclassified_count=sum(r.unclassified_count for r in results),
        invalid_reasons=invalid_reasons,
    )
