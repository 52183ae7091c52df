"""
Neighborhood Safety - Aggregation Engine

Folds classified, spatially resolved incidents into per-neighborhood
counters.

Each incident goes through three checks, in order:
    1. Coordinate validity  -> invalid_coordinate_count on failure
    2. Spatial match         -> unmapped_count on miss
    3. Classification        -> category counter on success

An incident with valid coordinates inside a known neighborhood always
counts toward that neighborhood's total and incident count, even when its
crime code is unclassifiable. Every processed incident lands in exactly
one of mapped / unmapped / invalid.

Usage:
    from neighborhood_safety.aggregation import CrimeAggregator

    aggregator = CrimeAggregator(CrimeClassifier(LEGACY_TABLE))
    result = aggregator.aggregate(incidents, boundaries)
    result = result.with_date_range(DateRange(start, end))
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any

from neighborhood_safety.classification import (
    CATEGORY_PRIORITY,
    LEGACY_TABLE,
    CrimeCategory,
    CrimeClassifier,
)
from neighborhood_safety.ingestion import RawIncident
from neighborhood_safety.shared.geo import (
    NeighborhoodBoundary,
    is_valid_coordinate,
    parse_coordinate,
    resolve_neighborhood,
    validate_boundaries,
)
from neighborhood_safety.shared.temporal import DateRange

logger = logging.getLogger(__name__)


class AggregateSource(StrEnum):
    """Which incident feed an aggregate was built from."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    COMBINED = "combined"


@dataclass
class NeighborhoodAggregate:
    """
    Per-neighborhood counters.

    ``total`` and ``incident_count`` count every attributed incident; the
    category counters only count classified ones.
    """

    name: str
    violent: int = 0
    car_theft: int = 0
    break_in: int = 0
    petty_theft: int = 0
    total: int = 0
    incident_count: int = 0
    date_range: DateRange | None = None
    source: AggregateSource = AggregateSource.PRIMARY

    def count(self, category: CrimeCategory) -> int:
        return getattr(self, category.value)

    def category_counts(self) -> dict[CrimeCategory, int]:
        return {category: self.count(category) for category in CATEGORY_PRIORITY}

    @property
    def classified(self) -> int:
        return self.violent + self.car_theft + self.break_in + self.petty_theft

    @property
    def unclassified(self) -> int:
        return self.incident_count - self.classified

    def record(self, category: CrimeCategory | None) -> None:
        """Attribute one incident to this neighborhood."""
        self.incident_count += 1
        self.total += 1
        if category is not None:
            setattr(self, category.value, self.count(category) + 1)

    def with_date_range(self, date_range: DateRange | None) -> NeighborhoodAggregate:
        return replace(self, date_range=date_range)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "violent": self.violent,
            "car_theft": self.car_theft,
            "break_in": self.break_in,
            "petty_theft": self.petty_theft,
            "total": self.total,
            "incident_count": self.incident_count,
            "date_range": self.date_range.to_dict() if self.date_range else None,
            "source": str(self.source),
        }


@dataclass
class AggregationResult:
    """Per-neighborhood aggregates plus run-level quality counters."""

    per_neighborhood: dict[str, NeighborhoodAggregate]
    mapped_count: int = 0
    unmapped_count: int = 0
    invalid_coordinate_count: int = 0
    unclassified_count: int = 0
    invalid_reasons: dict[str, int] = field(default_factory=dict)

    @property
    def total_processed(self) -> int:
        return self.mapped_count + self.unmapped_count + self.invalid_coordinate_count

    @property
    def percentage_mapped(self) -> float:
        if self.total_processed == 0:
            return 0.0
        return round(self.mapped_count / self.total_processed * 100, 2)

    @property
    def date_range(self) -> DateRange | None:
        """Window covering every aggregate's date range."""
        combined: DateRange | None = None
        for aggregate in self.per_neighborhood.values():
            if aggregate.date_range is not None:
                combined = aggregate.date_range.union(combined)
        return combined

    def with_date_range(self, date_range: DateRange | None) -> AggregationResult:
        """Copy of this result with every aggregate stamped with ``date_range``."""
        return replace(self, per_neighborhood=stamp_date_range(self.per_neighborhood, date_range))

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_processed": self.total_processed,
            "mapped_count": self.mapped_count,
            "unmapped_count": self.unmapped_count,
            "invalid_coordinate_count": self.invalid_coordinate_count,
            "unclassified_count": self.unclassified_count,
            "percentage_mapped": self.percentage_mapped,
            "invalid_reasons": dict(self.invalid_reasons),
            "neighborhoods": len(self.per_neighborhood),
        }


class CrimeAggregator:
    """Left-fold of incidents into zero-initialized neighborhood aggregates."""

    def __init__(self, classifier: CrimeClassifier | None = None):
        self.classifier = classifier or CrimeClassifier(LEGACY_TABLE)

    def aggregate(
        self,
        incidents: Iterable[RawIncident],
        boundaries: Sequence[NeighborhoodBoundary],
        source: AggregateSource = AggregateSource.PRIMARY,
    ) -> AggregationResult:
        """
        Aggregate incidents by neighborhood.

        Args:
            incidents: Raw incident records
            boundaries: Neighborhood polygons, in tie-break order
            source: Tag stamped on every aggregate

        Returns:
            AggregationResult with one aggregate per boundary, including
            neighborhoods with no incidents

        Raises:
            BoundaryConfigurationError: If two boundaries share a name
        """
        boundaries = validate_boundaries(boundaries)
        result = AggregationResult(
            per_neighborhood={
                b.name: NeighborhoodAggregate(name=b.name, source=source) for b in boundaries
            }
        )

        for incident in incidents:
            self._fold(incident, boundaries, result)

        logger.info(
            f"Crime mapping stats: {result.total_processed} incidents, "
            f"{result.mapped_count} mapped, {result.unmapped_count} unmapped, "
            f"{result.invalid_coordinate_count} invalid coordinates",
            extra={"source": str(source), **result.to_dict()},
        )
        return result

    def _fold(
        self,
        incident: RawIncident,
        boundaries: Sequence[NeighborhoodBoundary],
        result: AggregationResult,
    ) -> None:
        lat = parse_coordinate(incident.lat)
        lon = parse_coordinate(incident.lon)

        if not is_valid_coordinate(lat, lon):
            reason = "unparseable" if lat is None or lon is None else "zero_sentinel"
            result.invalid_coordinate_count += 1
            result.invalid_reasons[reason] = result.invalid_reasons.get(reason, 0) + 1
            logger.debug(
                f"Invalid coordinates for incident {incident.incident_id}: "
                f"({incident.lat!r}, {incident.lon!r})"
            )
            return

        boundary = resolve_neighborhood(lat, lon, boundaries)
        if boundary is None:
            result.unmapped_count += 1
            return

        category = self.classifier.classify(incident.code, incident.description)
        result.per_neighborhood[boundary.name].record(category)
        result.mapped_count += 1
        if category is None:
            result.unclassified_count += 1


def stamp_date_range(
    aggregates: Mapping[str, NeighborhoodAggregate],
    date_range: DateRange | None,
) -> dict[str, NeighborhoodAggregate]:
    """Apply one reporting window uniformly to every aggregate."""
    return {name: aggregate.with_date_range(date_range) for name, aggregate in aggregates.items()}


# =============================================================================
# Convenience Functions
# =============================================================================


def aggregate_incidents(
    incidents: Iterable[RawIncident],
    boundaries: Sequence[NeighborhoodBoundary],
    classifier: CrimeClassifier | None = None,
    source: AggregateSource = AggregateSource.PRIMARY,
) -> AggregationResult:
    """Convenience function for aggregating incidents."""
    return CrimeAggregator(classifier).aggregate(incidents, boundaries, source)
