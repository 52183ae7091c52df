"""
Neighborhood Safety - Pipeline

End-to-end composition:

    RawIncident[] -> classify -> resolve neighborhood -> aggregate
                  -> (merge sources) -> enrich -> EnrichedNeighborhoodRecord{}

The result carries run metadata (incident totals, mapped percentage,
reporting window, data source) and a city-wide summary alongside the
per-neighborhood records.

Usage:
    from neighborhood_safety.pipeline import run_pipeline

    result = run_pipeline(incidents, boundaries, population)
    df = result.to_frame()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import pandas as pd

from neighborhood_safety.aggregation import (
    AggregateSource,
    AggregationResult,
    CrimeAggregator,
    CrimeSummary,
    merge_results,
    summarize,
)
from neighborhood_safety.classification import CrimeClassifier
from neighborhood_safety.enrichment import (
    EnrichedNeighborhoodRecord,
    NeighborhoodEnricher,
    PopulationTable,
)
from neighborhood_safety.ingestion import IncidentPreprocessor, IncidentScheme, RawIncident
from neighborhood_safety.shared.config import Settings, get_config
from neighborhood_safety.shared.geo import NeighborhoodBoundary
from neighborhood_safety.shared.temporal import DateRange, infer_date_range, parse_timestamp

logger = logging.getLogger(__name__)

SCHEME_SOURCES = {
    IncidentScheme.LEGACY: AggregateSource.PRIMARY,
    IncidentScheme.NIBRS: AggregateSource.SECONDARY,
}


@dataclass
class IncidentSource:
    """One incident feed handed to the pipeline."""

    incidents: Sequence[RawIncident]
    scheme: IncidentScheme = IncidentScheme.LEGACY
    date_range: DateRange | None = None
    classifier: CrimeClassifier | None = None

    def get_classifier(self, code_width: int | None = None) -> CrimeClassifier:
        """The injected classifier, or one over this scheme's built-in table."""
        if self.classifier is not None:
            return self.classifier
        table = IncidentPreprocessor(self.scheme).get_classification_table(code_width)
        return CrimeClassifier(table)


@dataclass
class RunMetadata:
    """Run-level metadata delivered with the records."""

    total_incidents: int
    mapped_incidents: int
    unmapped_incidents: int
    invalid_coordinates: int
    unclassified_incidents: int
    percentage_mapped: float
    neighborhoods: int
    data_source: AggregateSource
    date_range: DateRange | None
    last_updated: datetime
    duration_seconds: float = 0.0
    invalid_reasons: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_incidents": self.total_incidents,
            "mapped_incidents": self.mapped_incidents,
            "unmapped_incidents": self.unmapped_incidents,
            "invalid_coordinates": self.invalid_coordinates,
            "unclassified_incidents": self.unclassified_incidents,
            "percentage_mapped": self.percentage_mapped,
            "neighborhoods": self.neighborhoods,
            "data_source": str(self.data_source),
            "date_range": self.date_range.to_dict() if self.date_range else None,
            "last_updated": self.last_updated.isoformat(),
            "duration_seconds": self.duration_seconds,
            "invalid_reasons": dict(self.invalid_reasons),
        }


@dataclass
class PipelineResult:
    """Enriched records plus metadata and summary for one run."""

    records: dict[str, EnrichedNeighborhoodRecord]
    metadata: RunMetadata
    summary: CrimeSummary
    aggregation: AggregationResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "neighborhoods": {name: r.to_dict() for name, r in self.records.items()},
            "metadata": self.metadata.to_dict(),
            "summary": self.summary.to_dict(),
        }

    def to_frame(self) -> pd.DataFrame:
        return records_to_frame(self.records.values())


def aggregate_source(
    source: IncidentSource,
    boundaries: Sequence[NeighborhoodBoundary],
    code_width: int | None = None,
) -> AggregationResult:
    """
    Aggregate one feed and stamp it with its reporting window.

    The window is the source's explicit ``date_range`` or, failing that,
    the span of its incident timestamps. ``code_width`` sets the padding of
    the built-in classification table when the source has no classifier.
    """
    incidents = list(source.incidents)
    date_range = source.date_range or infer_date_range(i.occurred_at for i in incidents)
    if source.date_range is None and date_range is not None:
        logger.debug(f"Inferred {source.scheme} date range {date_range.start} - {date_range.end}")

    aggregator = CrimeAggregator(source.get_classifier(code_width))
    result = aggregator.aggregate(incidents, boundaries, SCHEME_SOURCES[source.scheme])
    return result.with_date_range(date_range)


def run_multi_source_pipeline(
    sources: Sequence[IncidentSource],
    boundaries: Sequence[NeighborhoodBoundary],
    population: PopulationTable,
    config: Settings | None = None,
    as_of: datetime | None = None,
    histories: Mapping[str, Sequence[float]] | None = None,
) -> PipelineResult:
    """
    Run the full pipeline over one or more incident feeds.

    Several feeds are merged into ``combined`` aggregates before
    enrichment.

    Args:
        sources: Incident feeds
        boundaries: Neighborhood polygons, in tie-break order
        population: Population reference table
        config: Configuration (default config if not provided)
        as_of: Reference time for staleness and ``last_updated``
        histories: Optional per-neighborhood period totals for trends

    Returns:
        PipelineResult

    Raises:
        ValueError: If no sources are given
        BoundaryConfigurationError: If boundaries share a name
    """
    if not sources:
        raise ValueError("At least one incident source is required")

    start_time = time.time()
    config = config or get_config()
    as_of = parse_timestamp(as_of) or datetime.now(UTC)
    code_width = config.classification.code_width

    results = [aggregate_source(source, boundaries, code_width) for source in sources]
    if len(results) == 1:
        aggregation = results[0]
        data_source = SCHEME_SOURCES[sources[0].scheme]
    else:
        aggregation = merge_results(results)
        data_source = AggregateSource.COMBINED

    enricher = NeighborhoodEnricher(config=config, as_of=as_of)
    records = enricher.enrich_all(aggregation.per_neighborhood, population, histories)

    metadata = RunMetadata(
        total_incidents=aggregation.total_processed,
        mapped_incidents=aggregation.mapped_count,
        unmapped_incidents=aggregation.unmapped_count,
        invalid_coordinates=aggregation.invalid_coordinate_count,
        unclassified_incidents=aggregation.unclassified_count,
        percentage_mapped=aggregation.percentage_mapped,
        neighborhoods=len(records),
        data_source=data_source,
        date_range=aggregation.date_range,
        last_updated=as_of,
        duration_seconds=time.time() - start_time,
        invalid_reasons=dict(aggregation.invalid_reasons),
    )

    logger.info(
        f"Pipeline complete: {len(records)} neighborhoods from "
        f"{metadata.total_incidents} incidents ({metadata.percentage_mapped}% mapped)",
        extra=metadata.to_dict(),
    )

    return PipelineResult(
        records=records,
        metadata=metadata,
        summary=summarize(aggregation.per_neighborhood.values()),
        aggregation=aggregation,
    )


def run_pipeline(
    incidents: Iterable[RawIncident],
    boundaries: Sequence[NeighborhoodBoundary],
    population: PopulationTable,
    date_range: DateRange | None = None,
    scheme: IncidentScheme = IncidentScheme.LEGACY,
    classifier: CrimeClassifier | None = None,
    config: Settings | None = None,
    as_of: datetime | None = None,
    histories: Mapping[str, Sequence[float]] | None = None,
) -> PipelineResult:
    """Convenience wrapper for a single incident feed."""
    source = IncidentSource(
        incidents=list(incidents),
        scheme=IncidentScheme(scheme),
        date_range=date_range,
        classifier=classifier,
    )
    return run_multi_source_pipeline(
        [source], boundaries, population, config=config, as_of=as_of, histories=histories
    )


# =============================================================================
# Export
# =============================================================================


def _flatten(record: EnrichedNeighborhoodRecord) -> dict[str, Any]:
    row = record.to_dict()

    for key, value in row.pop("vs_average").items():
        row[f"vs_average_{key}"] = value

    for name in ("violent_interval", "total_interval"):
        interval = row.pop(name)
        row[f"{name}_lower"] = interval["lower"] if interval else None
        row[f"{name}_upper"] = interval["upper"] if interval else None

    date_range = row.pop("date_range")
    row["period_start"] = date_range["start"] if date_range else None
    row["period_end"] = date_range["end"] if date_range else None
    return row


def records_to_frame(records: Iterable[EnrichedNeighborhoodRecord]) -> pd.DataFrame:
    """One row per neighborhood, nested fields flattened into columns."""
    rows = [_flatten(record) for record in records]
    if not rows:
        return pd.DataFrame()
    return pd.DataFrame(rows)
