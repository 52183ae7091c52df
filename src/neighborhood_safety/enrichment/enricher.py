"""
Neighborhood Safety - Statistical Enrichment Engine

Turns a neighborhood aggregate into an EnrichedNeighborhoodRecord using
the population table and the full cross-neighborhood aggregate set.

Rates:
    Per-capita rates are annualized incidents per 1,000 residents. The
    reporting period comes from the aggregate's date range; an aggregate
    without one is treated as ``enrichment.default_period_weeks`` long.

Ranking:
    Percentiles compare per-capita rates across the neighborhoods that
    have population data. Without population the neighborhood is not
    ranked, since raw counts are not comparable across neighborhoods of
    different size.

Scoring:
    The safety score uses weekly counts against the weekly calibration
    bands in ``scoring.bands``. It needs no population, so neighborhoods
    without population data are still scored and tiered.

Usage:
    from neighborhood_safety.enrichment import NeighborhoodEnricher

    enricher = NeighborhoodEnricher(as_of=datetime(2024, 6, 1, tzinfo=UTC))
    records = enricher.enrich_all(result.per_neighborhood, population)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from neighborhood_safety.aggregation import (
    AggregateSource,
    NeighborhoodAggregate,
    category_averages,
)
from neighborhood_safety.aggregation.summary import TOTAL_KEY
from neighborhood_safety.classification import CATEGORY_PRIORITY
from neighborhood_safety.enrichment.population import PopulationTable
from neighborhood_safety.enrichment.quality import data_quality_score, has_sufficient_data
from neighborhood_safety.enrichment.scoring import SafetyTier, letter_tier, safety_score
from neighborhood_safety.enrichment.statistics import (
    ConfidenceInterval,
    per_capita_rate,
    percentile_rank,
    vs_average,
)
from neighborhood_safety.enrichment.statistics import (
    confidence_interval as poisson_interval,
)
from neighborhood_safety.enrichment.trend import TrendIndicator, calculate_trend
from neighborhood_safety.shared.config import Settings, get_config
from neighborhood_safety.shared.temporal import DateRange, parse_timestamp, period_weeks

logger = logging.getLogger(__name__)

METRICS = tuple(c.value for c in CATEGORY_PRIORITY) + (TOTAL_KEY,)


@dataclass(frozen=True)
class CategoryComparison:
    """Ratio of a neighborhood's count to the cross-neighborhood mean."""

    violent: float | None
    car_theft: float | None
    break_in: float | None
    petty_theft: float | None
    overall: float | None

    def to_dict(self) -> dict[str, float | None]:
        return {
            "violent": self.violent,
            "car_theft": self.car_theft,
            "break_in": self.break_in,
            "petty_theft": self.petty_theft,
            "overall": self.overall,
        }


@dataclass(frozen=True)
class EnrichedNeighborhoodRecord:
    """Terminal per-neighborhood profile. Build a new one instead of patching."""

    name: str

    # Raw counts
    violent: int
    car_theft: int
    break_in: int
    petty_theft: int
    total: int
    incident_count: int

    # Annualized per 1,000 residents
    violent_per_capita: float | None
    car_theft_per_capita: float | None
    break_in_per_capita: float | None
    petty_theft_per_capita: float | None
    total_per_capita: float | None

    # Percentiles (higher = more crime, except overall_safety_percentile)
    violent_percentile: int | None
    car_theft_percentile: int | None
    break_in_percentile: int | None
    petty_theft_percentile: int | None
    overall_safety_percentile: int | None

    safety_score: int | None
    safety_tier: SafetyTier | None

    data_quality_score: int
    has_sufficient_data: bool
    population_data_available: bool
    population: int | None
    population_density: float | None

    vs_average: CategoryComparison
    violent_interval: ConfidenceInterval | None
    total_interval: ConfidenceInterval | None

    trend: TrendIndicator
    trend_confidence: float

    period_weeks: float
    date_range: DateRange | None
    source: AggregateSource

    @property
    def last_updated(self) -> datetime | None:
        return self.date_range.end if self.date_range else None

    def to_dict(self) -> dict[str, Any]:
        """Flat, JSON-friendly view."""
        return {
            "name": self.name,
            "violent": self.violent,
            "car_theft": self.car_theft,
            "break_in": self.break_in,
            "petty_theft": self.petty_theft,
            "total": self.total,
            "incident_count": self.incident_count,
            "violent_per_capita": self.violent_per_capita,
            "car_theft_per_capita": self.car_theft_per_capita,
            "break_in_per_capita": self.break_in_per_capita,
            "petty_theft_per_capita": self.petty_theft_per_capita,
            "total_per_capita": self.total_per_capita,
            "violent_percentile": self.violent_percentile,
            "car_theft_percentile": self.car_theft_percentile,
            "break_in_percentile": self.break_in_percentile,
            "petty_theft_percentile": self.petty_theft_percentile,
            "overall_safety_percentile": self.overall_safety_percentile,
            "safety_score": self.safety_score,
            "safety_tier": self.safety_tier.value if self.safety_tier else None,
            "safety_tier_description": self.safety_tier.description if self.safety_tier else None,
            "data_quality_score": self.data_quality_score,
            "has_sufficient_data": self.has_sufficient_data,
            "population_data_available": self.population_data_available,
            "population": self.population,
            "population_density": self.population_density,
            "vs_average": self.vs_average.to_dict(),
            "violent_interval": self.violent_interval.to_dict() if self.violent_interval else None,
            "total_interval": self.total_interval.to_dict() if self.total_interval else None,
            "trend": self.trend.value,
            "trend_confidence": self.trend_confidence,
            "period_weeks": self.period_weeks,
            "date_range": self.date_range.to_dict() if self.date_range else None,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "source": str(self.source),
        }


@dataclass(frozen=True)
class _Comparison:
    """Cross-neighborhood context shared by every record in a run."""

    rates: Mapping[str, Sequence[float]]
    averages: Mapping[str, float]


class NeighborhoodEnricher:
    """
    Statistical enrichment of neighborhood aggregates.

    ``as_of`` pins the reference time for staleness so that the same
    inputs always produce the same records.
    """

    def __init__(self, config: Settings | None = None, as_of: datetime | None = None):
        self.config = config or get_config()
        self.as_of = parse_timestamp(as_of) or datetime.now(UTC)

    def enrich(
        self,
        aggregate: NeighborhoodAggregate,
        all_aggregates: Mapping[str, NeighborhoodAggregate],
        population: PopulationTable,
        history: Sequence[float] | None = None,
    ) -> EnrichedNeighborhoodRecord:
        """
        Enrich one aggregate.

        Args:
            aggregate: The neighborhood to enrich
            all_aggregates: Every neighborhood in the run (comparison set)
            population: Population reference table
            history: Optional per-period totals, oldest first, for the trend

        Returns:
            EnrichedNeighborhoodRecord
        """
        peers = dict(all_aggregates)
        peers.setdefault(aggregate.name, aggregate)
        comparison = self._comparison(peers, population)
        return self._build_record(aggregate, comparison, population, history)

    def enrich_all(
        self,
        aggregates: Mapping[str, NeighborhoodAggregate],
        population: PopulationTable,
        histories: Mapping[str, Sequence[float]] | None = None,
    ) -> dict[str, EnrichedNeighborhoodRecord]:
        """Enrich every aggregate against the same comparison set."""
        histories = histories or {}
        comparison = self._comparison(aggregates, population)

        records = {
            name: self._build_record(aggregate, comparison, population, histories.get(name))
            for name, aggregate in aggregates.items()
        }

        with_population = sum(1 for r in records.values() if r.population_data_available)
        logger.info(
            f"Enriched {len(records)} neighborhoods ({with_population} with population data)",
            extra={"neighborhoods": len(records), "with_population": with_population},
        )
        return records

    def _period_weeks(self, aggregate: NeighborhoodAggregate) -> float:
        return period_weeks(aggregate.date_range, self.config.enrichment.default_period_weeks)

    def _rates(
        self, aggregate: NeighborhoodAggregate, population: int | None
    ) -> dict[str, float | None]:
        weeks = self._period_weeks(aggregate)
        rates = {
            category.value: per_capita_rate(aggregate.count(category), population, weeks)
            for category in CATEGORY_PRIORITY
        }
        rates[TOTAL_KEY] = per_capita_rate(aggregate.total, population, weeks)
        return rates

    def _comparison(
        self, aggregates: Mapping[str, NeighborhoodAggregate], population: PopulationTable
    ) -> _Comparison:
        rates: dict[str, list[float]] = {metric: [] for metric in METRICS}
        for aggregate in aggregates.values():
            pop = population.population(aggregate.name)
            if pop is None:
                continue
            for metric, rate in self._rates(aggregate, pop).items():
                rates[metric].append(rate)

        return _Comparison(rates=rates, averages=category_averages(aggregates.values()))

    def _build_record(
        self,
        aggregate: NeighborhoodAggregate,
        comparison: _Comparison,
        population: PopulationTable,
        history: Sequence[float] | None,
    ) -> EnrichedNeighborhoodRecord:
        enrichment = self.config.enrichment
        weeks = self._period_weeks(aggregate)
        pop = population.population(aggregate.name)
        population_known = pop is not None

        if not population_known:
            logger.debug(
                f"No population data for '{aggregate.name}'",
                extra={"neighborhood": aggregate.name},
            )

        rates = self._rates(aggregate, pop)

        percentiles: dict[str, int | None] = {metric: None for metric in METRICS}
        if population_known:
            percentiles = {
                metric: percentile_rank(rates[metric], comparison.rates[metric])
                for metric in METRICS
            }

        # Scored from weekly counts, so population is not required
        weekly = {c: aggregate.count(c) / weeks for c in CATEGORY_PRIORITY}
        score = safety_score(weekly, self.config.scoring)
        tier = letter_tier(score, self.config.scoring.grade_thresholds)

        overall_safety = (
            100 - percentiles[TOTAL_KEY] if percentiles[TOTAL_KEY] is not None else None
        )

        quality = data_quality_score(
            population_known=population_known,
            population_confidence=population.confidence(aggregate.name),
            total_incidents=aggregate.total,
            last_updated=aggregate.date_range.end if aggregate.date_range else None,
            as_of=self.as_of,
            config=self.config.quality,
        )

        averages = comparison.averages
        ratios = CategoryComparison(
            violent=vs_average(aggregate.violent, averages["violent"]),
            car_theft=vs_average(aggregate.car_theft, averages["car_theft"]),
            break_in=vs_average(aggregate.break_in, averages["break_in"]),
            petty_theft=vs_average(aggregate.petty_theft, averages["petty_theft"]),
            overall=vs_average(aggregate.total, averages[TOTAL_KEY]),
        )

        trend = calculate_trend(history, self.config.trend)

        return EnrichedNeighborhoodRecord(
            name=aggregate.name,
            violent=aggregate.violent,
            car_theft=aggregate.car_theft,
            break_in=aggregate.break_in,
            petty_theft=aggregate.petty_theft,
            total=aggregate.total,
            incident_count=aggregate.incident_count,
            violent_per_capita=_round(rates["violent"]),
            car_theft_per_capita=_round(rates["car_theft"]),
            break_in_per_capita=_round(rates["break_in"]),
            petty_theft_per_capita=_round(rates["petty_theft"]),
            total_per_capita=_round(rates[TOTAL_KEY]),
            violent_percentile=percentiles["violent"],
            car_theft_percentile=percentiles["car_theft"],
            break_in_percentile=percentiles["break_in"],
            petty_theft_percentile=percentiles["petty_theft"],
            overall_safety_percentile=overall_safety,
            safety_score=score,
            safety_tier=tier,
            data_quality_score=quality,
            has_sufficient_data=has_sufficient_data(
                population_known, quality, aggregate.total, self.config.quality
            ),
            population_data_available=population_known,
            population=pop,
            population_density=population.density(aggregate.name),
            vs_average=ratios,
            violent_interval=poisson_interval(
                aggregate.violent,
                pop,
                weeks,
                z=enrichment.confidence_z,
                precision=enrichment.interval_precision,
            ),
            total_interval=poisson_interval(
                aggregate.total,
                pop,
                weeks,
                z=enrichment.confidence_z,
                precision=enrichment.interval_precision,
            ),
            trend=trend.indicator,
            trend_confidence=trend.confidence,
            period_weeks=weeks,
            date_range=aggregate.date_range,
            source=aggregate.source,
        )


def _round(value: float | None, digits: int = 2) -> float | None:
    return None if value is None else round(value, digits)
