"""
Neighborhood Safety - Statistical Enrichment

Components:
    - PopulationTable: Population reference data
    - statistics: Per-capita rates, percentiles, confidence intervals
    - scoring: Weighted safety score and letter tiers
    - quality: Data-quality score and sufficiency flag
    - trend: Least-squares trend indicator
    - NeighborhoodEnricher: Aggregate -> EnrichedNeighborhoodRecord
"""

from neighborhood_safety.enrichment.enricher import (
    CategoryComparison,
    EnrichedNeighborhoodRecord,
    NeighborhoodEnricher,
)
from neighborhood_safety.enrichment.population import (
    PopulationConfidence,
    PopulationDataError,
    PopulationRecord,
    PopulationTable,
)
from neighborhood_safety.enrichment.quality import data_quality_score, has_sufficient_data
from neighborhood_safety.enrichment.scoring import SafetyTier, letter_tier, safety_score
from neighborhood_safety.enrichment.statistics import (
    ConfidenceInterval,
    confidence_interval,
    per_capita_rate,
    percentile_rank,
    vs_average,
)
from neighborhood_safety.enrichment.trend import TrendIndicator, TrendResult, calculate_trend

__all__ = [
    "CategoryComparison",
    "EnrichedNeighborhoodRecord",
    "NeighborhoodEnricher",
    "PopulationConfidence",
    "PopulationDataError",
    "PopulationRecord",
    "PopulationTable",
    "data_quality_score",
    "has_sufficient_data",
    "SafetyTier",
    "letter_tier",
    "safety_score",
    "ConfidenceInterval",
    "confidence_interval",
    "per_capita_rate",
    "percentile_rank",
    "vs_average",
    "TrendIndicator",
    "TrendResult",
    "calculate_trend",
]
