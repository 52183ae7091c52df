"""
Neighborhood Safety - Data Quality

Heuristic 0-100 score describing how far a neighborhood's profile can be
trusted. Zero incidents reduce the score because they usually signal
incomplete ingestion rather than genuine safety.
"""

from __future__ import annotations

from datetime import datetime

from neighborhood_safety.enrichment.population import UNKNOWN_CONFIDENCE
from neighborhood_safety.shared.config import QualityConfig
from neighborhood_safety.shared.temporal import age_in_days


def staleness_penalty(last_updated: datetime | None, as_of: datetime, config: QualityConfig) -> int:
    """
    Penalty for the age of the newest data.

    Unknown recency takes the largest tier's penalty.
    """
    if not config.staleness_tiers:
        return 0
    if last_updated is None:
        return config.staleness_tiers[0].penalty

    age = age_in_days(last_updated, as_of)
    for tier in config.staleness_tiers:
        if age > tier.older_than_days:
            return tier.penalty
    return 0


def data_quality_score(
    population_known: bool,
    population_confidence: str,
    total_incidents: int,
    last_updated: datetime | None,
    as_of: datetime,
    config: QualityConfig,
) -> int:
    """
    Score data quality for one neighborhood.

    Args:
        population_known: Whether a non-zero population is on record
        population_confidence: Confidence tag of the population source
        total_incidents: All incidents attributed to the neighborhood
        last_updated: End of the reporting window, if known
        as_of: Reference time for staleness
        config: Penalty configuration

    Returns:
        Score in [0, 100]
    """
    score = 100

    # Confidence only qualifies a known population
    if not population_known:
        score -= config.missing_population_penalty
    else:
        score -= config.confidence_penalties.get(
            population_confidence,
            config.confidence_penalties.get(UNKNOWN_CONFIDENCE, 0),
        )

    score -= staleness_penalty(last_updated, as_of, config)

    if total_incidents == 0:
        score -= config.zero_incident_penalty
    elif total_incidents < config.low_incident_threshold:
        score -= config.low_incident_penalty

    return min(100, max(0, score))


def has_sufficient_data(
    population_known: bool, quality_score: int, total_incidents: int, config: QualityConfig
) -> bool:
    return population_known and quality_score >= config.sufficiency_threshold and total_incidents > 0
