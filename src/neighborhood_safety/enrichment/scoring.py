"""
Neighborhood Safety - Safety Scoring

Weighted composite score over the four crime categories. Each category's
weekly rate is clamped to a calibration band and inverted to a 0-100
sub-score; the weighted sum is the safety score (100 = safest).
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum

from neighborhood_safety.classification import CATEGORY_PRIORITY, CrimeCategory
from neighborhood_safety.enrichment.statistics import round_half_up
from neighborhood_safety.shared.config import (
    CalibrationBand,
    GradeThresholds,
    ScoringConfig,
)


class SafetyTier(StrEnum):
    """Letter grade for a safety score."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"

    @property
    def description(self) -> str:
        return TIER_DESCRIPTIONS[self]


TIER_DESCRIPTIONS = {
    SafetyTier.A: "Very Safe",
    SafetyTier.B: "Safe",
    SafetyTier.C: "Moderate",
    SafetyTier.D: "Elevated Risk",
    SafetyTier.F: "High Risk",
}


def category_subscore(value: float, band: CalibrationBand) -> float:
    """Clamp ``value`` into ``band`` and invert to 0-100."""
    clamped = min(max(value, band.min), band.max)
    return 100 * (band.max - clamped) / (band.max - band.min)


def safety_score(rates: Mapping[CrimeCategory | str, float], config: ScoringConfig) -> int:
    """
    Weighted, clamped, inverted composite score.

    Args:
        rates: Weekly incident rate per category
        config: Scoring weights and calibration bands

    Returns:
        Integer score in [0, 100]
    """
    total = 0.0
    for category in CATEGORY_PRIORITY:
        band = getattr(config.bands, category.value)
        weight = getattr(config.weights, category.value)
        total += weight * category_subscore(float(rates.get(category, 0.0)), band)
    return min(100, max(0, round_half_up(total)))


def letter_tier(score: int, thresholds: GradeThresholds) -> SafetyTier:
    """Map a score to its letter tier."""
    if score >= thresholds.A:
        return SafetyTier.A
    if score >= thresholds.B:
        return SafetyTier.B
    if score >= thresholds.C:
        return SafetyTier.C
    if score >= thresholds.D:
        return SafetyTier.D
    return SafetyTier.F
