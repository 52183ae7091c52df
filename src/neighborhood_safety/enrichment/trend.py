"""
Neighborhood Safety - Trend Detection

Classifies a chronological series of period totals as increasing,
decreasing or stable using an ordinary least-squares fit.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

import numpy as np
from scipy import stats

from neighborhood_safety.shared.config import TrendConfig

logger = logging.getLogger(__name__)


class TrendIndicator(StrEnum):
    INCREASING = "increasing"
    STABLE = "stable"
    DECREASING = "decreasing"
    INSUFFICIENT_DATA = "insufficient_data"


@dataclass(frozen=True)
class TrendResult:
    indicator: TrendIndicator
    confidence: float = 0.0
    slope: float = 0.0

    def to_dict(self) -> dict[str, str | float]:
        return {
            "indicator": self.indicator.value,
            "confidence": self.confidence,
            "slope": self.slope,
        }


INSUFFICIENT = TrendResult(indicator=TrendIndicator.INSUFFICIENT_DATA)


def calculate_trend(history: Sequence[float] | None, config: TrendConfig | None = None) -> TrendResult:
    """
    Fit a line through ``history`` (oldest first).

    The slope is expressed as a percentage of the series mean; anything
    within ``slope_threshold_pct`` either way is stable. Confidence is
    the fit's r-squared.
    """
    config = config or TrendConfig()
    if not history:
        return INSUFFICIENT

    y = np.array([v for v in history if v is not None and math.isfinite(v)], dtype=float)
    if len(y) < config.min_points:
        return INSUFFICIENT

    x = np.arange(len(y), dtype=float)
    fit = stats.linregress(x, y)

    mean = float(y.mean())
    relative_slope = 0.0 if mean == 0 else float(fit.slope) / mean * 100
    r_squared = float(fit.rvalue) ** 2
    if not math.isfinite(r_squared):
        r_squared = 0.0

    if relative_slope > config.slope_threshold_pct:
        indicator = TrendIndicator.INCREASING
    elif relative_slope < -config.slope_threshold_pct:
        indicator = TrendIndicator.DECREASING
    else:
        indicator = TrendIndicator.STABLE

    logger.debug(f"Trend {indicator.value}: slope={fit.slope:.3f} ({relative_slope:.1f}%), r2={r_squared:.2f}")

    return TrendResult(indicator=indicator, confidence=round(r_squared, 2), slope=float(fit.slope))
