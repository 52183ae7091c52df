"""
Neighborhood Safety - Temporal Utilities

Temporal processing utilities for incident data:
- Timestamp parsing and UTC normalization
- Reporting window (date range) handling
- Recency calculations
"""

from neighborhood_safety.shared.temporal.parsers import (
    DateRange,
    age_in_days,
    infer_date_range,
    parse_timestamp,
    period_weeks,
)

__all__ = ["DateRange", "age_in_days", "infer_date_range", "parse_timestamp", "period_weeks"]
