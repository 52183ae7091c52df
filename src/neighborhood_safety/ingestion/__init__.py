"""
Neighborhood Safety - Incident Ingestion

Components:
    - RawIncident: One reported crime as received from the feed
    - IncidentScheme: Supported feed schemas (legacy, NIBRS)
    - IncidentPreprocessor: DataFrame -> RawIncident records
"""

from neighborhood_safety.ingestion.incidents import (
    IncidentPreprocessor,
    IncidentScheme,
    PreprocessingResult,
    RawIncident,
    incidents_from_records,
)

__all__ = [
    "IncidentPreprocessor",
    "IncidentScheme",
    "PreprocessingResult",
    "RawIncident",
    "incidents_from_records",
]
