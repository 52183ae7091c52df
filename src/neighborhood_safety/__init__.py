"""
Neighborhood Safety

Per-neighborhood crime profiles from point-located incident records:
classification, spatial join, aggregation and statistical enrichment.
"""

from neighborhood_safety.pipeline import (
    IncidentSource,
    PipelineResult,
    RunMetadata,
    records_to_frame,
    run_multi_source_pipeline,
    run_pipeline,
)

__version__ = "0.1.0"

__all__ = [
    "IncidentSource",
    "PipelineResult",
    "RunMetadata",
    "records_to_frame",
    "run_multi_source_pipeline",
    "run_pipeline",
]
