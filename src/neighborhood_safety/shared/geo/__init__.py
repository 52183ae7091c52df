"""
Neighborhood Safety - Geographic Utilities

Geographic processing utilities for incident data:
- Coordinate validation
- Neighborhood boundary loading and validation
- Point-in-polygon neighborhood assignment
"""

from neighborhood_safety.shared.geo.boundaries import (
    BoundaryConfigurationError,
    NeighborhoodBoundary,
    boundaries_from_geojson,
    load_boundaries,
    validate_boundaries,
)
from neighborhood_safety.shared.geo.resolver import (
    is_valid_coordinate,
    parse_coordinate,
    point_in_polygon,
    resolve_neighborhood,
)

__all__ = [
    "BoundaryConfigurationError",
    "NeighborhoodBoundary",
    "boundaries_from_geojson",
    "load_boundaries",
    "validate_boundaries",
    "is_valid_coordinate",
    "parse_coordinate",
    "point_in_polygon",
    "resolve_neighborhood",
]
