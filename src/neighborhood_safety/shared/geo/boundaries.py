"""
Neighborhood Safety - Neighborhood Boundaries

Read-only polygon reference data used by the spatial resolver.

Boundaries are validated once at load time. A malformed polygon is a
configuration problem, not a data problem, so it raises
``BoundaryConfigurationError`` instead of being skipped.

Usage:
    from neighborhood_safety.shared.geo import load_boundaries

    boundaries = load_boundaries("data/la_times_neighborhoods.geojson")
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Polygon, shape

logger = logging.getLogger(__name__)

Vertex = tuple[float, float]  # (lon, lat)

MIN_VERTICES = 3


@dataclass(frozen=True)
class NeighborhoodBoundary:
    """
    A named polygon ring of (lon, lat) vertices.

    The ring may be given closed (last vertex repeats the first) or open;
    the closing vertex is dropped so ``vertices`` is always the open ring.
    """

    name: str
    vertices: tuple[Vertex, ...]
    bbox: tuple[float, float, float, float] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.name or not str(self.name).strip():
            raise BoundaryConfigurationError("Boundary name must be a non-empty string")

        try:
            ring = tuple((float(lon), float(lat)) for lon, lat in self.vertices)
        except (TypeError, ValueError) as e:
            raise BoundaryConfigurationError(
                f"Boundary '{self.name}' has a malformed vertex: {e}"
            ) from e
        if len(ring) > 1 and ring[0] == ring[-1]:
            ring = ring[:-1]

        for lon, lat in ring:
            if not (math.isfinite(lon) and math.isfinite(lat)):
                raise BoundaryConfigurationError(
                    f"Boundary '{self.name}' has a non-finite vertex ({lon}, {lat})"
                )

        if len(set(ring)) < MIN_VERTICES:
            raise BoundaryConfigurationError(
                f"Boundary '{self.name}' has {len(set(ring))} distinct vertices, "
                f"at least {MIN_VERTICES} are required"
            )

        lons = [v[0] for v in ring]
        lats = [v[1] for v in ring]
        object.__setattr__(self, "vertices", ring)
        object.__setattr__(self, "bbox", (min(lons), min(lats), max(lons), max(lats)))

    def in_bbox(self, lat: float, lon: float) -> bool:
        """Cheap rejection test before the ray cast."""
        min_lon, min_lat, max_lon, max_lat = self.bbox
        return min_lon <= lon <= max_lon and min_lat <= lat <= max_lat


def validate_boundaries(boundaries: Iterable[NeighborhoodBoundary]) -> list[NeighborhoodBoundary]:
    """Return boundaries as a list, rejecting duplicate names."""
    result: list[NeighborhoodBoundary] = []
    seen: set[str] = set()
    for boundary in boundaries:
        if boundary.name in seen:
            raise BoundaryConfigurationError(f"Duplicate boundary name: '{boundary.name}'")
        seen.add(boundary.name)
        result.append(boundary)
    return result


def boundaries_from_geojson(
    geojson: dict[str, Any],
    name_property: str = "name",
) -> list[NeighborhoodBoundary]:
    """
    Build boundaries from a GeoJSON FeatureCollection.

    Only the exterior ring is used. For MultiPolygon features the first
    polygon is taken, matching how the neighborhood files are published.

    Args:
        geojson: Parsed FeatureCollection
        name_property: Feature property holding the neighborhood name

    Raises:
        BoundaryConfigurationError: On unsupported geometry, missing names,
            degenerate rings or duplicate names
    """
    if geojson.get("type") != "FeatureCollection":
        raise BoundaryConfigurationError(
            f"Expected a GeoJSON FeatureCollection, got {geojson.get('type')!r}"
        )

    boundaries = []
    for index, feature in enumerate(geojson.get("features", [])):
        properties = feature.get("properties") or {}
        name = properties.get(name_property)
        if not name:
            raise BoundaryConfigurationError(
                f"Feature {index} has no '{name_property}' property"
            )

        try:
            geometry = shape(feature["geometry"])
        except (KeyError, TypeError, ValueError, AttributeError, GEOSException) as e:
            raise BoundaryConfigurationError(f"Feature '{name}' has invalid geometry: {e}") from e

        if isinstance(geometry, MultiPolygon):
            geometry = geometry.geoms[0]
        if not isinstance(geometry, Polygon):
            raise BoundaryConfigurationError(
                f"Feature '{name}' has unsupported geometry type {geometry.geom_type}"
            )

        boundaries.append(
            NeighborhoodBoundary(
                name=str(name),
                vertices=tuple((x, y) for x, y, *_ in geometry.exterior.coords),
            )
        )

    return validate_boundaries(boundaries)


def load_boundaries(path: str | Path, name_property: str = "name") -> list[NeighborhoodBoundary]:
    """Load and validate boundaries from a GeoJSON file."""
    path = Path(path)
    with open(path) as f:
        geojson = json.load(f)

    boundaries = boundaries_from_geojson(geojson, name_property=name_property)
    logger.info(
        f"Loaded {len(boundaries)} neighborhood boundaries from {path.name}",
        extra={"path": str(path), "boundaries": len(boundaries)},
    )
    return boundaries


# =============================================================================
# Exception Classes
# =============================================================================


class BoundaryConfigurationError(Exception):
    """Raised when boundary reference data is structurally invalid."""
