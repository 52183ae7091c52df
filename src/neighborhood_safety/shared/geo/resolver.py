"""
Neighborhood Safety - Spatial Resolver

Maps an incident's (lat, lon) to the enclosing neighborhood polygon.

Containment uses the even-odd (ray casting) rule with a half-open edge
convention: an edge counts as crossed when exactly one endpoint lies
strictly above the test latitude, and the crossing lies strictly east of
the test point. Points on a ring's western or southern edges therefore
resolve inside, points on its eastern or northern edges resolve outside.
For the unit square the vertex (0, 0) is inside and (1, 1) is outside.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from neighborhood_safety.shared.geo.boundaries import NeighborhoodBoundary, Vertex


def parse_coordinate(value: Any) -> float | None:
    """Parse a numeric or numeric-string coordinate; None if unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def is_valid_coordinate(lat: float | None, lon: float | None) -> bool:
    """
    Check a coordinate pair before any geometric test.

    Non-finite values and the (0, 0) missing-geocode sentinel are invalid.
    """
    if lat is None or lon is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return not (lat == 0 and lon == 0)


def point_in_polygon(lat: float, lon: float, vertices: Sequence[Vertex]) -> bool:
    """Even-odd ray cast of (lon, lat) against a ring of (lon, lat) vertices."""
    inside = False
    n = len(vertices)
    j = n - 1
    for i in range(n):
        xi, yi = vertices[i]
        xj, yj = vertices[j]
        if (yi > lat) != (yj > lat):
            crossing_lon = (xj - xi) * (lat - yi) / (yj - yi) + xi
            if lon < crossing_lon:
                inside = not inside
        j = i
    return inside


def resolve_neighborhood(
    lat: float,
    lon: float,
    boundaries: Sequence[NeighborhoodBoundary],
) -> NeighborhoodBoundary | None:
    """
    Find the first boundary containing the point.

    Returns None for invalid coordinates and for points outside every
    boundary. Overlapping boundaries resolve to the earliest in order.
    """
    if not is_valid_coordinate(lat, lon):
        return None

    for boundary in boundaries:
        if boundary.in_bbox(lat, lon) and point_in_polygon(lat, lon, boundary.vertices):
            return boundary
    return None
