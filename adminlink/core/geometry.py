"""Geometry predicates and bounding boxes for boundary matching."""
import math
from typing import List

from shapely.errors import GEOSException, ShapelyError
from shapely.geometry import Polygon, MultiPolygon, GeometryCollection

from adminlink.core.errors import GeometryError
from adminlink.core.models import BoundingBox

_GEOMETRY_FAILURES = (GEOSException, ShapelyError, ValueError, TypeError)


def compute_bbox(geometry) -> BoundingBox:
    """
    Compute the bounding box of a geometry.

    Args:
        geometry: Shapely geometry object

    Returns:
        BoundingBox with finite values on all four axes

    Raises:
        GeometryError: if the geometry is missing, empty or degenerate
    """
    if geometry is None or geometry.is_empty:
        raise GeometryError("Geometry is None or empty")
    try:
        bounds = geometry.bounds
    except _GEOMETRY_FAILURES as e:
        raise GeometryError(f"Bounds failed: {e}") from e
    if len(bounds) != 4 or not all(math.isfinite(v) for v in bounds):
        raise GeometryError(f"Degenerate bounds: {bounds}")
    return BoundingBox.from_bounds(bounds)


def explode_polygons(geometry) -> List[Polygon]:
    """Split a geometry into its single-polygon parts; non-areal geometries give []."""
    if geometry is None or geometry.is_empty:
        return []
    if isinstance(geometry, Polygon):
        return [geometry]
    if isinstance(geometry, MultiPolygon):
        return [part for part in geometry.geoms if not part.is_empty]
    if isinstance(geometry, GeometryCollection):
        parts = []
        for member in geometry.geoms:
            parts.extend(explode_polygons(member))
        return parts
    return []


def _predicate(name: str, a, b) -> bool:
    try:
        return bool(getattr(a, name)(b))
    except _GEOMETRY_FAILURES as e:
        raise GeometryError(f"{name} failed: {e}") from e


def is_within(a, b) -> bool:
    """True if ``a`` lies inside ``b``."""
    return _predicate("within", a, b)


def overlaps(a, b) -> bool:
    """True if ``a`` and ``b`` share interior area without either containing the other."""
    return _predicate("overlaps", a, b)


def intersects(a, b) -> bool:
    """True if ``a`` and ``b`` share any point, boundaries included."""
    return _predicate("intersects", a, b)
