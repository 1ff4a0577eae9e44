"""Loading GeoJSON boundary collections from disk."""
import json
import math
from pathlib import Path
from typing import Any, Optional

from shapely.errors import ShapelyError
from shapely.geometry import shape

from adminlink.core.errors import InputSourceError, StructuralError
from adminlink.core.models import BoundaryFeature, FeatureCollection
from adminlink.utils.logging import log_structured


def _non_finite_to_null(token: str) -> None:
    """NaN and Infinity are not JSON; read them as null."""
    return None


def _finite_float(text: str) -> Optional[float]:
    value = float(text)
    return value if math.isfinite(value) else None


def parse_feature(raw: Any, position: int, simplify_tolerance: Optional[float] = None) -> BoundaryFeature:
    """
    Build a BoundaryFeature from one GeoJSON feature mapping.

    Args:
        raw: Decoded GeoJSON feature
        position: Index of the feature in its collection
        simplify_tolerance: Simplify the matching geometry by this tolerance

    Returns:
        BoundaryFeature

    Raises:
        StructuralError: if geometry or properties are missing or unusable
    """
    if not isinstance(raw, dict):
        raise StructuralError(position, "feature is not an object")
    properties = raw.get("properties")
    if not isinstance(properties, dict):
        raise StructuralError(position, "missing properties")
    source_geometry = raw.get("geometry")
    if not isinstance(source_geometry, dict):
        raise StructuralError(position, "missing geometry")

    try:
        geometry = shape(source_geometry)
    except (ShapelyError, ValueError, TypeError, KeyError, IndexError) as e:
        raise StructuralError(position, f"unreadable geometry: {e}") from e

    outline = None
    if simplify_tolerance:
        outline = geometry
        geometry = geometry.simplify(simplify_tolerance, preserve_topology=True)

    return BoundaryFeature(
        position=position,
        properties=properties,
        geometry=geometry,
        source_geometry=source_geometry,
        feature_id=raw.get("id"),
        outline=outline,
    )


def load_feature_collection(path: Path, simplify_tolerance: Optional[float] = None) -> FeatureCollection:
    """
    Load a GeoJSON FeatureCollection, keeping the source order.

    Structurally invalid features are skipped, counted and logged.

    Args:
        path: GeoJSON file path
        simplify_tolerance: Optional simplification of the matching geometry

    Returns:
        FeatureCollection of valid features

    Raises:
        InputSourceError: if the file is missing, unparsable or not a collection
    """
    path = Path(path)
    if not path.exists():
        raise InputSourceError(f"Input file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f, parse_constant=_non_finite_to_null, parse_float=_finite_float)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InputSourceError(f"Failed to parse {path}: {e}") from e

    raw_features = data.get("features") if isinstance(data, dict) else None
    if not isinstance(raw_features, list):
        raise InputSourceError(f"{path} is not a GeoJSON FeatureCollection")

    features = []
    skipped = 0
    for position, raw in enumerate(raw_features):
        try:
            features.append(parse_feature(raw, position, simplify_tolerance))
        except StructuralError as e:
            skipped += 1
            log_structured("warning", f"Skipping {e}", path=str(path), position=position + 1, reason=e.reason)

    log_structured(
        "info",
        f"Loaded {path.name}",
        path=str(path),
        features=len(features),
        skipped=skipped,
    )
    return FeatureCollection(path=str(path), features=features, skipped=skipped)
