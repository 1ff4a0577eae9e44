"""Data models for boundary features and linking results."""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any


class MatchOutcome(str, Enum):
    """Terminal state of one child's parent resolution."""
    FULL_MATCH = "full_match"
    STATE_ONLY = "state_only"
    LINKED = "linked"
    UNMATCHED = "unmatched"


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box; the empty box is seeded at +inf/-inf."""
    min_x: float = math.inf
    min_y: float = math.inf
    max_x: float = -math.inf
    max_y: float = -math.inf

    @classmethod
    def empty(cls) -> "BoundingBox":
        return cls()

    @classmethod
    def from_bounds(cls, bounds) -> "BoundingBox":
        min_x, min_y, max_x, max_y = bounds
        return cls(float(min_x), float(min_y), float(max_x), float(max_y))

    def union(self, other: Optional["BoundingBox"]) -> "BoundingBox":
        """Smallest box covering both boxes. ``None`` leaves the box unchanged."""
        if other is None:
            return self
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in self.as_list())

    def as_list(self) -> List[float]:
        return [self.min_x, self.min_y, self.max_x, self.max_y]


@dataclass
class BoundaryFeature:
    """
    One administrative boundary polygon loaded from a GeoJSON collection.

    ``geometry`` is the shapely geometry used for matching (possibly
    simplified); ``source_geometry`` is the GeoJSON mapping written back out
    and ``outline`` its unsimplified shapely form, when simplification ran.
    """
    position: int
    properties: Dict[str, Any]
    geometry: Any
    source_geometry: Dict[str, Any]
    feature_id: Optional[Any] = None
    outline: Optional[Any] = None

    @property
    def extent_geometry(self) -> Any:
        """Geometry whose bounds describe what is written out."""
        return self.outline if self.outline is not None else self.geometry

    @property
    def shape_id(self) -> Optional[Any]:
        return self.properties.get("shapeID") or self.feature_id

    @property
    def shape_name(self) -> Optional[str]:
        return self.properties.get("shapeName") or self.properties.get("shapename")

    def label(self) -> str:
        """Short human readable identifier for log lines."""
        return str(self.shape_id or f"#{self.position + 1}")


@dataclass(frozen=True)
class IndexEntry:
    """Bounding box of a parent candidate plus a reference to the feature itself."""
    bbox: BoundingBox
    feature: BoundaryFeature


@dataclass
class ResolvedRecord:
    """A child feature with its final parent properties and bounding box."""
    feature: BoundaryFeature
    properties: Dict[str, Any]
    outcome: MatchOutcome
    bbox: Optional[BoundingBox] = None

    def to_geojson(self) -> Dict[str, Any]:
        """Convert to a GeoJSON Feature mapping for serialization."""
        return {
            "type": "Feature",
            "properties": self.properties,
            "bbox": self.bbox.as_list() if self.bbox is not None else None,
            "geometry": self.feature.source_geometry,
        }


@dataclass
class Resolution:
    """What resolving one child returns: the record, its box and error count."""
    record: ResolvedRecord
    geometry_errors: int = 0

    @property
    def bbox(self) -> Optional[BoundingBox]:
        return self.record.bbox


@dataclass
class FeatureCollection:
    """Structurally valid features of one input file plus the skip count."""
    path: str
    features: List[BoundaryFeature]
    skipped: int = 0

    def __len__(self) -> int:
        return len(self.features)


@dataclass
class RunStats:
    """Aggregate counters for one linking run."""
    total: int = 0
    processed: int = 0
    skipped_structural: int = 0
    geometry_errors: int = 0
    bbox_errors: int = 0
    parents_dropped: int = 0
    outcomes: Dict[str, int] = field(default_factory=dict)
    bbox: BoundingBox = field(default_factory=BoundingBox.empty)

    def record(self, resolution: Resolution) -> None:
        """Fold one resolution into the counters."""
        self.processed += 1
        self.geometry_errors += resolution.geometry_errors
        outcome = resolution.record.outcome.value
        self.outcomes[outcome] = self.outcomes.get(outcome, 0) + 1
        if resolution.bbox is None:
            self.bbox_errors += 1
        else:
            self.bbox = self.bbox.union(resolution.bbox)

    def count(self, outcome: MatchOutcome) -> int:
        return self.outcomes.get(outcome.value, 0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "total": self.total,
            "processed": self.processed,
            "skipped_structural": self.skipped_structural,
            "geometry_errors": self.geometry_errors,
            "bbox_errors": self.bbox_errors,
            "parents_dropped": self.parents_dropped,
            "outcomes": dict(self.outcomes),
            "bbox": self.bbox.as_list() if self.bbox.is_finite() else None,
        }


