"""Bounding-box spatial index over parent candidate polygons."""
from typing import Iterable, List, Optional

from shapely import STRtree, box

from adminlink.core.errors import GeometryError
from adminlink.core.geometry import compute_bbox
from adminlink.core.models import BoundaryFeature, BoundingBox, IndexEntry
from adminlink.utils.logging import log_structured


class SpatialIndex:
    """
    Rectangle index over parent candidates.

    Uses a shapely STRtree built once over the candidate boxes. Query results
    come back in tree order, which is not insertion order and not proximity
    order.
    """

    def __init__(self, entries: List[IndexEntry], dropped: int = 0):
        """
        Bulk-load the index.

        Args:
            entries: Index entries with finite bounding boxes
            dropped: Number of candidates left out because their box failed
        """
        self._entries = list(entries)
        self.dropped = dropped
        self._tree: Optional[STRtree] = None
        if self._entries:
            self._tree = STRtree([box(*entry.bbox.as_list()) for entry in self._entries])

    def __len__(self) -> int:
        return len(self._entries)

    def search(self, bbox: BoundingBox) -> List[IndexEntry]:
        """Entries whose bounding box overlaps ``bbox``."""
        if self._tree is None:
            return []
        hits = self._tree.query(box(*bbox.as_list()))
        return [self._entries[i] for i in hits]

    def all(self) -> List[IndexEntry]:
        """Every entry in load order."""
        return list(self._entries)

    def candidates(self, bbox: Optional[BoundingBox]) -> List[IndexEntry]:
        """Search by ``bbox``, or everything when the querying box is unknown."""
        if bbox is None:
            return self.all()
        return self.search(bbox)


def build_spatial_index(features: Iterable[BoundaryFeature], level: str = "parent") -> SpatialIndex:
    """
    Build a spatial index from parent candidate features.

    Features whose bounding box cannot be computed are logged and left out;
    they can never be returned as candidates.

    Args:
        features: Parent candidate features
        level: Level name used in log messages

    Returns:
        SpatialIndex over the surviving features
    """
    entries = []
    dropped = 0
    for feature in features:
        try:
            entries.append(IndexEntry(bbox=compute_bbox(feature.geometry), feature=feature))
        except GeometryError as e:
            dropped += 1
            log_structured(
                "warning",
                f"BBox error for {level} feature {feature.label()}: {e}",
                admin_level=level,
                feature=feature.label(),
            )

    log_structured(
        "info",
        f"Spatial index built for {level}",
        admin_level=level,
        indexed=len(entries),
        dropped=dropped,
    )
    return SpatialIndex(entries, dropped=dropped)
