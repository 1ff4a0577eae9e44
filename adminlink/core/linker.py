"""Single-level parent linking (country to state, state to district)."""
from typing import Sequence

from adminlink.core import fallback
from adminlink.core.cascade import PairErrorLog, Predicate, feature_bbox, first_match
from adminlink.core.geometry import explode_polygons, intersects, is_within, overlaps
from adminlink.core.models import BoundaryFeature, Resolution
from adminlink.core.spatial_index import SpatialIndex
from adminlink.utils.logging import log_structured

LINK_PREDICATES: Sequence[Predicate] = (is_within, overlaps, intersects)


class ParentLinker:
    """Sets ``parent_id``/``parent_name`` on each child from one parent level."""

    def __init__(self, parent_index: SpatialIndex):
        self.parent_index = parent_index

    def resolve(self, child: BoundaryFeature, verbose: bool = False) -> Resolution:
        bbox = feature_bbox(child)
        errors = PairErrorLog(child)

        child_parts = explode_polygons(child.geometry)
        parent = None
        if child_parts:
            candidates = (entry.feature for entry in self.parent_index.candidates(bbox))
            parent = first_match(
                child_parts,
                candidates,
                LINK_PREDICATES,
                lambda candidate, e: errors("Parent", candidate, e),
            )

        if verbose and parent is not None:
            log_structured(
                "info",
                f"{child.label()} ({child.shape_name}) linked to {parent.shape_name}",
                feature=child.label(),
                parent_id=parent.shape_id,
                parent_name=parent.shape_name,
            )
        return Resolution(fallback.linked(child, parent, bbox), errors.count)
