"""Two-level cascade: state by spatial index, then district within that state."""
from typing import Callable, Iterable, Optional, Sequence

from shapely.geometry import Polygon

from adminlink.core import fallback
from adminlink.core.errors import GeometryError
from adminlink.core.geometry import compute_bbox, explode_polygons, intersects, is_within, overlaps
from adminlink.core.grouping import GroupingTable
from adminlink.core.models import BoundaryFeature, BoundingBox, Resolution
from adminlink.core.spatial_index import SpatialIndex
from adminlink.utils.logging import log_structured

Predicate = Callable[[Polygon, Polygon], bool]

# Evaluated in order; the first true result decides the pair
STATE_PREDICATES: Sequence[Predicate] = (is_within, intersects)
DISTRICT_PREDICATES: Sequence[Predicate] = (is_within, overlaps, intersects)


class PairErrorLog:
    """Counts and reports geometry failures while resolving one child."""

    def __init__(self, child: BoundaryFeature):
        self.child = child
        self.count = 0

    def __call__(self, level: str, candidate: BoundaryFeature, error: GeometryError) -> None:
        self.count += 1
        log_structured(
            "warning",
            f"{level} spatial check failed for {self.child.label()}: {error}",
            admin_level=level,
            feature=self.child.label(),
            candidate=candidate.label(),
        )


def pair_matches(child_part, candidate_part, predicates: Sequence[Predicate]) -> bool:
    """Short-circuit the predicate chain over one (child part, candidate part) pair."""
    return any(predicate(child_part, candidate_part) for predicate in predicates)


def candidate_matches(
    child_parts: Sequence[Polygon],
    candidate: BoundaryFeature,
    predicates: Sequence[Predicate],
    on_error: Callable[[BoundaryFeature, GeometryError], None],
) -> bool:
    """True if any (child part, candidate part) pair satisfies the chain.

    A pair whose predicate raises GeometryError counts as not matching.
    """
    candidate_parts = explode_polygons(candidate.geometry)
    for child_part in child_parts:
        for candidate_part in candidate_parts:
            try:
                if pair_matches(child_part, candidate_part, predicates):
                    return True
            except GeometryError as e:
                on_error(candidate, e)
    return False


def first_match(
    child_parts: Sequence[Polygon],
    candidates: Iterable[BoundaryFeature],
    predicates: Sequence[Predicate],
    on_error: Callable[[BoundaryFeature, GeometryError], None],
) -> Optional[BoundaryFeature]:
    """First candidate, in enumeration order, with any matching part pair."""
    matches = (
        candidate
        for candidate in candidates
        if candidate_matches(child_parts, candidate, predicates, on_error)
    )
    return next(matches, None)


def feature_bbox(feature: BoundaryFeature) -> Optional[BoundingBox]:
    """Bounding box of the child as written out, or None (logged) when it cannot be computed."""
    try:
        return compute_bbox(feature.extent_geometry)
    except GeometryError as e:
        log_structured(
            "warning",
            f"BBox failed for feature {feature.label()}: {e}",
            feature=feature.label(),
        )
        return None


class CascadeMatcher:
    """
    Resolves each child to a district (via its state) by geometry alone.

    The state index and district groups are built once and only read here,
    so resolving one child has no effect on resolving another.
    """

    def __init__(self, state_index: SpatialIndex, district_groups: GroupingTable):
        """
        Args:
            state_index: Spatial index over state (level-1) polygons
            district_groups: District (level-2) features keyed by their state's name
        """
        self.state_index = state_index
        self.district_groups = district_groups

    def match_state(
        self,
        child_parts: Sequence[Polygon],
        bbox: Optional[BoundingBox],
        errors: PairErrorLog,
    ) -> Optional[BoundaryFeature]:
        """First state candidate from the index the child lies within or intersects."""
        candidates = (entry.feature for entry in self.state_index.candidates(bbox))
        return first_match(
            child_parts,
            candidates,
            STATE_PREDICATES,
            lambda candidate, e: errors("State", candidate, e),
        )

    def match_district(
        self,
        child_parts: Sequence[Polygon],
        state: BoundaryFeature,
        errors: PairErrorLog,
        verbose: bool = False,
    ) -> Optional[BoundaryFeature]:
        """First district of the state's group the child lies within, overlaps or intersects."""
        candidates = self.district_groups.lookup(state.shape_name)
        if verbose:
            log_structured(
                "info",
                f"Checking {len(candidates)} district candidates for {state.shape_name}",
                state=state.shape_name,
                candidates=len(candidates),
            )
        return first_match(
            child_parts,
            candidates,
            DISTRICT_PREDICATES,
            lambda candidate, e: errors("District", candidate, e),
        )

    def resolve(self, child: BoundaryFeature, verbose: bool = False) -> Resolution:
        """
        Resolve one child feature.

        Args:
            child: Finest-level feature to place
            verbose: Log every step of the match for this child

        Returns:
            Resolution holding exactly one record for the child
        """
        bbox = feature_bbox(child)
        errors = PairErrorLog(child)

        child_parts = explode_polygons(child.geometry)
        if not child_parts:
            record = fallback.unmatched(child, bbox, reason="No valid polygons")
            return Resolution(record, errors.count)

        state = self.match_state(child_parts, bbox, errors)
        if state is None:
            return Resolution(fallback.unmatched(child, bbox), errors.count)

        if verbose:
            log_structured(
                "info",
                f"{child.label()} ({child.shape_name}) belongs to state: {state.shape_name}",
                feature=child.label(),
                state=state.shape_name,
            )

        district = self.match_district(child_parts, state, errors, verbose=verbose)
        if district is None:
            if verbose:
                log_structured(
                    "info",
                    f"No district match for {child.label()}, falling back to state {state.shape_name}",
                    feature=child.label(),
                    state=state.shape_name,
                )
            return Resolution(fallback.state_only(child, state, bbox), errors.count)

        if verbose:
            log_structured(
                "info",
                f"Matched {child.label()} to district: {district.shape_name}",
                feature=child.label(),
                parent_id=district.shape_id,
                parent_name=district.shape_name,
            )
        return Resolution(fallback.full_match(child, district, state, bbox), errors.count)
