"""Property assignment for each terminal outcome of parent resolution."""
from typing import Any, Dict, Optional

from adminlink.core.models import BoundaryFeature, BoundingBox, MatchOutcome, ResolvedRecord
from adminlink.utils.logging import log_structured

CASCADE_FIELDS = ("shapeID", "shapeName", "parent_id", "parent_name", "state_name", "parent_state")


def _cascade_properties(feature: BoundaryFeature, **resolved: Any) -> Dict[str, Any]:
    properties: Dict[str, Any] = dict.fromkeys(CASCADE_FIELDS)
    properties["shapeID"] = feature.properties.get("shapeID") or None
    properties["shapeName"] = feature.properties.get("shapeName") or None
    for key, value in resolved.items():
        properties[key] = value or None
    return properties


def full_match(
    feature: BoundaryFeature,
    district: BoundaryFeature,
    state: BoundaryFeature,
    bbox: Optional[BoundingBox],
) -> ResolvedRecord:
    """Both levels matched: parent is the district, state kept alongside."""
    return ResolvedRecord(
        feature=feature,
        properties=_cascade_properties(
            feature,
            parent_id=district.shape_id,
            parent_name=district.shape_name,
            parent_state=state.shape_name,
        ),
        outcome=MatchOutcome.FULL_MATCH,
        bbox=bbox,
    )


def state_only(
    feature: BoundaryFeature,
    state: BoundaryFeature,
    bbox: Optional[BoundingBox],
) -> ResolvedRecord:
    """State matched but no district in its group did: demote to the state."""
    return ResolvedRecord(
        feature=feature,
        properties=_cascade_properties(
            feature,
            parent_name=state.shape_name,
            state_name=state.shape_name,
        ),
        outcome=MatchOutcome.STATE_ONLY,
        bbox=bbox,
    )


def unmatched(
    feature: BoundaryFeature,
    bbox: Optional[BoundingBox],
    reason: str = "No state match",
) -> ResolvedRecord:
    """Nothing matched: parent fields are explicit nulls."""
    log_structured(
        "warning",
        f"{reason} for feature {feature.label()}",
        feature=feature.label(),
        shape_name=feature.shape_name,
    )
    return ResolvedRecord(
        feature=feature,
        properties=_cascade_properties(feature),
        outcome=MatchOutcome.UNMATCHED,
        bbox=bbox,
    )


def linked(
    feature: BoundaryFeature,
    parent: Optional[BoundaryFeature],
    bbox: Optional[BoundingBox],
) -> ResolvedRecord:
    """
    Single-level link: keep every source property and set the parent fields.

    A missing parent sets both fields to null and is logged as a warning.
    """
    properties = dict(feature.properties)
    if parent is None:
        properties["parent_id"] = None
        properties["parent_name"] = None
        log_structured(
            "warning",
            f"No parent for: {feature.shape_name or feature.label()}",
            feature=feature.label(),
        )
        return ResolvedRecord(feature, properties, MatchOutcome.UNMATCHED, bbox)

    properties["parent_id"] = parent.shape_id
    properties["parent_name"] = parent.shape_name
    return ResolvedRecord(feature, properties, MatchOutcome.LINKED, bbox)
