"""Validation and summary of a written linking output."""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import geopandas as gpd
import numpy as np
import pandas as pd

from adminlink.core.errors import InputSourceError
from adminlink.core.models import MatchOutcome

_RESOLUTION_COLUMNS = ["parent_id", "parent_name", "state_name", "parent_state"]


@dataclass
class OutputSummary:
    """What a written output file contains."""
    path: str
    features: int
    has_bbox: bool
    bbox: Optional[List[float]] = None
    bbox_consistent: Optional[bool] = None
    outcomes: Dict[str, int] = field(default_factory=dict)
    per_state: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "path": self.path,
            "features": self.features,
            "has_bbox": self.has_bbox,
            "bbox": self.bbox,
            "bbox_consistent": self.bbox_consistent,
            "outcomes": self.outcomes,
            "per_state": self.per_state,
        }


def classify_outcomes(properties: pd.DataFrame) -> pd.Series:
    """
    Derive each record's outcome from its resolution properties.

    Args:
        properties: One row per feature, resolution columns may be missing

    Returns:
        Series of MatchOutcome values aligned with ``properties``
    """
    props = properties.reindex(columns=_RESOLUTION_COLUMNS)
    outcome = pd.Series(MatchOutcome.UNMATCHED.value, index=props.index, dtype=object)
    outcome[props["parent_id"].notna()] = MatchOutcome.LINKED.value
    outcome[props["parent_id"].notna() & props["parent_state"].notna()] = MatchOutcome.FULL_MATCH.value
    outcome[props["parent_id"].isna() & props["state_name"].notna()] = MatchOutcome.STATE_ONLY.value
    return outcome


def inspect_output(path: Path) -> OutputSummary:
    """
    Re-read an output file and summarize it.

    Args:
        path: Output GeoJSON written by a linking run

    Returns:
        OutputSummary

    Raises:
        InputSourceError: if the file is missing or is not a valid collection
    """
    path = Path(path)
    if not path.exists():
        raise InputSourceError(f"Output file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise InputSourceError(f"Output file validation failed: {e}") from e

    features = data.get("features") if isinstance(data, dict) else None
    if not isinstance(features, list):
        raise InputSourceError(f"{path} is not a GeoJSON FeatureCollection")

    declared_bbox = data.get("bbox")
    summary = OutputSummary(
        path=str(path),
        features=len(features),
        has_bbox=declared_bbox is not None,
        bbox=declared_bbox,
    )
    if not features:
        return summary

    gdf = gpd.GeoDataFrame.from_features(features)
    outcomes = classify_outcomes(pd.DataFrame(gdf.drop(columns="geometry")))
    summary.outcomes = {k: int(v) for k, v in outcomes.value_counts().items()}

    states = gdf.reindex(columns=["parent_state", "state_name"])
    state_names = states["parent_state"].fillna(states["state_name"]).dropna()
    summary.per_state = {str(k): int(v) for k, v in state_names.value_counts().sort_index().items()}

    if declared_bbox is not None:
        summary.bbox_consistent = bool(np.allclose(gdf.total_bounds, declared_bbox))
    return summary
