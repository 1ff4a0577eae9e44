"""End-to-end linking runs: load, resolve every child in order, stream output."""
from pathlib import Path
from typing import Iterable, Optional

from tqdm import tqdm

from adminlink.core.cascade import CascadeMatcher
from adminlink.core.config import DEBUG_SAMPLE_SIZE
from adminlink.core.grouping import GroupingTable
from adminlink.core.linker import ParentLinker
from adminlink.core.loader import load_feature_collection
from adminlink.core.models import BoundaryFeature, RunStats
from adminlink.core.spatial_index import build_spatial_index
from adminlink.core.writer import StreamingFeatureWriter
from adminlink.utils.logging import log_context, log_structured
from adminlink.utils.timing import Timer


def _fold(
    matcher,
    children: Iterable[BoundaryFeature],
    stats: RunStats,
    output_path: Optional[Path],
    sample_size: int,
    progress: bool,
) -> RunStats:
    """Resolve children in order, writing each record as soon as it exists."""
    children = list(children)
    iterator = tqdm(children, desc="Linking features", disable=not progress)

    if output_path is None:
        for i, child in enumerate(iterator):
            stats.record(matcher.resolve(child, verbose=i < sample_size))
        return stats

    with StreamingFeatureWriter(output_path) as writer:
        for i, child in enumerate(iterator):
            resolution = matcher.resolve(child, verbose=i < sample_size)
            writer.append(resolution.record)
            stats.record(resolution)
    return stats


def _finish(stats: RunStats, operation: str) -> RunStats:
    log_structured("info", f"{operation} finished", **stats.to_dict())
    return stats


def run_parent_link(
    parent_path: Path,
    child_path: Path,
    output_path: Optional[Path],
    limit: Optional[int] = None,
    simplify_tolerance: Optional[float] = None,
    sample_size: int = DEBUG_SAMPLE_SIZE,
    progress: bool = True,
) -> RunStats:
    """
    Link every child feature to one parent level.

    Args:
        parent_path: GeoJSON with the parent polygons
        child_path: GeoJSON with the child polygons
        output_path: Where to write the linked collection; None for a dry run
        limit: Only process the first N children
        simplify_tolerance: Optional simplification applied before matching
        sample_size: Number of leading children logged in full detail
        progress: Show a progress bar

    Returns:
        RunStats for the run

    Raises:
        InputSourceError: if an input file is missing or unparsable
    """
    with log_context(run="parent_link", children=Path(child_path).name), Timer("parent_link"):
        parents = load_feature_collection(parent_path, simplify_tolerance)
        children = load_feature_collection(child_path, simplify_tolerance)

        index = build_spatial_index(parents.features, level="parent")
        stats = RunStats(
            total=len(children),
            skipped_structural=children.skipped,
            parents_dropped=index.dropped,
        )
        selected = children.features[:limit] if limit is not None else children.features
        _fold(ParentLinker(index), selected, stats, output_path, sample_size, progress)
        return _finish(stats, "Parent linking")


def run_cascade(
    state_path: Path,
    district_path: Path,
    child_path: Path,
    output_path: Optional[Path],
    limit: Optional[int] = None,
    simplify_tolerance: Optional[float] = None,
    sample_size: int = DEBUG_SAMPLE_SIZE,
    progress: bool = True,
) -> RunStats:
    """
    Resolve every child to a district through its state.

    ``district_path`` must already carry ``parent_name`` (the output of
    ``run_parent_link`` from states to districts).

    Args:
        state_path: GeoJSON with state (level-1) polygons
        district_path: Linked GeoJSON with district (level-2) polygons
        child_path: GeoJSON with the finest-level polygons
        output_path: Where to write the resolved collection; None for a dry run
        limit: Only process the first N children
        simplify_tolerance: Optional simplification applied before matching
        sample_size: Number of leading children logged in full detail
        progress: Show a progress bar

    Returns:
        RunStats for the run

    Raises:
        InputSourceError: if an input file is missing or unparsable
    """
    with log_context(run="cascade", children=Path(child_path).name), Timer("cascade"):
        states = load_feature_collection(state_path, simplify_tolerance)
        districts = load_feature_collection(district_path, simplify_tolerance)
        children = load_feature_collection(child_path, simplify_tolerance)

        state_index = build_spatial_index(states.features, level="state")
        district_groups = GroupingTable.from_features(districts.features)
        log_structured(
            "info",
            "District groups built",
            groups=len(district_groups),
            districts=len(districts),
        )

        stats = RunStats(
            total=len(children),
            skipped_structural=children.skipped,
            parents_dropped=state_index.dropped,
        )
        selected = children.features[:limit] if limit is not None else children.features
        matcher = CascadeMatcher(state_index, district_groups)
        _fold(matcher, selected, stats, output_path, sample_size, progress)
        return _finish(stats, "Cascade")
