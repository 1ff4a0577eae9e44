"""Name-keyed grouping of already-linked boundary features."""
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from adminlink.core.models import BoundaryFeature
from adminlink.core.normalization import UNMATCHED_KEY, normalize_key

LabelSelector = Callable[[BoundaryFeature], Optional[str]]


def parent_name_of(feature: BoundaryFeature) -> Optional[str]:
    """Default selector: the name of the feature's own parent."""
    return feature.properties.get("parent_name")


def group_by(
    features: Iterable[BoundaryFeature],
    label_selector: LabelSelector = parent_name_of,
) -> Dict[str, Tuple[BoundaryFeature, ...]]:
    """
    Partition features by the normalized key of a label.

    Features without a usable label are left out of every group.

    Args:
        features: Features of one level, in source order
        label_selector: Returns the label to group by

    Returns:
        Mapping of normalized key to features in insertion order
    """
    groups: Dict[str, List[BoundaryFeature]] = {}
    for feature in features:
        key = normalize_key(label_selector(feature))
        if key == UNMATCHED_KEY:
            continue
        groups.setdefault(key, []).append(feature)
    return {key: tuple(members) for key, members in groups.items()}


class GroupingTable:
    """Read-only lookup of "all features whose parent is named X"."""

    def __init__(self, groups: Mapping[str, Tuple[BoundaryFeature, ...]]):
        self._groups = dict(groups)
        self.lookups = 0

    @classmethod
    def from_features(
        cls,
        features: Iterable[BoundaryFeature],
        label_selector: LabelSelector = parent_name_of,
    ) -> "GroupingTable":
        return cls(group_by(features, label_selector))

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, label) -> bool:
        return normalize_key(label) in self._groups

    def lookup(self, label: Optional[str]) -> Tuple[BoundaryFeature, ...]:
        """Members of the group for ``label``; the label is normalized here."""
        self.lookups += 1
        key = normalize_key(label)
        if key == UNMATCHED_KEY:
            return ()
        return self._groups.get(key, ())

