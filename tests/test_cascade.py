"""Tests for the state -> district cascade."""
import pytest
from shapely.geometry import MultiPolygon, Point
from adminlink.core import cascade
from adminlink.core.cascade import CascadeMatcher, first_match
from adminlink.core.errors import GeometryError
from adminlink.core.geometry import intersects
from adminlink.core.grouping import GroupingTable
from adminlink.core.models import MatchOutcome
from adminlink.core.spatial_index import build_spatial_index


@pytest.fixture
def state_a(make_boundary, make_square):
    return make_boundary(make_square(0, 0, 10, 10), shapeID="S-1", shapeName="StateA")


@pytest.fixture
def dist_x(make_boundary, make_square):
    return make_boundary(make_square(0, 0, 5, 5), shapeID="D-X", shapeName="DistX", parent_name="StateA")


@pytest.fixture
def matcher(state_a, dist_x):
    return CascadeMatcher(build_spatial_index([state_a]), GroupingTable.from_features([dist_x]))


def test_child_inside_district(matcher, make_boundary, make_square):
    child = make_boundary(make_square(1, 1, 2, 2), shapeID="C-1", shapeName="Child One")
    resolution = matcher.resolve(child)
    record = resolution.record

    assert record.outcome == MatchOutcome.FULL_MATCH
    assert record.properties["parent_id"] == "D-X"
    assert record.properties["parent_name"] == "DistX"
    assert record.properties["parent_state"] == "StateA"
    assert record.properties["state_name"] is None
    assert record.bbox.as_list() == [1.0, 1.0, 2.0, 2.0]
    assert resolution.geometry_errors == 0


def test_child_in_state_outside_districts(matcher, make_boundary, make_square):
    child = make_boundary(make_square(6, 6, 7, 7), shapeID="C-2", shapeName="Child Two")
    record = matcher.resolve(child).record

    assert record.outcome == MatchOutcome.STATE_ONLY
    assert record.properties["parent_name"] == "StateA"
    assert record.properties["state_name"] == "StateA"
    assert record.properties["parent_id"] is None


def test_child_outside_every_state_skips_district_lookup(matcher, make_boundary, make_square):
    child = make_boundary(make_square(20, 20, 21, 21), shapeID="C-3", shapeName="Child Three")
    record = matcher.resolve(child).record

    assert record.outcome == MatchOutcome.UNMATCHED
    assert record.properties["parent_id"] is None
    assert record.properties["parent_name"] is None
    assert record.properties["parent_state"] is None
    assert matcher.district_groups.lookups == 0


def test_child_without_polygons_is_unmatched(matcher, make_boundary):
    child = make_boundary(Point(1, 1), shapeID="C-P", shapeName="Point Child")
    record = matcher.resolve(child).record

    assert record.outcome == MatchOutcome.UNMATCHED
    assert record.properties["parent_name"] is None
    assert matcher.district_groups.lookups == 0


def test_any_part_of_multipolygon_matches(matcher, make_boundary, make_square):
    child = make_boundary(
        MultiPolygon([make_square(40, 40, 41, 41), make_square(2, 2, 3, 3)]),
        shapeID="C-M",
        shapeName="Split Child",
    )
    record = matcher.resolve(child).record

    assert record.outcome == MatchOutcome.FULL_MATCH
    assert record.properties["parent_id"] == "D-X"
    assert record.bbox.as_list() == [2.0, 2.0, 41.0, 41.0]


def test_first_district_in_group_order_wins(state_a, make_boundary, make_square):
    first = make_boundary(make_square(0, 0, 5, 5), shapeID="D-1", shapeName="First", parent_name="StateA")
    second = make_boundary(make_square(0, 0, 6, 6), shapeID="D-2", shapeName="Second", parent_name="statea")
    matcher = CascadeMatcher(build_spatial_index([state_a]), GroupingTable.from_features([first, second]))

    child = make_boundary(make_square(1, 1, 2, 2), shapeID="C-1", shapeName="Child")
    assert matcher.resolve(child).record.properties["parent_id"] == "D-1"


def test_district_overlap_counts_as_match(matcher, make_boundary, make_square):
    child = make_boundary(make_square(4, 4, 6, 6), shapeID="C-O", shapeName="Straddler")
    record = matcher.resolve(child).record
    assert record.outcome == MatchOutcome.FULL_MATCH
    assert record.properties["parent_name"] == "DistX"


def test_district_group_uses_normalized_state_name(make_boundary, make_square):
    state = make_boundary(make_square(0, 0, 10, 10), shapeID="S-1", shapeName="Madhya Pradesh")
    district = make_boundary(make_square(0, 0, 5, 5), shapeID="D-1", shapeName="Bhopal",
                             parent_name="MADHYA-PRADESH")
    matcher = CascadeMatcher(build_spatial_index([state]), GroupingTable.from_features([district]))

    child = make_boundary(make_square(1, 1, 2, 2), shapeID="C-1", shapeName="Child")
    record = matcher.resolve(child).record
    assert record.properties["parent_name"] == "Bhopal"
    assert record.properties["parent_state"] == "Madhya Pradesh"


def test_geometry_error_on_one_pair_does_not_abort(monkeypatch, matcher, make_boundary, make_square):
    def flaky_within(a, b):
        if a.bounds[0] == 1.0:
            raise GeometryError("side location conflict")
        return a.within(b)

    monkeypatch.setattr(cascade, "STATE_PREDICATES", (flaky_within, intersects))
    child = make_boundary(
        MultiPolygon([make_square(1, 1, 2, 2), make_square(3, 3, 4, 4)]),
        shapeID="C-F",
        shapeName="Flaky",
    )
    resolution = matcher.resolve(child)

    assert resolution.geometry_errors == 1
    assert resolution.record.outcome == MatchOutcome.FULL_MATCH


def test_geometry_error_on_every_pair_leaves_child_unmatched(monkeypatch, matcher, make_boundary, make_square):
    def broken(a, b):
        raise GeometryError("invalid ring")

    monkeypatch.setattr(cascade, "STATE_PREDICATES", (broken,))
    child = make_boundary(make_square(1, 1, 2, 2), shapeID="C-B", shapeName="Broken")
    resolution = matcher.resolve(child)

    assert resolution.geometry_errors == 1
    assert resolution.record.outcome == MatchOutcome.UNMATCHED


def test_first_match_stops_at_first_success(make_boundary, make_square):
    child_parts = [make_square(1, 1, 2, 2)]
    a = make_boundary(make_square(0, 0, 10, 10), shapeName="A")
    b = make_boundary(make_square(0, 0, 10, 10), shapeName="B")
    seen = []

    def recording(x, y):
        seen.append(y)
        return True

    assert first_match(child_parts, [a, b], (recording,), lambda c, e: None) is a
    assert len(seen) == 1


def test_resolve_is_repeatable(matcher, make_boundary, make_square):
    child = make_boundary(make_square(1, 1, 2, 2), shapeID="C-1", shapeName="Child One")
    first = matcher.resolve(child).record.properties
    second = matcher.resolve(child).record.properties
    assert first == second
    assert "parent_id" not in child.properties
