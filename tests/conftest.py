"""Pytest configuration and fixtures."""
import json
import pytest
from pathlib import Path
from shapely.geometry import Polygon, mapping
from adminlink.core.models import BoundaryFeature


def square(x0, y0, x1, y1):
    """Axis-aligned rectangle polygon."""
    return Polygon([(x0, y0), (x1, y0), (x1, y1), (x0, y1), (x0, y0)])


def geojson_feature(geometry, **properties):
    """GeoJSON feature mapping for a shapely geometry."""
    return {"type": "Feature", "properties": properties, "geometry": mapping(geometry)}


def write_collection(path: Path, features, **extra):
    """Write a FeatureCollection to disk."""
    path.write_text(json.dumps({"type": "FeatureCollection", "features": features, **extra}))
    return path


@pytest.fixture
def make_square():
    return square


@pytest.fixture
def make_boundary():
    """Build BoundaryFeature objects without going through a file."""
    counter = {"position": 0}

    def _make(geometry, **properties):
        position = counter["position"]
        counter["position"] += 1
        return BoundaryFeature(
            position=position,
            properties=properties,
            geometry=geometry,
            source_geometry=mapping(geometry) if geometry is not None else None,
        )

    return _make


@pytest.fixture
def make_feature():
    return geojson_feature


@pytest.fixture
def write_geojson():
    return write_collection


@pytest.fixture
def scenario_files(tmp_path):
    """
    One state covering [0,0]-[10,10], one district of it covering [0,0]-[5,5],
    and three children: inside the district, inside the state only, outside.
    """
    states = write_collection(tmp_path / "states.geojson", [
        geojson_feature(square(0, 0, 10, 10), shapeID="S-1", shapeName="StateA"),
    ])
    districts = write_collection(tmp_path / "districts.geojson", [
        geojson_feature(square(0, 0, 5, 5), shapeID="D-X", shapeName="DistX", parent_name="StateA"),
    ])
    children = write_collection(tmp_path / "children.geojson", [
        geojson_feature(square(1, 1, 2, 2), shapeID="C-1", shapeName="Child One"),
        geojson_feature(square(6, 6, 7, 7), shapeID="C-2", shapeName="Child Two"),
        geojson_feature(square(20, 20, 21, 21), shapeID="C-3", shapeName="Child Three"),
    ])
    return {
        "states": states,
        "districts": districts,
        "children": children,
        "output": tmp_path / "out" / "adm3_with_parent.geojson",
    }
