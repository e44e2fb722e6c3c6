"""Pytest configuration and shared fixtures for Geotype tests."""

import pytest
import tempfile
import json
from pathlib import Path


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def write_geojson(temp_dir):
    """Return a helper that writes a GeoJSON value to a file and returns its path."""
    def _write(data, name="input.geojson"):
        path = temp_dir / name
        with open(path, 'w') as f:
            json.dump(data, f)
        return str(path)
    return _write


def feature(geometry, **properties):
    """Wrap a geometry dict in a GeoJSON Feature."""
    return {"type": "Feature", "geometry": geometry, "properties": properties}


def collection(*features):
    """Wrap Features in a GeoJSON FeatureCollection."""
    return {"type": "FeatureCollection", "features": list(features)}


def point(lon, lat):
    return {"type": "Point", "coordinates": [lon, lat]}


def line(*coords):
    return {"type": "LineString", "coordinates": [list(c) for c in coords]}


def rectangle(west, south, east, north):
    """Polygon geometry dict for an axis-aligned rectangle."""
    return {
        "type": "Polygon",
        "coordinates": [[
            [west, south], [east, south], [east, north], [west, north], [west, south]
        ]],
    }


@pytest.fixture
def europe_polygon():
    """A polygon spanning most of Europe."""
    return collection(feature(rectangle(-10, 35, 30, 60), name="europe"))


def strip_ansi_codes(text):
    """Remove ANSI escape codes from text for testing."""
    import re
    ansi_escape = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')
    return ansi_escape.sub('', text)
