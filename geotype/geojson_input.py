"""
Loading of GeoJSON files into a flat list of simple features.

Any GeoJSON value (FeatureCollection, Feature or bare Geometry) is
normalized to a list of features, and multi-part geometries are exploded so
every feature carries exactly one Point, LineString or Polygon.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List, NamedTuple

from shapely.errors import ShapelyError
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from .errors import GeometryError, InputError

GEOMETRY_TYPES = (
    'Point', 'MultiPoint',
    'LineString', 'MultiLineString',
    'Polygon', 'MultiPolygon',
    'GeometryCollection',
)


class Feature(NamedTuple):
    """A single geometry with the properties of the feature it came from.

    ``index`` is the position of the source feature in the input, kept so
    errors can point at the offending feature after flattening.
    """
    geometry: BaseGeometry
    properties: Dict[str, Any]
    index: int


def load_geojson(path: str) -> List[Feature]:
    """Read a GeoJSON file and return its flattened features."""
    file_path = Path(path)
    if not file_path.exists():
        raise InputError(f"File not found: {path}")

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InputError(f"Invalid JSON in {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Could not read {path}: {e}") from e

    return flatten(normalize(data))


def normalize(data: Any) -> List[Dict[str, Any]]:
    """Coerce a GeoJSON value to a list of Feature dicts."""
    if not isinstance(data, dict):
        raise InputError("Input is not a GeoJSON object")

    geojson_type = data.get('type')
    if geojson_type == 'FeatureCollection':
        features = data.get('features')
        if not isinstance(features, list):
            raise InputError("FeatureCollection has no 'features' array")
        for i, feature in enumerate(features):
            if not isinstance(feature, dict) or feature.get('type') != 'Feature':
                raise InputError(f"Item {i} of the FeatureCollection is not a Feature")
        return features
    elif geojson_type == 'Feature':
        return [data]
    elif geojson_type in GEOMETRY_TYPES:
        return [{'type': 'Feature', 'geometry': data, 'properties': {}}]
    else:
        raise InputError(f"Unsupported GeoJSON type: {geojson_type!r}")


def flatten(features: List[Dict[str, Any]]) -> List[Feature]:
    """Convert Feature dicts to simple shapely features.

    Multi-part geometries and geometry collections are split into one
    feature per part, in order.
    """
    flat = []
    for index, feature in enumerate(features):
        geometry = feature.get('geometry')
        if geometry is None:
            print(f"Warning: Feature {index} has no geometry, skipping", file=sys.stderr)
            continue

        properties = feature.get('properties') or {}
        geom = _to_shape(geometry, index)
        for part in explode(geom):
            flat.append(Feature(part, properties, index))
    return flat


def explode(geom: BaseGeometry) -> Iterator[BaseGeometry]:
    """Yield the simple parts of a geometry, recursing into collections."""
    if hasattr(geom, 'geoms'):
        for part in geom.geoms:
            if not part.is_empty:
                yield from explode(part)
    else:
        yield geom


def _to_shape(geometry: Any, index: int) -> BaseGeometry:
    if not isinstance(geometry, dict):
        raise GeometryError(f"Feature {index} has a malformed geometry")

    geom_type = geometry.get('type')
    if geom_type not in GEOMETRY_TYPES:
        raise GeometryError(f"Feature {index} has unsupported geometry type {geom_type!r}")

    try:
        geom = shape(geometry)
    except (ShapelyError, ValueError, TypeError, IndexError, KeyError) as e:
        raise GeometryError(f"Feature {index} has invalid {geom_type} coordinates: {e}") from e

    if geom.is_empty:
        raise GeometryError(f"Feature {index} has an empty {geom_type} geometry")
    return geom
