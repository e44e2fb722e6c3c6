"""
Tile coverage of geometries on the web-mercator slippy-map grid.

Wraps mercantile's point/tile/bounds conversions and shapely predicates
into a single Tile representation, and rasterizes features into tiles
tagged with their geometry type.
"""

from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

import mercantile
from shapely.geometry import box
from shapely.geometry.base import BaseGeometry
from shapely.prepared import prep

from .errors import GeometryError
from .geojson_input import Feature

# Latitude limit of the web-mercator projection
MAX_LATITUDE = 85.0511287798066


class GeometryType(Enum):
    """Geometry types a tile can be tagged with."""
    POINT = 'Point'
    MULTI_POINT = 'MultiPoint'
    LINE_STRING = 'LineString'
    MULTI_LINE_STRING = 'MultiLineString'
    POLYGON = 'Polygon'
    MULTI_POLYGON = 'MultiPolygon'


class BBox(NamedTuple):
    """Geographic bounding box in degrees."""
    west: float
    south: float
    east: float
    north: float


class Tile(NamedTuple):
    """Slippy-map tile, optionally tagged with the geometry type covering it."""
    x: int
    y: int
    z: int
    tag: Optional[GeometryType] = None


def clamp_lnglat(lon: float, lat: float) -> Tuple[float, float]:
    """Clamp a coordinate to the area web-mercator tiles can represent."""
    lon = min(max(lon, -180.0), 180.0)
    lat = min(max(lat, -MAX_LATITUDE), MAX_LATITUDE)
    return lon, lat


def point_tile(lon: float, lat: float, zoom: int) -> Tile:
    """Return the tile containing a point."""
    t = mercantile.tile(*clamp_lnglat(lon, lat), zoom)
    return Tile(t.x, t.y, t.z)


def tile_bbox(tile) -> BBox:
    """Return the geographic bounds of a tile (anything with x, y, z)."""
    b = mercantile.bounds(tile.x, tile.y, tile.z)
    return BBox(b.west, b.south, b.east, b.north)


def geometry_tiles(geometry: BaseGeometry, zoom: int) -> List[Tile]:
    """Return the tiles a single geometry covers at a zoom level.

    Points map to the one tile containing them. For lines and polygons every
    tile in the geometry's bounding rectangle is tested, and kept when its
    box shares interior with the geometry (tiles the geometry only touches
    along an edge or corner are left out). Geometries that lie entirely on
    tile edges fall back to the tiles holding their vertices.

    Tiles are returned once each, in row-major order for lines and
    polygons and in coordinate order for points.
    """
    if geometry.geom_type in ('Point', 'MultiPoint'):
        return _vertex_tiles(geometry, zoom)

    west, south, east, north = geometry.bounds
    top_left = point_tile(west, north, zoom)
    bottom_right = point_tile(east, south, zoom)

    prepared = prep(geometry)
    tiles = []
    for y in range(top_left.y, bottom_right.y + 1):
        for x in range(top_left.x, bottom_right.x + 1):
            tile_box = box(*tile_bbox(Tile(x, y, zoom)))
            if prepared.intersects(tile_box) and not prepared.touches(tile_box):
                tiles.append(Tile(x, y, zoom))

    if not tiles:
        return _vertex_tiles(geometry, zoom)
    return tiles


def _vertex_tiles(geometry: BaseGeometry, zoom: int) -> List[Tile]:
    if hasattr(geometry, 'geoms'):
        coords = [c for part in geometry.geoms for c in _coords(part)]
    else:
        coords = _coords(geometry)

    seen = set()
    tiles = []
    for lon, lat in ((c[0], c[1]) for c in coords):
        tile = point_tile(lon, lat, zoom)
        if tile not in seen:
            seen.add(tile)
            tiles.append(tile)
    return tiles


def _coords(geometry: BaseGeometry) -> list:
    if geometry.geom_type == 'Polygon':
        return list(geometry.exterior.coords)
    return list(geometry.coords)


def geometry_type(feature: Feature) -> GeometryType:
    """Return the tag for a feature's geometry."""
    try:
        return GeometryType(feature.geometry.geom_type)
    except ValueError:
        raise GeometryError(
            f"Feature {feature.index} has unsupported geometry type {feature.geometry.geom_type!r}"
        ) from None


def rasterize(features: List[Feature], zoom: int) -> List[Tile]:
    """Cover every feature with tiles at ``zoom``, tagged by geometry type.

    Features are processed in order and duplicates are kept, so a tile
    covered by several features appears once per feature.
    """
    tiles = []
    for feature in features:
        tag = geometry_type(feature)
        for tile in geometry_tiles(feature.geometry, zoom):
            tiles.append(tile._replace(tag=tag))
    return tiles
